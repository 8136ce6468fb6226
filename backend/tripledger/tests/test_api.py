"""
End-to-end tests for the trip, budget, spending, balance and live-update routes.
"""
import pytest
from decimal import Decimal
from fastapi import WebSocketDisconnect
from tripledger.core.security import create_access_token
from tripledger.tests.helpers import auth_headers


def _create_trip(client, user, **overrides):
    payload = {
        "name": "Ladakh",
        "location": "Leh",
        "start_date": "2030-06-01",
        "number_of_members": 4,
        "total_budget": "2000",
    }
    payload.update(overrides)
    return client.post("/api/trips", json=payload, headers=auth_headers(user))


def _members(client, trip_id, user):
    response = client.get(f"/api/trips/{trip_id}/members", headers=auth_headers(user))
    return {m["username"]: m for m in response.json()}


@pytest.fixture
def api_trip(client, alice, bob):
    """Trip created by alice over the API that bob joined by code."""
    trip = _create_trip(client, alice).json()
    joined = client.post("/api/trips/join", json={"join_code": trip["join_code"].lower()}, headers=auth_headers(bob))
    assert joined.status_code == 200
    return trip


def test_create_and_list_trips(client, alice):
    """Test creating a trip makes the creator its organizer."""
    response = _create_trip(client, alice)

    assert response.status_code == 201
    trip = response.json()
    assert trip["status"] == "upcoming"
    assert trip["organizer_id"] == alice.id
    assert [t["id"] for t in client.get("/api/trips", headers=auth_headers(alice)).json()] == [trip["id"]]
    assert _members(client, trip["id"], alice)["alice"]["role"] == "organizer"


def test_join_with_bad_code(client, bob):
    """Test joining with an unknown code returns 404."""
    response = client.post("/api/trips/join", json={"join_code": "ZZZZZZZZ"}, headers=auth_headers(bob))

    assert response.status_code == 404


def test_join_twice(client, api_trip, bob):
    """Test joining twice returns 400."""
    response = client.post("/api/trips/join", json={"join_code": api_trip["join_code"]}, headers=auth_headers(bob))

    assert response.status_code == 400


def test_budget_flow(client, api_trip, alice, bob):
    """Test adding and removing a budget item through the API."""
    trip_id = api_trip["id"]

    added = client.post(
        f"/api/trips/{trip_id}/budget",
        json={"category": "Food", "description": "Meals", "amount": "200"},
        headers=auth_headers(bob),
    )
    assert added.status_code == 200
    assert Decimal(added.json()["share_per_member"]) == Decimal("100")

    members = _members(client, trip_id, alice)
    assert Decimal(members["alice"]["credit_amount"]) == Decimal("100")
    assert Decimal(members["bob"]["balance"]) == Decimal("100")

    budget = client.get(f"/api/trips/{trip_id}/budget", headers=auth_headers(alice)).json()
    assert len(budget["items"]) == 1
    assert Decimal(budget["total_budget"]) == Decimal("2000")

    removed = client.delete(f"/api/trips/{trip_id}/budget/{added.json()['id']}", headers=auth_headers(alice))
    assert removed.status_code == 200
    assert Decimal(_members(client, trip_id, alice)["bob"]["balance"]) == Decimal("0")


def test_budget_validation_errors(client, api_trip, alice, carol):
    """Test negative amounts, outsiders and unknown items."""
    trip_id = api_trip["id"]

    negative = client.post(
        f"/api/trips/{trip_id}/budget",
        json={"category": "Food", "description": "Meals", "amount": "-1"},
        headers=auth_headers(alice),
    )
    assert negative.status_code == 400

    outsider = client.get(f"/api/trips/{trip_id}/budget", headers=auth_headers(carol))
    assert outsider.status_code == 403

    missing = client.delete(f"/api/trips/{trip_id}/budget/999", headers=auth_headers(alice))
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Budget item not found"


def test_spending_flow(client, api_trip, alice, bob):
    """Test recording a split expense and reading balances, totals and settlement."""
    trip_id = api_trip["id"]
    members = _members(client, trip_id, alice)

    response = client.post(
        f"/api/trips/{trip_id}/spending",
        json={
            "description": "Jeep",
            "amount": "90",
            "date": "2030-06-02",
            "split_type": "custom",
            "participant_shares": [
                {"member_id": members["alice"]["id"], "amount": "30"},
                {"member_id": members["bob"]["id"], "amount": "60"},
            ],
        },
        headers=auth_headers(bob),
    )
    assert response.status_code == 200
    assert response.json()["user_id"] == bob.id
    assert len(response.json()["participant_shares"]) == 2

    listed = client.get(f"/api/trips/{trip_id}/spending", headers=auth_headers(alice)).json()
    assert [e["description"] for e in listed] == ["Jeep"]

    balances = {b["username"]: b for b in client.get(f"/api/trips/{trip_id}/balances", headers=auth_headers(alice)).json()}
    assert Decimal(balances["bob"]["balance"]) == Decimal("-60")

    totals = client.get(f"/api/trips/{trip_id}/totals", headers=auth_headers(alice)).json()
    assert Decimal(totals["remaining"]) == Decimal("1910")

    settlement = client.get(f"/api/trips/{trip_id}/settlement", headers=auth_headers(alice)).json()
    assert settlement["participant_count"] == 2
    # bob fronted 90 of which alice owes 30
    assert [(t["from_username"], t["to_username"], Decimal(t["amount"])) for t in settlement["transfers"]] == [
        ("alice", "bob", Decimal("30")),
    ]


def test_spending_errors(client, api_trip, alice):
    """Test mismatched splits and unknown participants return 400."""
    trip_id = api_trip["id"]
    members = _members(client, trip_id, alice)
    base = {"description": "Fuel", "amount": "200", "date": "2030-06-02", "split_type": "custom"}

    mismatch = client.post(
        f"/api/trips/{trip_id}/spending",
        json={**base, "participant_shares": [
            {"member_id": members["alice"]["id"], "amount": "100"},
            {"member_id": members["bob"]["id"], "amount": "50"},
        ]},
        headers=auth_headers(alice),
    )
    assert mismatch.status_code == 400

    stranger = client.post(
        f"/api/trips/{trip_id}/spending",
        json={**base, "participant_shares": [{"member_id": 9999, "amount": "200"}]},
        headers=auth_headers(alice),
    )
    assert stranger.status_code == 400

    empty = client.post(
        f"/api/trips/{trip_id}/spending",
        json={**base, "participant_shares": []},
        headers=auth_headers(alice),
    )
    assert empty.status_code == 400


def test_roles_and_overrides(client, api_trip, alice, bob):
    """Test role changes and balance overrides are gated by role."""
    trip_id = api_trip["id"]
    members = _members(client, trip_id, alice)
    alice_id, bob_id = members["alice"]["id"], members["bob"]["id"]

    denied = client.put(
        f"/api/trips/{trip_id}/members/{alice_id}/role", json={"role": "member"}, headers=auth_headers(bob)
    )
    assert denied.status_code == 403

    last_organizer = client.put(
        f"/api/trips/{trip_id}/members/{alice_id}/role", json={"role": "member"}, headers=auth_headers(alice)
    )
    assert last_organizer.status_code == 403

    override_denied = client.put(
        f"/api/trips/{trip_id}/members/{alice_id}/balance",
        json={"credit_amount": "10", "spent_amount": "0"},
        headers=auth_headers(bob),
    )
    assert override_denied.status_code == 403

    override = client.put(
        f"/api/trips/{trip_id}/members/{bob_id}/balance",
        json={"credit_amount": "250", "spent_amount": "40"},
        headers=auth_headers(alice),
    )
    assert override.status_code == 200
    assert Decimal(override.json()["balance"]) == Decimal("210")

    promoted = client.put(
        f"/api/trips/{trip_id}/members/{bob_id}/role", json={"role": "co_organizer"}, headers=auth_headers(alice)
    )
    assert promoted.json()["role"] == "co_organizer"

    reconciled = client.post(f"/api/trips/{trip_id}/balances/reconcile", headers=auth_headers(bob))
    assert reconciled.json() == {"repaired_member_ids": []}


def test_add_member_by_username(client, api_trip, alice, carol):
    """Test organizers can add existing users by username."""
    response = client.post(
        f"/api/trips/{api_trip['id']}/members", json={"username": "carol"}, headers=auth_headers(alice)
    )

    assert response.status_code == 201
    assert response.json()["user_id"] == carol.id


def test_notifications(client, api_trip, alice):
    """Test listing and reading notifications."""
    notifications = client.get("/api/notifications", headers=auth_headers(alice)).json()
    assert notifications[0]["type"] == "member_joined"

    read = client.put(f"/api/notifications/{notifications[0]['id']}/read", headers=auth_headers(alice))
    assert read.json()["read"] is True


def test_delete_trip(client, api_trip, alice, bob):
    """Test only the organizer can delete a trip."""
    trip_id = api_trip["id"]

    assert client.delete(f"/api/trips/{trip_id}", headers=auth_headers(bob)).status_code == 403
    assert client.delete(f"/api/trips/{trip_id}", headers=auth_headers(alice)).status_code == 200
    assert client.get(f"/api/trips/{trip_id}", headers=auth_headers(alice)).status_code == 404


def test_live_updates(client, api_trip, alice, bob):
    """Test a connected member receives budget updates."""
    trip_id = api_trip["id"]
    token = create_access_token(alice.id, alice.username)

    with client.websocket_connect(f"/api/ws/{trip_id}?token={token}") as websocket:
        client.post(
            f"/api/trips/{trip_id}/budget",
            json={"category": "Stay", "description": "Camp", "amount": "500"},
            headers=auth_headers(bob),
        )
        event = websocket.receive_json()

    assert event["type"] == "budget_updated"
    assert "Stay" in event["message"]


def test_live_updates_need_membership(client, api_trip, carol):
    """Test outsiders and anonymous clients cannot subscribe."""
    token = create_access_token(carol.id, carol.username)

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"/api/ws/{api_trip['id']}?token={token}"):
            pass

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"/api/ws/{api_trip['id']}"):
            pass


def test_update_trip_status(client, api_trip, alice, bob):
    """Test members can move a trip to another status and everyone is told."""
    trip_id = api_trip["id"]

    response = client.put(f"/api/trips/{trip_id}/status", json={"status": "current"}, headers=auth_headers(bob))

    assert response.status_code == 200
    assert response.json()["status"] == "current"
    latest = client.get("/api/notifications", headers=auth_headers(alice)).json()[0]
    assert latest["type"] == "trip_start"
    assert latest["message"] == "Ladakh is now current"


def test_update_trip_status_rejects_unknown_status(client, api_trip, alice, carol):
    """Test invalid statuses and outsiders are rejected."""
    trip_id = api_trip["id"]

    assert client.put(
        f"/api/trips/{trip_id}/status", json={"status": "settled"}, headers=auth_headers(alice)
    ).status_code == 400
    assert client.put(
        f"/api/trips/{trip_id}/status", json={"status": "past"}, headers=auth_headers(carol)
    ).status_code == 403


def test_update_trip(client, api_trip, alice, bob):
    """Test only the organizer can edit trip details."""
    trip_id = api_trip["id"]
    changes = {
        "name": "Ladakh & Spiti",
        "location": "Leh",
        "start_date": "2030-06-03",
        "number_of_members": 5,
        "total_budget": "2500",
    }

    assert client.put(f"/api/trips/{trip_id}", json=changes, headers=auth_headers(bob)).status_code == 403

    response = client.put(f"/api/trips/{trip_id}", json=changes, headers=auth_headers(alice))
    assert response.status_code == 200
    assert response.json()["name"] == "Ladakh & Spiti"
    assert response.json()["join_code"] == api_trip["join_code"]
    assert Decimal(response.json()["total_budget"]) == Decimal("2500")
