"""
Tests for authentication endpoints.
"""
from tripledger.tests.helpers import auth_headers


def test_signup(client):
    """Test user signup."""
    response = client.post(
        "/api/auth/signup",
        json={
            "username": "testuser",
            "email": "test@example.com",
            "password": "testpassword123"
        }
    )
    assert response.status_code == 201
    assert response.json()["username"] == "testuser"
    assert "hashed_password" not in response.json()


def test_signup_duplicate_username(client, alice):
    """Test signup with a taken username."""
    response = client.post(
        "/api/auth/signup",
        json={
            "username": "alice",
            "email": "other@example.com",
            "password": "testpassword123"
        }
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Username already exists"


def test_signup_short_password(client):
    """Test signup schema validation is reported as 400."""
    response = client.post(
        "/api/auth/signup",
        json={
            "username": "shorty",
            "email": "shorty@example.com",
            "password": "123"
        }
    )
    assert response.status_code == 400


def test_login(client):
    """Test user login."""
    # First signup
    client.post(
        "/api/auth/signup",
        json={
            "username": "testuser2",
            "email": "test2@example.com",
            "password": "testpassword123"
        }
    )

    # Then login
    response = client.post(
        "/api/auth/login",
        json={
            "username": "testuser2",
            "password": "testpassword123"
        }
    )
    assert response.status_code == 200
    assert "access_token" in response.json()

    token = response.json()["access_token"]
    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["username"] == "testuser2"


def test_login_invalid_credentials(client):
    """Test login with invalid credentials."""
    response = client.post(
        "/api/auth/login",
        json={
            "username": "nonexistent",
            "password": "wrongpassword"
        }
    )
    assert response.status_code == 401


def test_requests_without_token_are_rejected(client):
    """Test protected routes need a bearer token."""
    assert client.get("/api/trips").status_code == 401
    assert client.get("/api/users/me", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_inactive_user_token_is_rejected(client, db, alice):
    """Test tokens of deactivated users stop working."""
    alice.is_active = False
    db.commit()

    assert client.get("/api/users/me", headers=auth_headers(alice)).status_code == 401
