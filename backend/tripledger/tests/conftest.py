"""
Shared fixtures: in-memory database, live-update hub, users and a trip.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import tripledger.models  # noqa: F401
from tripledger.core.security import get_password_hash
from tripledger.db.base import Base
from tripledger.db.session import get_db
from tripledger.main import app
from tripledger.models.user import User
from tripledger.schemas.trip import TripCreate
from tripledger.services import member_registry
from tripledger.services.notifier import TripUpdateHub


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def hub():
    return TripUpdateHub()


@pytest.fixture
def client(session_factory, hub):
    """API client wired to the test database and hub."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.update_hub = hub
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Factory creating a user with password 'secret123'."""
    def _make_user(username: str) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            hashed_password=get_password_hash("secret123"),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")


@pytest.fixture
def trip(db, alice):
    """Trip organized by alice with a total budget of 1000."""
    return member_registry.create_trip(
        TripCreate(
            name="Goa",
            location="Goa, India",
            start_date=date(2030, 1, 10),
            number_of_members=3,
            total_budget=Decimal("1000"),
        ),
        alice.id,
        db,
    )


@pytest.fixture
def join(db, hub):
    """Join a user to a trip and return the membership."""
    def _join(trip, user):
        return member_registry.join(trip.join_code, user.id, db, hub)
    return _join


@pytest.fixture
def members(trip, alice, bob, join, db):
    """alice (organizer) and bob (member) of ``trip``."""
    return member_registry.get_member(trip.id, alice.id, db), join(trip, bob)

