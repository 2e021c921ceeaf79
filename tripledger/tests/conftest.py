"""
Shared fixtures: an in-memory SQLite database recreated for every test.
"""
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import tripledger.models  # noqa: F401
from tripledger.db.base import Base
from tripledger.db.session import get_db
from tripledger.main import app
from tripledger.models.trip import TripParticipant, ParticipantRole
from tripledger.models.user import User
from tripledger.schemas.trip import TripCreate
from tripledger.services import trip_service

TEST_DATABASE_URL = "sqlite://"
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def db_session() -> Session:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session):
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    def _make_user(email: str, full_name: str = None) -> User:
        # Service tests never log in, so the hash only has to be non-empty.
        user = User(email=email, full_name=full_name, hashed_password="not-a-real-hash")
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_trip(db_session):
    def _make_trip(owner: User, title: str = "Lisbon Getaway"):
        trip_in = TripCreate(
            title=title,
            destination="Lisbon",
            start_date=date(2026, 7, 1),
            end_date=date(2026, 7, 10),
        )
        return trip_service.create_trip(db_session, owner, trip_in)
    return _make_trip


@pytest.fixture
def add_member(db_session):
    def _add_member(trip, user: User, role: ParticipantRole = ParticipantRole.PARTICIPANT) -> TripParticipant:
        participant = TripParticipant(trip_id=trip.id, user_id=user.id, role=role)
        db_session.add(participant)
        db_session.commit()
        db_session.refresh(participant)
        return participant
    return _add_member


@pytest.fixture
def crew(make_user, make_trip, add_member):
    """A trip with one user per access level."""
    owner = make_user("owner@example.com", "Olivia Owner")
    organizer = make_user("organizer@example.com")
    participant = make_user("participant@example.com")
    guest = make_user("guest@example.com")
    outsider = make_user("outsider@example.com")

    trip = make_trip(owner)
    add_member(trip, organizer, ParticipantRole.ORGANIZER)
    add_member(trip, participant, ParticipantRole.PARTICIPANT)
    add_member(trip, guest, ParticipantRole.GUEST)

    return {
        "trip": trip,
        "owner": owner,
        "organizer": organizer,
        "participant": participant,
        "guest": guest,
        "outsider": outsider,
    }
