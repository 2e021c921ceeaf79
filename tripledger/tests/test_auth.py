"""
Tests for authentication endpoints.
"""
from datetime import date, timedelta

from jose import jwt

from tripledger.core.config import settings
from tripledger.core.security import decode_access_token
from tripledger.core.utils import utcnow
from tripledger.models.notification import Notification, NotificationType
from tripledger.schemas.trip import TripCreate
from tripledger.services import membership_service, trip_service


def test_signup(client):
    """Test user signup."""
    response = client.post(
        "/api/auth/signup",
        json={
            "email": "Test@Example.com",
            "full_name": "Test User",
            "password": "testpassword123"
        }
    )
    assert response.status_code == 201
    assert response.json()["email"] == "test@example.com"


def test_signup_duplicate_email(client):
    payload = {"email": "dup@example.com", "password": "testpassword123"}
    assert client.post("/api/auth/signup", json=payload).status_code == 201

    response = client.post("/api/auth/signup", json=payload)
    assert response.status_code == 409
    assert response.json()["error"] == "Email already exists"


def test_login(client):
    """Test user login."""
    client.post(
        "/api/auth/signup",
        json={"email": "test2@example.com", "password": "testpassword123"}
    )

    response = client.post(
        "/api/auth/login",
        json={"email": "test2@example.com", "password": "testpassword123"}
    )
    assert response.status_code == 200
    token = response.json()["access_token"]

    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "test2@example.com"


def test_login_invalid_credentials(client):
    """Test login with invalid credentials."""
    response = client.post(
        "/api/auth/login",
        json={"email": "nonexistent@example.com", "password": "wrongpassword"}
    )
    assert response.status_code == 401


def test_protected_route_requires_token(client):
    assert client.get("/api/trips").status_code == 401
    response = client.get("/api/trips", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_signup_surfaces_waiting_invitations(client, db_session, make_user):
    owner = make_user("owner@example.com")
    trip = trip_service.create_trip(db_session, owner, TripCreate(
        title="Alps", destination="Chamonix", start_date=date(2026, 12, 1), end_date=date(2026, 12, 8)
    ))
    membership_service.create_invitation(db_session, trip.id, owner.id, "newcomer@example.com")

    response = client.post(
        "/api/auth/signup",
        json={"email": "newcomer@example.com", "password": "testpassword123"}
    )
    assert response.status_code == 201

    notifications = db_session.query(Notification).filter(
        Notification.user_id == response.json()["id"]
    ).all()
    assert [n.type for n in notifications] == [NotificationType.TRIP_INVITE]


def test_token_subject_is_the_user_id(client):
    signup = client.post(
        "/api/auth/signup",
        json={"email": "subject@example.com", "password": "testpassword123"}
    )
    response = client.post(
        "/api/auth/login",
        json={"email": "subject@example.com", "password": "testpassword123"}
    )
    token = response.json()["access_token"]
    assert decode_access_token(token) == signup.json()["id"]


def test_token_without_numeric_subject_is_rejected(client):
    client.post("/api/auth/signup", json={"email": "mail@example.com", "password": "testpassword123"})
    token = jwt.encode(
        {"sub": "mail@example.com", "exp": utcnow() + timedelta(hours=1)},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )
    response = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
