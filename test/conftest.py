import os
import tempfile
from datetime import date, timedelta

# Must be set before config is imported
os.environ.setdefault("LOG_FILE", os.path.join(tempfile.gettempdir(), "missing_person_tracker_test.log"))
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

import config
from database.connection import Database
from services.auth_service import AuthService

PASSWORD = "secret123"


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'tracker.db'}")
    db.create_tables()
    config.db = db
    yield db
    config.db = None
    db.engine.dispose()


@pytest.fixture
def session(database):
    with database.get_session() as s:
        yield s


@pytest.fixture
def client(database):
    from app import app
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def register(client, full_name, email, password=PASSWORD, phone=None):
    """Register an account and return (token, user)."""
    response = client.post("/api/auth/register", json={
        "full_name": full_name,
        "email": email,
        "password": password,
        "phone": phone,
    })
    assert response.status_code == 201, response.text
    body = response.json()
    return body["token"], body["user"]


def case_payload(**overrides):
    payload = {
        "full_name": "Jane Doe",
        "age": 34,
        "gender": "female",
        "last_seen_location": "Central Station",
        "last_seen_date": (date.today() - timedelta(days=3)).isoformat(),
        "contact_name": "John Doe",
        "contact_phone": "5551234567",
    }
    payload.update(overrides)
    return payload


def create_case(client, token, **overrides):
    response = client.post("/api/missing-persons", json=case_payload(**overrides), headers=auth_headers(token))
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
def alice(client):
    token, user = register(client, "Alice Reporter", "alice@example.com", phone="5550001111")
    return {"token": token, "user": user, "headers": auth_headers(token)}


@pytest.fixture
def bob(client):
    token, user = register(client, "Bob Helper", "bob@example.com")
    return {"token": token, "user": user, "headers": auth_headers(token)}


@pytest.fixture
def admin(client, database):
    with database.get_session() as s:
        AuthService.create_user(s, "Ada Admin", "admin@example.com", PASSWORD, is_admin=True)
    response = client.post("/api/auth/login", json={"email": "admin@example.com", "password": PASSWORD})
    assert response.status_code == 200, response.text
    body = response.json()
    return {"token": body["token"], "user": body["user"], "headers": auth_headers(body["token"])}
