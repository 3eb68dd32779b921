"""
Tests for the event HTTP API
"""

import time
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.core.db import Base, get_db
from app.models import Event, LoginSession, Manage, Member
from main import app

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_event_routes.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def client():
    """Test client backed by a fresh database with two logged-in members"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    db.add(Member(member_id="K100", name="Alice", email="alice@example.com"))
    db.add(Member(member_id="K200", name="Bob"))
    db.add(LoginSession(token="token-alice", member_id="K100"))
    db.add(LoginSession(token="token-bob", member_id="K200"))
    db.commit()
    db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=engine)

ALICE = {"Authorization": "Bearer token-alice"}
BOB = {"Authorization": "Bearer token-bob"}

EVENT_BODY = {
    "type": "wedding",
    "datetime": "2999-05-01T13:00:00.000",
    "location": "Seoul",
    "host": {"groom": "Kim", "bride": "Lee"},
}

def create_event(client, headers=ALICE, body=EVENT_BODY) -> str:
    response = client.post("/api/events", json=body, headers=headers)
    assert response.status_code == 200
    return response.json()["event_id"]

def test_requires_bearer_token(client):
    response = client.get("/api/events/progressing")
    assert response.status_code in (401, 403)

def test_rejects_unknown_token(client):
    response = client.get("/api/events/progressing", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401

def test_create_event_returns_event(client):
    response = client.post("/api/events", json=EVENT_BODY, headers=ALICE)

    assert response.status_code == 200
    data = response.json()
    assert data["event_id"]
    assert data["type"] == "wedding"
    assert data["datetime"] == "2999-05-01T13:00:00.000"
    assert data["location"] == "Seoul"
    assert data["host"] == '{"groom": "Kim", "bride": "Lee"}'

def test_create_event_rejects_bad_timestamp(client):
    body = dict(EVENT_BODY, datetime="next tuesday")
    response = client.post("/api/events", json=body, headers=ALICE)
    assert response.status_code == 422

def test_create_event_rejects_missing_field(client):
    body = {k: v for k, v in EVENT_BODY.items() if k != "location"}
    response = client.post("/api/events", json=body, headers=ALICE)
    assert response.status_code == 422

def test_get_event_gated_by_authority(client):
    event_id = create_event(client)

    response = client.get(f"/api/events/{event_id}", headers=ALICE)
    assert response.status_code == 200
    assert response.json()["event_id"] == event_id

    response = client.get(f"/api/events/{event_id}", headers=BOB)
    assert response.status_code == 200
    assert response.text == "Unauthorized"

def test_progressing_and_done_lists(client):
    future_id = create_event(client)
    past_id = create_event(client, body=dict(EVENT_BODY, datetime="2001-01-01T09:00:00.000"))

    progressing = client.get("/api/events/progressing", headers=ALICE).json()
    done = client.get("/api/events/done", headers=ALICE).json()

    assert [e["event_id"] for e in progressing] == [future_id]
    assert [e["event_id"] for e in done] == [past_id]
    assert client.get("/api/events/progressing", headers=BOB).json() == []

def test_create_event_converts_offset_and_epoch_times(client, monkeypatch):
    """Timestamps with an offset are stored as event-timezone wall-clock time"""
    monkeypatch.setattr(settings, "EVENT_TIMEZONE", "Asia/Seoul")

    response = client.post("/api/events", json=dict(EVENT_BODY, datetime="2999-05-01T04:00:00Z"), headers=ALICE)
    assert response.json()["datetime"] == "2999-05-01T13:00:00.000"

    soon = client.post("/api/events", json=dict(EVENT_BODY, datetime=int(time.time()) + 3 * 3600), headers=ALICE)
    assert soon.status_code == 200
    soon_id = soon.json()["event_id"]

    progressing = [e["event_id"] for e in client.get("/api/events/progressing", headers=ALICE).json()]
    done = [e["event_id"] for e in client.get("/api/events/done", headers=ALICE).json()]
    assert soon_id in progressing
    assert soon_id not in done

def test_grant_authority(client):
    event_id = create_event(client)

    response = client.post(f"/api/events/auth/{event_id}", json={"uid": "K200"}, headers=BOB)
    assert response.text == "Authority grant failed"

    response = client.post(f"/api/events/auth/{event_id}", json={"uid": "K200"}, headers=ALICE)
    assert response.text == "Authority granted"

    response = client.get(f"/api/events/{event_id}", headers=BOB)
    assert response.json()["event_id"] == event_id

def test_update_event(client):
    event_id = create_event(client)
    body = dict(EVENT_BODY, type="reception", location="Busan")

    response = client.put(f"/api/events/{event_id}", json=body, headers=BOB)
    assert response.text == "Unauthorized"

    response = client.put(f"/api/events/{event_id}", json=body, headers=ALICE)
    assert response.status_code == 200
    assert response.text == event_id

    data = client.get(f"/api/events/{event_id}", headers=ALICE).json()
    assert data["type"] == "reception"
    assert data["location"] == "Busan"

def test_delete_event(client):
    event_id = create_event(client)

    response = client.delete(f"/api/events/{event_id}", headers=BOB)
    assert response.text == "Unauthorized"

    response = client.delete(f"/api/events/{event_id}", headers=ALICE)
    assert response.text == event_id

    db = TestingSessionLocal()
    try:
        assert db.query(Event).count() == 0
        assert db.query(Manage).count() == 0
    finally:
        db.close()

def test_revoke_authority_cascades(client):
    event_id = create_event(client)
    client.post(f"/api/events/auth/{event_id}", json={"uid": "K200"}, headers=ALICE)

    response = client.delete(f"/api/events/auth/{event_id}", headers=BOB)
    assert response.text == event_id
    assert client.get(f"/api/events/{event_id}", headers=ALICE).json()["event_id"] == event_id

    response = client.delete(f"/api/events/auth/{event_id}", headers=ALICE)
    assert response.text == event_id
    assert client.get(f"/api/events/{event_id}", headers=ALICE).text == "Unauthorized"

    db = TestingSessionLocal()
    try:
        assert db.query(Event).filter(Event.event_id == event_id).first() is None
    finally:
        db.close()

def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
