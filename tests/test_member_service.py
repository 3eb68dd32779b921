"""
Tests for member login and profile management
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.db import Base, get_db
from app.models import LoginSession, Member
from app.schemas.member import MemberUpdate
from app.services.identity_provider import (
    IdentityProfile,
    IdentityProvider,
    IdentityProviderError,
    OAuthTokens,
    get_identity_provider,
)
from app.services.member_service import MemberService
from app.utils.security import rate_limiter
from main import app

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///./test_members.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

class StubProvider(IdentityProvider):
    """Identity provider answering from fixed data"""

    def __init__(self, profile: IdentityProfile, fail: bool = False):
        self.profile = profile
        self.fail = fail
        self.codes = []

    def exchange_code(self, code: str) -> OAuthTokens:
        if self.fail:
            raise IdentityProviderError("token endpoint unavailable")
        self.codes.append(code)
        return OAuthTokens(access_token=f"access-{code}", refresh_token=f"refresh-{code}")

    def fetch_profile(self, access_token: str) -> IdentityProfile:
        return self.profile

@pytest.fixture
def db_session():
    """Create test database session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture
def client(db_session):
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    rate_limiter.clear()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

def test_login_creates_member_and_session(db_session):
    provider = StubProvider(IdentityProfile(member_id="K42", name="Minsu", email="minsu@example.com"))

    token, member = MemberService.login_with_code("abc", provider, db_session)

    assert provider.codes == ["abc"]
    assert member.member_id == "K42"
    assert member.email == "minsu@example.com"
    assert MemberService.member_id_for_token(token, db_session) == "K42"

def test_login_again_refreshes_profile_and_keeps_email(db_session):
    MemberService.login_with_code("one", StubProvider(IdentityProfile("K42", "Minsu", "minsu@example.com")), db_session)

    first_token = db_session.query(LoginSession).first().token
    token, member = MemberService.login_with_code("two", StubProvider(IdentityProfile("K42", "Minsu Kim")), db_session)

    assert member.name == "Minsu Kim"
    assert member.email == "minsu@example.com"
    assert token != first_token
    assert db_session.query(Member).count() == 1

def test_update_and_delete_member(db_session):
    token, _ = MemberService.login_with_code("abc", StubProvider(IdentityProfile("K42", "Minsu")), db_session)

    updated = MemberService.update_member("K42", MemberUpdate(email="new@example.com"), db_session)
    assert updated.name == "Minsu"
    assert updated.email == "new@example.com"

    assert MemberService.delete_member("K42", db_session)
    assert MemberService.get_member("K42", db_session) is None
    assert MemberService.member_id_for_token(token, db_session) is None
    assert not MemberService.delete_member("K42", db_session)

def test_kakao_callback_route(client):
    provider = StubProvider(IdentityProfile("K7", "Jisoo"))
    app.dependency_overrides[get_identity_provider] = lambda: provider

    response = client.get("/api/members/kakao", params={"code": "xyz"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"]
    assert body["data"]["member"] == {"member_id": "K7", "name": "Jisoo", "email": None}

    headers = {"Authorization": f"Bearer {body['data']['token']}"}
    me = client.get("/api/members/me", headers=headers).json()
    assert me["data"]["name"] == "Jisoo"

def test_kakao_callback_provider_failure(client):
    app.dependency_overrides[get_identity_provider] = lambda: StubProvider(IdentityProfile("K7", "Jisoo"), fail=True)

    response = client.get("/api/members/kakao", params={"code": "xyz"})

    assert response.status_code == 502
    assert response.json()["error_code"] == "identity_provider_error"

def test_member_routes(client, db_session):
    db_session.add(Member(member_id="K1", name="Alice"))
    db_session.add(Member(member_id="K2", name="Bob"))
    db_session.add(LoginSession(token="t1", member_id="K1"))
    db_session.commit()
    headers = {"Authorization": "Bearer t1"}

    listed = client.get("/api/members", headers=headers).json()["data"]
    assert [m["member_id"] for m in listed] == ["K1", "K2"]

    assert client.get("/api/members/K2", headers=headers).json()["data"]["name"] == "Bob"
    assert client.get("/api/members/K999", headers=headers).status_code == 404

    response = client.put("/api/members/me", json={"name": "Alice Park"}, headers=headers)
    assert response.json()["data"]["name"] == "Alice Park"

    response = client.put("/api/members/me", json={"email": "not-an-email"}, headers=headers)
    assert response.status_code == 422

    response = client.post("/api/members/logout", headers=headers)
    assert response.status_code == 200
    assert client.get("/api/members/me", headers=headers).status_code == 401

def test_delete_me(client, db_session):
    db_session.add(Member(member_id="K1", name="Alice"))
    db_session.add(LoginSession(token="t1", member_id="K1"))
    db_session.commit()
    headers = {"Authorization": "Bearer t1"}

    response = client.delete("/api/members/me", headers=headers)

    assert response.json()["data"] == {"deleted_member_id": "K1"}
    assert client.get("/api/members/me", headers=headers).status_code == 401
