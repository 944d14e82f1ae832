import pytest
from fastapi.testclient import TestClient

from app import config
from app.database import DuplicateEmailError, get_user_store
from app.main import app

TEST_SECRET = "test-secret-key"


class FakeUserStore:
    """
    In-memory stand-in for UserStore.
    Enforces the email unique constraint the same way the real store reports it.
    """

    def __init__(self):
        self.users: dict[str, dict] = {}
        self.writes = 0

    async def find_by_email(self, email):
        user = self.users.get(email)
        return dict(user) if user else None

    async def insert_user(self, username, email, password_hash, role="user"):
        if email in self.users:
            raise DuplicateEmailError(email)
        self.writes += 1
        self.users[email] = {
            "id": len(self.users) + 1,
            "username": username,
            "email": email,
            "password_hash": password_hash,
            "role": role,
        }
        return self.users[email]["id"]


@pytest.fixture(autouse=True)
def auth_config(monkeypatch):
    monkeypatch.setattr(config, "SECRET_KEY", TEST_SECRET)
    monkeypatch.setattr(config, "EXPIRES_IN", "30m")
    monkeypatch.setattr(config, "APP_ENV", "development")
    # Minimum cost keeps the suite fast; the production value is asserted separately
    monkeypatch.setattr(config, "BCRYPT_ROUNDS", 4)


@pytest.fixture()
def store():
    return FakeUserStore()


@pytest.fixture()
def client(store):
    app.dependency_overrides[get_user_store] = lambda: store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def register_payload():
    return {"username": "alice", "email": "a@x.com", "password": "secret123"}
