from __future__ import annotations

from pathlib import Path

import pytest

from api import create_app
from models import storage
from models.refresh_token import RefreshToken
from models.refresh_token_store import RefreshTokenStore
from models.user import User

API = "/api/v1"


@pytest.fixture
def make_app(tmp_path: Path):
    """Build an app on its own SQLite file; keyword overrides go to app.config."""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        db_file = tmp_path / f"auth-{counter['n']}.db"
        overrides.setdefault("DATABASE_URL", f"sqlite:///{db_file}")
        return create_app("testing", **overrides)

    yield _make
    storage.close()


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def engine(app):
    return app.extensions["token_engine"]


@pytest.fixture
def user_id(app) -> str:
    with storage.atomic() as session:
        user = User(email="owner@x.com", password_hash="not-a-real-hash")
        session.add(user)
        session.flush()
        uid = user.id
    storage.close()
    return uid


def issue(engine, user_id: str):
    with storage.atomic() as session:
        pair = engine.issue_pair(RefreshTokenStore(session), user_id)
    storage.close()
    return pair


def token_rows(user_id: str | None = None) -> list[RefreshToken]:
    """Fresh read of refresh token rows, oldest first."""
    storage.close()
    session = storage.get_session()
    query = session.query(RefreshToken)
    if user_id:
        query = query.filter(RefreshToken.user_id == user_id)
    rows = query.order_by(RefreshToken.id.asc()).all()
    storage.close()
    return rows


def signup(client, email="a@x.com", password="pw123456"):
    return client.post(f"{API}/auth/signup", json={"email": email, "password": password})


def login(client, email="a@x.com", password="pw123456"):
    return client.post(f"{API}/auth/login", json={"email": email, "password": password})


def bearer(access_token: str) -> dict:
    return {"Authorization": f"Bearer {access_token}"}
