from __future__ import annotations

from datetime import timedelta

import pytest

from api import create_app
from api.config import DEV_JWT_SECRET, TestingConfig
from utils.security import AccessTokenIssuer

from conftest import API, bearer, signup


def test_header_token_is_accepted(client) -> None:
    tokens = signup(client).get_json()
    fresh = client.application.test_client()  # no cookies
    r = fresh.get(f"{API}/me", headers=bearer(tokens["access_token"]))
    assert r.status_code == 200
    assert r.get_json()["data"]["email"] == "a@x.com"


def test_cookie_token_is_accepted(client) -> None:
    signup(client)
    r = client.get(f"{API}/me")
    assert r.status_code == 200


def test_missing_token_is_401(app) -> None:
    r = app.test_client().get(f"{API}/todos")
    assert r.status_code == 401
    assert r.get_json()["message"] == "Authentication failed"


@pytest.mark.parametrize("header", ["Bearer", "Bearer ", "Basic abc", "Bearer not.a.jwt"])
def test_bad_headers_are_401(app, header) -> None:
    r = app.test_client().get(f"{API}/todos", headers={"Authorization": header})
    assert r.status_code == 401


def test_expired_and_forged_tokens_get_the_same_answer(make_app) -> None:
    app = make_app(ACCESS_TOKEN_EXPIRES=timedelta(seconds=-1))
    tokens = signup(app.test_client()).get_json()
    forged = AccessTokenIssuer("a-completely-different-signing-secret-value").issue("someone")

    client = app.test_client()
    expired = client.get(f"{API}/todos", headers=bearer(tokens["access_token"]))
    bad_sig = client.get(f"{API}/todos", headers=bearer(forged))
    assert expired.status_code == bad_sig.status_code == 401
    assert expired.get_json() == bad_sig.get_json()


def test_refresh_token_is_not_an_access_token(client) -> None:
    tokens = signup(client).get_json()
    fresh = client.application.test_client()
    r = fresh.get(f"{API}/todos", headers=bearer(tokens["refresh_token"]))
    assert r.status_code == 401


def test_production_refuses_default_signing_secret(tmp_path) -> None:
    with pytest.raises(RuntimeError):
        create_app(
            "production",
            JWT_SECRET=DEV_JWT_SECRET,
            DATABASE_URL=f"sqlite:///{tmp_path / 'prod.db'}",
        )


def test_health_reports_database(client) -> None:
    r = client.get(f"{API}/health")
    assert r.status_code == 200
    assert r.get_json() == {"status": "ok", "database": "ok", "version": "1.0.0"}


def test_testing_config_uses_a_shared_database_file() -> None:
    # threads each get a private database with sqlite :memory:
    assert ":memory:" not in TestingConfig.DATABASE_URL
    assert TestingConfig.DATABASE_URL.startswith("sqlite:///")
