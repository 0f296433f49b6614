from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from utils.exceptions import ExpiredOrMalformed, Unauthenticated
from utils.security import (
    AccessTokenIssuer,
    generate_refresh_secret,
    hash_password,
    hash_token,
    verify_password,
)

SECRET = "unit-test-secret-that-is-long-enough-for-hs256"


def test_hash_token_is_deterministic_sha256_hex() -> None:
    assert hash_token("abc") == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    assert hash_token("abc") == hash_token("abc")
    assert hash_token("abc") != hash_token("abd")


def test_refresh_secrets_are_long_and_unique() -> None:
    secrets = {generate_refresh_secret() for _ in range(50)}
    assert len(secrets) == 50
    assert all(len(s) == 128 for s in secrets)


def test_password_hash_is_salted_and_verifies() -> None:
    h1 = hash_password("pw123456")
    h2 = hash_password("pw123456")
    assert h1 != h2
    assert "pw123456" not in h1
    assert verify_password("pw123456", h1)
    assert not verify_password("wrong", h1)
    assert not verify_password("pw123456", "not-an-argon2-hash")


def test_issue_then_verify_returns_user_id() -> None:
    issuer = AccessTokenIssuer(SECRET)
    token = issuer.issue("user-1")
    assert issuer.verify(token) == "user-1"
    claims = jwt.decode(token, SECRET, algorithms=["HS256"], options={"verify_iss": False})
    assert claims["exp"] - claims["iat"] == 60


def test_expired_token_is_rejected() -> None:
    issuer = AccessTokenIssuer(SECRET, expires=timedelta(seconds=-5))
    with pytest.raises(ExpiredOrMalformed):
        issuer.verify(issuer.issue("user-1"))


def test_token_signed_with_other_secret_is_rejected() -> None:
    other = AccessTokenIssuer("some-other-secret-that-is-also-long-enough")
    with pytest.raises(ExpiredOrMalformed):
        AccessTokenIssuer(SECRET).verify(other.issue("user-1"))


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_tokens_are_rejected(token: str) -> None:
    with pytest.raises(Unauthenticated):
        AccessTokenIssuer(SECRET).verify(token)


def test_wrong_token_type_is_rejected() -> None:
    token = jwt.encode(
        {"sub": "user-1", "exp": 4102444800, "type": "refresh", "iss": "session-auth-api"},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(ExpiredOrMalformed):
        AccessTokenIssuer(SECRET).verify(token)


def test_empty_secret_is_refused() -> None:
    with pytest.raises(ValueError):
        AccessTokenIssuer("")
