"""
security helpers:
- Argon2 password hashing via argon2-cffi (slow, salted per record)
- SHA-256 fingerprints for refresh secrets (fast, deterministic, unsalted)
- Access token signing/verification via PyJWT

The two hashing paths stay separate: refresh secrets are looked up by their
fingerprint, so they can't carry a per-record salt.
"""
from __future__ import annotations

import hashlib
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from utils.exceptions import ExpiredOrMalformed

ph = PasswordHasher()


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False


@lru_cache(maxsize=1)
def _dummy_password_hash() -> str:
    return ph.hash(secrets.token_hex(16))


def burn_password_check(password: str) -> None:
    """Spend one verification on a throwaway hash (unknown email at login)."""
    verify_password(password, _dummy_password_hash())


def generate_refresh_secret() -> str:
    """512 random bits, hex encoded. Only ever handed to the client."""
    return secrets.token_hex(64)


def hash_token(token: str) -> str:
    """sha256 hex digest of the raw secret's UTF-8 bytes."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccessTokenIssuer:
    """
    Stateless signer for short-lived access tokens.

    The secret, algorithm and lifetime are fixed when the issuer is built;
    a token can't be revoked before its `exp`.
    """

    token_type = "access"

    def __init__(self, secret: str, algorithm: str = "HS256",
                 expires: timedelta = timedelta(seconds=60),
                 issuer: str = "session-auth-api"):
        if not secret:
            raise ValueError("signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._issuer = issuer
        self.expires = expires

    @property
    def expires_in(self) -> int:
        return int(self.expires.total_seconds())

    def issue(self, user_id: str) -> str:
        now = utcnow()
        payload = {
            "iss": self._issuer,
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self.expires).timestamp()),
            "type": self.token_type,
            "jti": generate_jti(),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        """
        Return the user id embedded in a valid token.
        Raises ExpiredOrMalformed on bad signature, expiry, or wrong shape.
        """
        try:
            decoded = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise ExpiredOrMalformed("access token expired")
        except jwt.InvalidTokenError as exc:
            raise ExpiredOrMalformed(f"invalid access token: {exc}")

        if decoded.get("type") != self.token_type:
            raise ExpiredOrMalformed("wrong token type")
        return decoded["sub"]
