"""
Refresh token lifecycle: issuance, rotation-on-use, replay refusal, revocation.

A raw refresh secret moves Issued -> Rotated | Expired | Revoked, and every
one of those is terminal. Rotation runs as a single transaction:

  1. fingerprint the presented secret
  2. load its record with a row lock (absent -> 401)
  3. revoked -> 401 (replay; optionally revokes the whole family)
  4. expired -> mark revoked, commit, 401
  5. conditional revoke; zero rows means a concurrent rotation won -> 401
  6. insert the successor record
  7. sign a new access token
  8. commit

Anything raised between 2 and 8 rolls the transaction back.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, NamedTuple

from models.base_model import as_utc
from models.db_storage import DBStorage
from models.refresh_token_store import RefreshTokenStore
from utils.exceptions import Unauthenticated
from utils.security import (
    AccessTokenIssuer,
    generate_refresh_secret,
    hash_token,
    utcnow,
)

logger = logging.getLogger(__name__)


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str
    user_id: str


class TokenRotationEngine:
    def __init__(self, storage: DBStorage, issuer: AccessTokenIssuer,
                 refresh_expires: timedelta = timedelta(minutes=1),
                 revoke_family_on_reuse: bool = False,
                 clock: Callable[[], datetime] = utcnow):
        self.storage = storage
        self.issuer = issuer
        self.refresh_expires = refresh_expires
        self.revoke_family_on_reuse = revoke_family_on_reuse
        self.clock = clock

    @property
    def refresh_expires_in(self) -> int:
        return int(self.refresh_expires.total_seconds())

    def issue_pair(self, store: RefreshTokenStore, user_id: str,
                   family_id: str | None = None) -> TokenPair:
        """
        Insert a fresh refresh record and sign an access token for it.
        Runs inside the caller's transaction; family_id None starts a new family.
        """
        raw_secret = generate_refresh_secret()
        store.insert(
            token_hash=hash_token(raw_secret),
            user_id=user_id,
            family_id=family_id or str(uuid.uuid4()),
            expires_at=self.clock() + self.refresh_expires,
        )
        return TokenPair(self.issuer.issue(user_id), raw_secret, user_id)

    def login_pair(self, user_id: str) -> TokenPair:
        """Revoke every outstanding session of the user, then issue a new pair."""
        with self.storage.atomic() as session:
            store = RefreshTokenStore(session)
            revoked = store.revoke_all_for_user(user_id)
            pair = self.issue_pair(store, user_id)
        logger.info("Issued login session for user %s (%d prior revoked)", user_id, revoked)
        return pair

    def revoke_all(self, user_id: str) -> int:
        """Logout. Idempotent: a second call revokes nothing and still succeeds."""
        with self.storage.atomic() as session:
            revoked = RefreshTokenStore(session).revoke_all_for_user(user_id)
        logger.info("Revoked %d refresh tokens for user %s", revoked, user_id)
        return revoked

    def rotate(self, raw_secret: str | None) -> TokenPair:
        if not raw_secret:
            raise Unauthenticated("no refresh token presented")
        try:
            token_hash = hash_token(raw_secret)
        except UnicodeEncodeError:
            raise Unauthenticated("refresh token is not valid UTF-8")

        with self.storage.atomic() as session:
            store = RefreshTokenStore(session)
            record = store.find_for_update(token_hash)
            if record is None:
                raise Unauthenticated("unknown refresh token")

            if record.revoked:
                if self.revoke_family_on_reuse:
                    count = store.revoke_family(record.family_id)
                    session.commit()
                    logger.warning(
                        "Reuse of revoked refresh token %s; revoked %d tokens in its family",
                        record.id, count,
                    )
                raise Unauthenticated(f"refresh token {record.id} already revoked")

            if as_utc(record.expires_at) < self.clock():
                store.revoke(record.id)
                session.commit()
                raise Unauthenticated(f"refresh token {record.id} expired")

            if not store.revoke(record.id):
                raise Unauthenticated(f"refresh token {record.id} lost rotation race")

            pair = self.issue_pair(store, record.user_id, family_id=record.family_id)

        logger.info("Rotated refresh token %s for user %s", record.id, record.user_id)
        return pair
