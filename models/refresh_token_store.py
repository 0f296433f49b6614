"""
Refresh token persistence bound to a single SQLAlchemy session.

One store instance lives inside one transaction (see DBStorage.atomic); it
never commits or rolls back on its own.
"""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from models.refresh_token import RefreshToken


class RefreshTokenStore:
    def __init__(self, session: Session):
        self.session = session

    def insert(self, token_hash: str, user_id: str, family_id: str,
               expires_at: datetime) -> RefreshToken:
        record = RefreshToken(
            token_hash=token_hash,
            user_id=user_id,
            family_id=family_id,
            expires_at=expires_at,
            revoked=False,
        )
        self.session.add(record)
        self.session.flush()
        return record

    def find_for_update(self, token_hash: str) -> RefreshToken | None:
        """
        Look a record up by fingerprint and lock its row until the
        transaction ends (FOR UPDATE; SQLite relies on BEGIN IMMEDIATE).
        """
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.token_hash == token_hash)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def revoke(self, token_id: int) -> bool:
        """
        Flip revoked to true only if it is still false.
        Returns False when another transaction got there first.
        """
        result = self.session.execute(
            update(RefreshToken)
            .where(RefreshToken.id == token_id, RefreshToken.revoked == False)  # noqa: E712
            .values(revoked=True)
        )
        return result.rowcount == 1

    def revoke_all_for_user(self, user_id: str) -> int:
        result = self.session.execute(
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.revoked == False)  # noqa: E712
            .values(revoked=True)
        )
        return result.rowcount

    def revoke_family(self, family_id: str) -> int:
        result = self.session.execute(
            update(RefreshToken)
            .where(RefreshToken.family_id == family_id, RefreshToken.revoked == False)  # noqa: E712
            .values(revoked=True)
        )
        return result.rowcount
