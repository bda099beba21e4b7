"""
Refresh Tokens Service
----------------------
Persistence for hashed refresh tokens: store, look up, revoke, delete and
purge. Only SHA-256 digests reach the database.
"""

from datetime import datetime
from typing import Optional, Union
from uuid import UUID

from sqlalchemy import delete, select, update

from ngo_portal.core.database_connection import DatabaseManager
from ngo_portal.db_services.base_service import BaseDatabaseService
from ngo_portal.models.db_tables import RefreshToken, utc_now


class RefreshTokensService(BaseDatabaseService):
    def __init__(self, database_manager: Optional[DatabaseManager] = None):
        super().__init__(database_manager)

    async def store(
        self, user_id: Union[UUID, str], token_hash: str, expires_at: datetime
    ) -> RefreshToken:
        record = RefreshToken(
            user_id=self.validate_uuid(user_id, "user_id"),
            token_hash=token_hash,
            expires_at=expires_at,
        )
        async with self.get_session() as session:
            session.add(record)
        return record

    async def get_by_hash(self, token_hash: str) -> Optional[RefreshToken]:
        async with self.get_session() as session:
            result = await session.execute(
                select(RefreshToken).where(RefreshToken.token_hash == token_hash)
            )
            return result.scalar_one_or_none()

    async def rotate(
        self,
        old_token_hash: str,
        user_id: Union[UUID, str],
        new_token_hash: str,
        expires_at: datetime,
    ) -> bool:
        """
        Revoke ``old_token_hash`` and store its replacement in one transaction.

        Returns:
            False when the old token was already revoked or removed, in which
            case nothing is stored
        """
        async with self.get_session() as session:
            result = await session.execute(
                update(RefreshToken)
                .where(
                    RefreshToken.token_hash == old_token_hash,
                    RefreshToken.revoked_at.is_(None),
                )
                .values(revoked_at=utc_now())
            )
            if result.rowcount != 1:
                return False
            session.add(
                RefreshToken(
                    user_id=self.validate_uuid(user_id, "user_id"),
                    token_hash=new_token_hash,
                    expires_at=expires_at,
                )
            )
        return True

    async def delete_by_hash(self, token_hash: str) -> bool:
        async with self.get_session() as session:
            result = await session.execute(
                delete(RefreshToken).where(RefreshToken.token_hash == token_hash)
            )
            return result.rowcount > 0

    async def delete_for_user(self, user_id: Union[UUID, str]) -> int:
        user_id = self.validate_uuid(user_id, "user_id")
        async with self.get_session() as session:
            result = await session.execute(
                delete(RefreshToken).where(RefreshToken.user_id == user_id)
            )
            return result.rowcount

    async def purge_expired(self) -> int:
        """Delete expired and revoked rows."""
        async with self.get_session() as session:
            result = await session.execute(
                delete(RefreshToken).where(
                    (RefreshToken.expires_at <= utc_now())
                    | RefreshToken.revoked_at.is_not(None)
                )
            )
            purged = result.rowcount
        if purged:
            self.log_operation("PURGE", "refresh_tokens", additional_context=f"rows={purged}")
        return purged
