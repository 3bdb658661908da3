"""
SQLAlchemy-backed credential repository.
"""

from typing import Sequence

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import PersistenceFailure
from app.models.tables import DecryptionCredential
from app.storage.base import CredentialRepository, SealedCredentialInput, StoredCredential

logger = structlog.get_logger(__name__)


class SqlCredentialRepository(CredentialRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_for_user(self, user_id: int) -> list[StoredCredential]:
        try:
            result = await self.session.execute(
                select(DecryptionCredential)
                .where(DecryptionCredential.user_id == user_id)
                .order_by(DecryptionCredential.priority)
            )
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("credential_list_failed", user_id=user_id, error=str(e))
            raise PersistenceFailure(f"failed to load credentials: {e}") from e
        return [
            StoredCredential(
                priority=row.priority,
                sealed_secret=row.password_encrypted,
                label=row.label,
                created_at=row.created_at,
                updated_at=row.updated_at,
            )
            for row in rows
        ]

    async def upsert_many(self, user_id: int, entries: Sequence[SealedCredentialInput]) -> None:
        if not entries:
            return
        try:
            priorities = [e.priority for e in entries]
            result = await self.session.execute(
                select(DecryptionCredential).where(
                    DecryptionCredential.user_id == user_id,
                    DecryptionCredential.priority.in_(priorities),
                )
            )
            existing = {row.priority: row for row in result.scalars().all()}

            for entry in entries:
                row = existing.get(entry.priority)
                if row is None:
                    self.session.add(DecryptionCredential(
                        user_id=user_id,
                        priority=entry.priority,
                        password_encrypted=entry.sealed_secret,
                        label=entry.label,
                    ))
                else:
                    row.password_encrypted = entry.sealed_secret
                    row.label = entry.label
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("credential_upsert_failed", user_id=user_id, error=str(e))
            raise PersistenceFailure(f"failed to save credentials: {e}") from e

    async def delete(self, user_id: int, priority: int) -> bool:
        try:
            result = await self.session.execute(
                delete(DecryptionCredential).where(
                    DecryptionCredential.user_id == user_id,
                    DecryptionCredential.priority == priority,
                )
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceFailure(f"failed to delete credential: {e}") from e
        return (result.rowcount or 0) > 0
