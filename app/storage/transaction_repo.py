"""
SQLAlchemy-backed ledger repository.
"""

from typing import Sequence

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import PersistenceFailure
from app.models.tables import Category, Transaction
from app.schemas.transactions import NewTransaction, PersistedTransaction
from app.storage.base import TransactionRepository

logger = structlog.get_logger(__name__)


class SqlTransactionRepository(TransactionRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    async def fetch_for_reconciliation(self, user_id: int) -> list[PersistedTransaction]:
        try:
            result = await self.session.execute(
                select(Transaction).where(Transaction.user_id == user_id)
            )
            rows = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("transaction_snapshot_failed", user_id=user_id, error=str(e))
            raise PersistenceFailure(f"failed to load transactions: {e}") from e
        return [PersistedTransaction.model_validate(row) for row in rows]

    async def category_ids_by_name(self, user_id: int, names: set[str]) -> dict[str, int]:
        if not names:
            return {}
        try:
            result = await self.session.execute(
                select(Category.name, Category.id).where(
                    Category.user_id == user_id,
                    Category.name.in_(names),
                )
            )
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error("category_lookup_failed", user_id=user_id, error=str(e))
            raise PersistenceFailure(f"failed to look up categories: {e}") from e
        return {name: cat_id for name, cat_id in rows}

    async def insert_many(self, batch: Sequence[NewTransaction]) -> list[int]:
        rows = [Transaction(**item.model_dump()) for item in batch]
        try:
            self.session.add_all(rows)
            await self.session.flush()
            ids = [row.id for row in rows]
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("transaction_insert_failed", rows=len(rows), error=str(e))
            raise PersistenceFailure(f"failed to import transactions: {e}") from e
        return ids
