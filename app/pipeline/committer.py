"""
Import committer: turns selected candidates into ledger transactions.
"""

from typing import Optional, Sequence

import structlog

from app.config import settings
from app.errors import ImportRejected, PersistenceFailure
from app.models.enums import TransactionSource, TransactionType
from app.observability.metrics import import_failures_total, transactions_imported_total
from app.schemas.ingestion import ImportSummary, RawCandidate
from app.schemas.transactions import NewTransaction
from app.storage.base import TransactionRepository

logger = structlog.get_logger(__name__)


def infer_type(candidate: RawCandidate, income_categories: Optional[set[str]] = None) -> TransactionType:
    """
    Card statements print charges as positive amounts. Negative amounts
    (payments, refunds) and income-like categories are income.
    """
    income_categories = settings.income_categories if income_categories is None else income_categories
    if candidate.amount < 0:
        return TransactionType.INCOME
    if candidate.suggested_category.lower() in income_categories:
        return TransactionType.INCOME
    return TransactionType.EXPENSE


class ImportCommitter:

    def __init__(self, repository: TransactionRepository):
        self.repository = repository

    async def commit(self, user_id: int, candidates: Sequence[RawCandidate]) -> ImportSummary:
        """
        Persist every candidate as one batch with source=imported.
        Raises ImportRejected for an empty selection without touching
        the repository, PersistenceFailure if the store rejects the batch.
        """
        if not candidates:
            import_failures_total.labels(error_code="ERR_IMPORT_REJECTED").inc()
            raise ImportRejected("no transactions selected")

        names = {c.suggested_category for c in candidates if c.suggested_category}

        try:
            category_ids = await self.repository.category_ids_by_name(user_id, names)
            batch = [
                NewTransaction(
                    user_id=user_id,
                    category_id=category_ids.get(c.suggested_category),
                    amount=c.amount,
                    type=infer_type(c).value,
                    description=c.description,
                    transaction_date=c.date,
                    source=TransactionSource.IMPORTED.value,
                )
                for c in candidates
            ]
            ids = await self.repository.insert_many(batch)
        except PersistenceFailure as e:
            import_failures_total.labels(error_code=e.error_code).inc()
            raise

        transactions_imported_total.inc(len(ids))
        logger.info("transactions_imported", user_id=user_id, count=len(ids))
        return ImportSummary(imported=len(ids), message="transactions imported successfully")
