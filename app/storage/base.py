"""
Abstract persistence contracts consumed by the pipeline.

The pipeline never touches SQLAlchemy directly; it talks to these
repositories so the store can be swapped (tests use in-memory fakes).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from app.schemas.transactions import NewTransaction, PersistedTransaction


@dataclass
class StoredCredential:
    """A credential slot as persisted: the secret stays sealed."""
    priority: int
    sealed_secret: str
    label: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class SealedCredentialInput:
    priority: int
    sealed_secret: str
    label: str = ""


class CredentialRepository(ABC):

    @abstractmethod
    async def list_for_user(self, user_id: int) -> list[StoredCredential]:
        """All slots for a user, ascending priority."""
        ...

    @abstractmethod
    async def upsert_many(self, user_id: int, entries: Sequence[SealedCredentialInput]) -> None:
        """
        Insert or replace each listed priority.
        Must apply all entries or none.
        """
        ...

    @abstractmethod
    async def delete(self, user_id: int, priority: int) -> bool:
        """Remove a slot. Returns False if it was already empty."""
        ...


class TransactionRepository(ABC):

    @abstractmethod
    async def fetch_for_reconciliation(self, user_id: int) -> list[PersistedTransaction]:
        """Consistent snapshot of the user's ledger."""
        ...

    @abstractmethod
    async def category_ids_by_name(self, user_id: int, names: set[str]) -> dict[str, int]:
        """Map category names owned by the user to their ids."""
        ...

    @abstractmethod
    async def insert_many(self, batch: Sequence[NewTransaction]) -> list[int]:
        """
        Insert all rows in one transaction and return the assigned ids.
        Must raise PersistenceFailure and leave nothing behind on error.
        """
        ...
