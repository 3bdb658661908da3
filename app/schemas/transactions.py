"""
Ledger transaction shapes exchanged with the persistence layer.
"""

from pydantic import BaseModel
from typing import Optional
from decimal import Decimal
from datetime import date, datetime


class NewTransaction(BaseModel):
    """A row the ImportCommitter asks the repository to insert."""
    user_id: int
    category_id: Optional[int] = None
    amount: Decimal
    type: str
    description: str
    transaction_date: date
    source: str


class PersistedTransaction(BaseModel):
    """Existing ledger entry, used as the duplicate-check snapshot."""
    id: int
    user_id: int
    category_id: Optional[int] = None
    amount: Decimal
    type: str
    description: str
    transaction_date: date
    source: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
