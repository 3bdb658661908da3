"""
Pydantic schemas for statement ingestion and import.
Candidates are immutable once produced by a parser.
"""

from datetime import date as date_type
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

CENT = Decimal("0.01")

# (date, amount at minor-unit precision, description)
IdentityKey = tuple[date_type, Decimal, str]


class RawCandidate(BaseModel):
    """A transaction extracted from a statement, not yet persisted."""
    date: date_type
    description: str
    amount: Decimal
    currency: str = "TWD"
    suggested_category: str = ""
    card_suffix: str = ""              # last 4 digits of the card, may be empty

    model_config = {"frozen": True}

    @property
    def identity_key(self) -> IdentityKey:
        """Structural identity shared by reconciliation and selection."""
        return (self.date, self.amount.quantize(CENT), self.description)


class AnnotatedCandidate(RawCandidate):
    """RawCandidate plus the result of one reconciliation pass."""
    is_duplicate: bool = False


class ParsedStatement(BaseModel):
    """Successful output of a StatementParser."""
    bank: str
    candidates: list[RawCandidate] = []


class IngestionResult(BaseModel):
    """Outcome for one submitted document."""
    filename: str
    bank: str = ""
    candidates: list[AnnotatedCandidate] = []
    total_amount: Decimal = Decimal("0")
    parse_error: Optional[str] = None

    @property
    def duplicate_count(self) -> int:
        return sum(1 for c in self.candidates if c.is_duplicate)


class IngestionResponse(BaseModel):
    results: list[IngestionResult]


class ImportRequest(BaseModel):
    transactions: list[RawCandidate] = Field(default_factory=list)


class ImportSummary(BaseModel):
    imported: int
    message: str
