"""
Python enums for ledger columns.
Values are stored as plain strings in the database.
"""

from enum import Enum


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TransactionSource(str, Enum):
    MANUAL = "manual"
    IMPORTED = "imported"


class DocumentOutcome(str, Enum):
    """Per-document ingestion outcome, used as a metrics label."""
    PARSED = "PARSED"
    EMPTY = "EMPTY"
    REJECTED = "REJECTED"
    DECRYPTION_FAILED = "DECRYPTION_FAILED"
    PARSE_FAILED = "PARSE_FAILED"
