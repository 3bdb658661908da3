"""
Statement parser contracts.

StatementParser is the boundary the orchestrator depends on: unlocked
document bytes in, ParsedStatement out, ParseError on failure.
BankParser is the per-bank plug-in used by the bundled registry.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from app.schemas.ingestion import ParsedStatement, RawCandidate


class StatementParser(ABC):

    @abstractmethod
    def parse(self, data: bytes, filename: str = "") -> ParsedStatement:
        """
        Extract the bank identifier and candidate transactions.
        Must raise ParseError when nothing usable can be extracted.
        """
        ...


class BankParser(ABC):

    @property
    @abstractmethod
    def bank_name(self) -> str:
        ...

    @abstractmethod
    def can_parse(self, content: str) -> bool:
        """Whether the statement text belongs to this bank."""
        ...

    @abstractmethod
    def parse_text(self, content: str, reference: Optional[date] = None) -> list[RawCandidate]:
        """Extract candidates from statement text in statement order."""
        ...
