"""
Parser registry: text extraction plus bank detection and dispatch.
"""

from datetime import date
from typing import Callable, Optional

import structlog

from app.errors import ParseError
from app.parsers.banks import all_bank_parsers
from app.parsers.base import BankParser, StatementParser
from app.parsers.text import extract_text
from app.schemas.ingestion import ParsedStatement

logger = structlog.get_logger(__name__)


class ParserRegistry(StatementParser):
    """Dispatches to the first registered bank parser that recognises the text."""

    def __init__(
        self,
        parsers: Optional[list[BankParser]] = None,
        text_extractor: Callable[[bytes], str] = extract_text,
        reference: Optional[date] = None,
    ):
        self.parsers = parsers if parsers is not None else all_bank_parsers()
        self.text_extractor = text_extractor
        self.reference = reference

    def parse(self, data: bytes, filename: str = "") -> ParsedStatement:
        content = self.text_extractor(data)
        return self.parse_text(content, filename)

    def parse_text(self, content: str, filename: str = "") -> ParsedStatement:
        for parser in self.parsers:
            if not parser.can_parse(content):
                continue
            try:
                candidates = parser.parse_text(content, reference=self.reference)
            except Exception as e:
                raise ParseError(f"parser error ({parser.bank_name}): {e}") from e

            logger.info(
                "statement_parsed",
                filename=filename,
                bank=parser.bank_name,
                candidates=len(candidates),
            )
            return ParsedStatement(bank=parser.bank_name, candidates=candidates)

        raise ParseError("no suitable parser found for this PDF")
