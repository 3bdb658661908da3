"""
Tests for ParserRegistry dispatch and failure reporting.
"""

import pytest

from app.errors import ParseError
from app.parsers.banks import CathayParser, TaishinParser
from app.parsers.registry import ParserRegistry
from app.parsers.text import extract_text
from tests.fakes import CATHAY_EMPTY_STATEMENT, FUBON_STATEMENT, REFERENCE_DATE, TAISHIN_STATEMENT


class TestDispatch:

    def test_picks_matching_bank(self, text_registry):
        parsed = text_registry.parse(FUBON_STATEMENT.encode("utf-8"), "f.pdf")
        assert parsed.bank == "富邦銀行"
        assert len(parsed.candidates) == 2

    def test_recognised_but_empty_statement(self, text_registry):
        parsed = text_registry.parse(CATHAY_EMPTY_STATEMENT.encode("utf-8"))
        assert parsed.bank == "國泰世華"
        assert parsed.candidates == []

    def test_no_parser_matches(self, text_registry):
        with pytest.raises(ParseError) as exc_info:
            text_registry.parse(b"Unknown Bank statement")
        assert exc_info.value.message == "no suitable parser found for this PDF"

    def test_first_matching_parser_wins(self):
        registry = ParserRegistry(parsers=[CathayParser()], reference=REFERENCE_DATE)
        with pytest.raises(ParseError):
            registry.parse_text(TAISHIN_STATEMENT)
        registry = ParserRegistry(parsers=[CathayParser(), TaishinParser()], reference=REFERENCE_DATE)
        assert registry.parse_text(TAISHIN_STATEMENT).bank == "台新銀行"

    def test_parser_crash_becomes_parse_error(self):
        class BrokenCathay(CathayParser):
            def parse_text(self, content, reference=None):
                raise KeyError("date")

        registry = ParserRegistry(parsers=[BrokenCathay()])
        with pytest.raises(ParseError) as exc_info:
            registry.parse_text(CATHAY_EMPTY_STATEMENT)
        assert "國泰世華" in exc_info.value.message


class TestExtractText:

    def test_non_pdf_bytes_raise_parse_error(self):
        with pytest.raises(ParseError) as exc_info:
            extract_text(b"definitely not a pdf")
        assert exc_info.value.message.startswith("failed to extract text")
