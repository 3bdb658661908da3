"""
Bundled credit card statement parsers.

All three banks print one transaction per line:
    <date> [<posting date>] <description> <amount>
and differ only in how the date is written and which keywords identify
the statement.
"""

import re
from datetime import date
from typing import Optional

import structlog

from app.config import settings
from app.parsers.base import BankParser
from app.pipeline.amount_parser import parse_amount
from app.pipeline.date_parser import parse_statement_date
from app.schemas.ingestion import RawCandidate

logger = structlog.get_logger(__name__)

AMOUNT = r'(?P<amount>[-−]?[\d,]+(?:\.\d{1,2})?)'
MONTH_DAY = r'\d{2}/\d{2}'

# "卡號末四碼：1234" / "末四碼 1234" / "Card No. ****1234"
CARD_SUFFIX_PATTERN = re.compile(r'(?:末四碼|卡號|Card\s*No\.?)\D{0,12}(\d{4})\b', re.IGNORECASE)

# Suggested category -> description keywords
CATEGORY_KEYWORDS = {
    "refund": ("退款", "退貨", "REFUND"),
    "payment": ("繳款", "扣繳", "PAYMENT"),
    "cashback": ("回饋", "CASHBACK"),
}


def suggest_category(description: str) -> str:
    upper = description.upper()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(k in upper for k in keywords):
            return category
    return ""


class LineBankParser(BankParser):
    """Regex-per-line parser shared by the bundled banks."""

    name: str = ""
    keywords: tuple[str, ...] = ()
    line_patterns: tuple[re.Pattern, ...] = ()

    @property
    def bank_name(self) -> str:
        return self.name

    def can_parse(self, content: str) -> bool:
        return any(k in content for k in self.keywords)

    def parse_text(self, content: str, reference: Optional[date] = None) -> list[RawCandidate]:
        candidates = []
        card_suffix = ""

        for line in content.splitlines():
            line = line.strip()
            if not line:
                continue

            card_match = CARD_SUFFIX_PATTERN.search(line)
            if card_match:
                card_suffix = card_match.group(1)

            match = self._match_line(line)
            if match is None:
                continue

            parsed_date = parse_statement_date(match.group("date"), reference=reference).parsed_date
            amount = parse_amount(match.group("amount")).amount
            if parsed_date is None or amount is None:
                logger.debug("statement_line_skipped", bank=self.name, line=line)
                continue

            description = match.group("description").strip()
            candidates.append(RawCandidate(
                date=parsed_date,
                description=description,
                amount=amount,
                currency=settings.DEFAULT_CURRENCY,
                suggested_category=suggest_category(description),
                card_suffix=card_suffix,
            ))

        return candidates

    def _match_line(self, line: str) -> Optional[re.Match]:
        for pattern in self.line_patterns:
            m = pattern.match(line)
            if m:
                return m
        return None


class CathayParser(LineBankParser):
    name = "國泰世華"
    keywords = ("國泰世華", "CATHAY", "國泰銀行")
    line_patterns = (
        re.compile(rf'^(?P<date>{MONTH_DAY})\s+(?:{MONTH_DAY}\s+)?(?P<description>.+?)\s+{AMOUNT}\s*$'),
    )


class TaishinParser(LineBankParser):
    name = "台新銀行"
    keywords = ("台新銀行", "台新國際商業銀行", "TAISHIN", "TSB")
    line_patterns = (
        re.compile(rf'^(?P<date>\d{{4}}/\d{{2}}/\d{{2}}|{MONTH_DAY})\s+(?:(?:\d{{4}}/)?{MONTH_DAY}\s+)?(?P<description>.+?)\s+{AMOUNT}\s*$'),
    )


class FubonParser(LineBankParser):
    name = "富邦銀行"
    keywords = ("富邦銀行", "台北富邦", "FUBON", "富邦金控")
    line_patterns = (
        # ROC era first: 113/01/15
        re.compile(rf'^(?P<date>\d{{3}}/\d{{2}}/\d{{2}})\s+(?:\d{{3}}/\d{{2}}/\d{{2}}\s+)?(?P<description>.+?)\s+{AMOUNT}\s*$'),
        re.compile(rf'^(?P<date>{MONTH_DAY})\s+(?:{MONTH_DAY}\s+)?(?P<description>.+?)\s+{AMOUNT}\s*$'),
    )


def all_bank_parsers() -> list[BankParser]:
    return [CathayParser(), TaishinParser(), FubonParser()]
