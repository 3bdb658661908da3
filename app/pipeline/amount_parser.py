"""
Statement amount parser.

Handles the conventions seen on card statements:
- NT$1,234 / TWD 1,234 / 1,234.50 / 1234
- (1,234)           -> negative (parentheses)
- -1,234 / −1,234   -> negative (leading minus, ASCII or unicode)
- 1,234-            -> negative (trailing minus)
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import BaseModel

CURRENCY_MARKERS = ("NT$", "NTD", "TWD", "US$", "USD", "$", "＄", "元")
MINUS_SIGNS = ("-", chr(8722), "－")


class AmountParseResult(BaseModel):
    amount: Optional[Decimal] = None
    raw_text: str
    is_negative: bool = False
    sign_convention: Optional[str] = None  # PARENTHESES, MINUS, NONE


def parse_amount(raw: str) -> AmountParseResult:
    """Parse a monetary amount as printed on a statement line."""
    s = raw.strip()

    if not s or s in ('-', '--', '---'):
        return AmountParseResult(amount=None, raw_text=raw)

    for marker in CURRENCY_MARKERS:
        s = s.replace(marker, '')
    s = s.strip()

    if not s:
        return AmountParseResult(amount=None, raw_text=raw)

    is_negative = False
    sign_convention = 'NONE'

    # Parentheses: (100) -> negative
    if s.startswith('(') and s.endswith(')'):
        s = s[1:-1].strip()
        is_negative = True
        sign_convention = 'PARENTHESES'

    if not is_negative and s.endswith(MINUS_SIGNS):
        s = s[:-1].strip()
        is_negative = True
        sign_convention = 'MINUS'

    if not is_negative and s.startswith(MINUS_SIGNS):
        s = s[1:].strip()
        is_negative = True
        sign_convention = 'MINUS'

    # Thousands separators (ASCII and full-width) and stray spaces
    s = s.replace(',', '').replace('，', '').replace(' ', '')

    if not re.fullmatch(r'\d+(\.\d+)?', s):
        return AmountParseResult(amount=None, raw_text=raw)

    try:
        amount = Decimal(s)
    except InvalidOperation:
        return AmountParseResult(amount=None, raw_text=raw)

    if is_negative:
        amount = -amount

    return AmountParseResult(
        amount=amount,
        raw_text=raw,
        is_negative=is_negative,
        sign_convention=sign_convention,
    )
