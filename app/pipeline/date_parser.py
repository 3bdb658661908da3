"""
Statement date parser.

Strategy:
1. Full Gregorian dates (YYYY/MM/DD, YYYY-MM-DD) are taken as-is
2. Three-digit years are ROC era (Minguo) and shifted by 1911
3. Month/day without a year takes the reference year, stepping back
   one year when the month is later than the reference month
"""

import re
from datetime import date, datetime
from typing import Optional

from dateutil import parser as dateutil_parser
from pydantic import BaseModel

ROC_YEAR_OFFSET = 1911


class DateParseResult(BaseModel):
    parsed_date: Optional[date] = None
    raw_text: str
    format_detected: str
    year_inferred: bool = False


# Ordered by specificity (try most specific first)
DATE_FORMATS = [
    (r'^(\d{4})[/\-.](\d{1,2})[/\-.](\d{1,2})$', 'YYYY/MM/DD'),
    (r'^(\d{3})[/\-.](\d{1,2})[/\-.](\d{1,2})$', 'ROC_YYY/MM/DD'),
    (r'^(\d{1,2})/(\d{1,2})$', 'MM/DD'),
]


def parse_statement_date(raw: str, reference: Optional[date] = None) -> DateParseResult:
    """
    Parse a transaction date as printed on a statement line.
    `reference` anchors year inference; defaults to today.
    """
    raw_clean = raw.strip()
    reference = reference or date.today()

    for pattern, format_name in DATE_FORMATS:
        m = re.match(pattern, raw_clean)
        if not m:
            continue
        try:
            parsed = _parse_by_format(m, format_name, reference)
        except (ValueError, OverflowError):
            continue

        return DateParseResult(
            parsed_date=parsed,
            raw_text=raw,
            format_detected=format_name,
            year_inferred=format_name == 'MM/DD',
        )

    # Last resort for anything else dateutil understands, year first
    try:
        parsed = dateutil_parser.parse(raw_clean, yearfirst=True, default=_default_for(reference)).date()
        return DateParseResult(parsed_date=parsed, raw_text=raw, format_detected="DATEUTIL")
    except (ValueError, OverflowError):
        return DateParseResult(parsed_date=None, raw_text=raw, format_detected="UNKNOWN")


def _default_for(reference: date) -> datetime:
    return datetime(reference.year, reference.month, 1)


def _parse_by_format(match, format_name: str, reference: date) -> Optional[date]:
    """Parse date from regex match based on detected format."""

    if format_name == 'YYYY/MM/DD':
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    if format_name == 'ROC_YYY/MM/DD':
        year = int(match.group(1)) + ROC_YEAR_OFFSET
        return date(year, int(match.group(2)), int(match.group(3)))

    if format_name == 'MM/DD':
        month = int(match.group(1))
        day = int(match.group(2))
        year = reference.year
        if month > reference.month:
            year -= 1
        return date(year, month, day)

    return None
