"""
pdfplumber text extraction for unlocked statements.
"""

import io

import pdfplumber
import structlog

from app.errors import ParseError

logger = structlog.get_logger(__name__)


def extract_text(data: bytes) -> str:
    """Return the text of every page, pages separated by newlines."""
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            pages = [
                page.extract_text(x_tolerance=3, y_tolerance=3) or ""
                for page in pdf.pages
            ]
    except Exception as e:
        raise ParseError(f"failed to extract text: {e}") from e

    logger.debug("text_extracted", page_count=len(pages), chars=sum(len(p) for p in pages))
    return "\n".join(pages)
