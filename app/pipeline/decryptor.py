"""
Document decryption with ordered credential fallback.

The decryptor owns the ordering policy only. The PDF mechanics sit behind
PdfUnlocker so the policy can be exercised without real encrypted files.
"""

import io
from typing import Optional, Sequence

import structlog
from PyPDF2 import PdfReader, PdfWriter

from app.errors import DecryptionFailed
from app.observability.metrics import decryption_attempts_total
from app.pipeline.types import SourceDocument

logger = structlog.get_logger(__name__)


class PdfUnlocker:
    """PyPDF2-backed protection check and unlock."""

    def is_protected(self, data: bytes) -> bool:
        """
        True when the document needs a password to be read.
        Files encrypted with an empty user password (owner restrictions
        only) open without one and are not treated as protected.
        """
        try:
            reader = PdfReader(io.BytesIO(data))
            if not reader.is_encrypted:
                return False
            return not reader.decrypt("")
        except Exception:
            # Unreadable here; opens_without_password() makes the final call
            return False

    def opens_without_password(self, data: bytes) -> bool:
        try:
            reader = PdfReader(io.BytesIO(data))
            if reader.is_encrypted and not reader.decrypt(""):
                return False
            # Page tree access fails on documents that are still locked
            _ = len(reader.pages)
            return True
        except Exception as e:
            logger.debug("pdf_open_failed", error=str(e))
            return False

    def try_unlock(self, data: bytes, password: str) -> Optional[bytes]:
        """Return an unencrypted copy of the document, or None if the password is wrong."""
        try:
            reader = PdfReader(io.BytesIO(data))
            if not reader.is_encrypted or not reader.decrypt(password):
                return None

            writer = PdfWriter()
            for page in reader.pages:
                writer.add_page(page)
            buf = io.BytesIO()
            writer.write(buf)
            return buf.getvalue()
        except Exception as e:
            logger.debug("pdf_unlock_failed", error=str(e))
            return None


class DocumentDecryptor:

    def __init__(self, unlocker: Optional[PdfUnlocker] = None):
        self.unlocker = unlocker or PdfUnlocker()

    def decrypt(self, document: SourceDocument, credentials: Sequence[tuple[int, str]]) -> bytes:
        """
        Return readable bytes for the document.

        Unprotected documents come back unchanged with no credential tried.
        Otherwise credentials are tried by ascending priority and the first
        success wins. Raises DecryptionFailed once all are exhausted.
        """
        data = document.raw_bytes

        if not self.unlocker.is_protected(data):
            if self.unlocker.opens_without_password(data):
                return data
            logger.info("unflagged_protection_detected", filename=document.filename)

        attempts = 0
        for attempt, (priority, secret) in enumerate(sorted(credentials, key=lambda c: c[0]), start=1):
            attempts = attempt
            decryption_attempts_total.inc()
            unlocked = self.unlocker.try_unlock(data, secret)
            if unlocked is not None:
                logger.info(
                    "document_decrypted",
                    filename=document.filename,
                    priority=priority,
                    attempts=attempt,
                )
                return unlocked

        logger.warning("decryption_exhausted", filename=document.filename, attempts=attempts)
        raise DecryptionFailed(document.filename, attempts=attempts)
