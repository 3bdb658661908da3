"""
Tests for ordered credential fallback in DocumentDecryptor.
"""

import io

import pytest
from PyPDF2 import PdfReader, PdfWriter

from app.errors import DecryptionFailed
from app.pipeline.decryptor import DocumentDecryptor, PdfUnlocker
from app.pipeline.types import SourceDocument
from tests.fakes import FakeUnlocker

CREDENTIALS = [(1, "wrong-1"), (2, "right"), (3, "never-3"), (4, "never-4")]


def _blank_pdf(user_password=None, owner_password=None) -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    if user_password is not None:
        writer.encrypt(user_password, owner_password)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


class TestCredentialOrdering:

    def test_unprotected_document_tries_nothing(self):
        unlocker = FakeUnlocker()
        doc = SourceDocument(filename="plain.pdf", raw_bytes=b"plain")
        assert DocumentDecryptor(unlocker).decrypt(doc, CREDENTIALS) == b"plain"
        assert unlocker.attempts == []

    def test_stops_at_first_success(self):
        unlocker = FakeUnlocker({b"locked": "right"})
        doc = SourceDocument(filename="locked.pdf", raw_bytes=b"locked")
        assert DocumentDecryptor(unlocker).decrypt(doc, CREDENTIALS) == b"locked"
        # Priorities 3 and 4 are never attempted
        assert unlocker.attempts == ["wrong-1", "right"]

    def test_tries_in_ascending_priority_regardless_of_input_order(self):
        unlocker = FakeUnlocker({b"locked": "never-4"})
        doc = SourceDocument(filename="locked.pdf", raw_bytes=b"locked")
        DocumentDecryptor(unlocker).decrypt(doc, list(reversed(CREDENTIALS)))
        assert unlocker.attempts == ["wrong-1", "right", "never-3", "never-4"]

    def test_exhausted_credentials_raise(self):
        unlocker = FakeUnlocker({b"locked": "something-else"})
        doc = SourceDocument(filename="B.pdf", raw_bytes=b"locked")
        with pytest.raises(DecryptionFailed) as exc_info:
            DocumentDecryptor(unlocker).decrypt(doc, CREDENTIALS)
        assert exc_info.value.filename == "B.pdf"
        assert exc_info.value.attempts == 4
        assert len(unlocker.attempts) == 4

    def test_protected_document_without_credentials_raises(self):
        unlocker = FakeUnlocker({b"locked": "x"})
        doc = SourceDocument(filename="B.pdf", raw_bytes=b"locked")
        with pytest.raises(DecryptionFailed) as exc_info:
            DocumentDecryptor(unlocker).decrypt(doc, [])
        assert exc_info.value.attempts == 0
        assert unlocker.attempts == []


class TestPdfUnlocker:
    """Against real PDFs written by PyPDF2."""

    def test_plain_pdf_not_protected(self):
        data = _blank_pdf()
        unlocker = PdfUnlocker()
        assert not unlocker.is_protected(data)
        assert unlocker.opens_without_password(data)

    def test_encrypted_pdf_is_protected(self):
        data = _blank_pdf(user_password="s3cret")
        unlocker = PdfUnlocker()
        assert unlocker.is_protected(data)
        assert not unlocker.opens_without_password(data)

    def test_owner_only_pdf_not_protected(self):
        data = _blank_pdf(user_password="", owner_password="owner")
        assert not PdfUnlocker().is_protected(data)

    def test_wrong_password_returns_none(self):
        assert PdfUnlocker().try_unlock(_blank_pdf(user_password="s3cret"), "nope") is None

    def test_right_password_returns_readable_copy(self):
        unlocked = PdfUnlocker().try_unlock(_blank_pdf(user_password="s3cret"), "s3cret")
        reader = PdfReader(io.BytesIO(unlocked))
        assert not reader.is_encrypted
        assert len(reader.pages) == 1

    def test_end_to_end_with_real_pdf(self):
        doc = SourceDocument(filename="real.pdf", raw_bytes=_blank_pdf(user_password="right"))
        unlocked = DocumentDecryptor().decrypt(doc, CREDENTIALS)
        assert not PdfReader(io.BytesIO(unlocked)).is_encrypted

    def test_garbage_bytes_are_not_openable(self):
        assert not PdfUnlocker().opens_without_password(b"not a pdf")

    def test_corrupt_upload_reported_as_corrupted(self):
        doc = SourceDocument(filename="broken.pdf", raw_bytes=b"not a pdf")
        with pytest.raises(DecryptionFailed) as exc_info:
            DocumentDecryptor().decrypt(doc, [])
        assert exc_info.value.attempts == 0
        assert exc_info.value.message == "unable to decrypt broken.pdf: all passwords failed or PDF is corrupted"
