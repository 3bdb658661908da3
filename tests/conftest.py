"""
Shared test fixtures.
"""

from datetime import date

import pytest

from app.credentials.cipher import SecretCipher
from app.credentials.store import CredentialStore
from app.parsers.registry import ParserRegistry
from app.pipeline.committer import ImportCommitter
from app.pipeline.decryptor import DocumentDecryptor
from app.pipeline.orchestrator import IngestionOrchestrator
from tests.fakes import (
    REFERENCE_DATE,
    FakeUnlocker,
    InMemoryCredentialRepository,
    InMemoryTransactionRepository,
    persisted,
)


@pytest.fixture
def cipher():
    return SecretCipher(key="test-encryption-key")


@pytest.fixture
def credential_repo():
    return InMemoryCredentialRepository()


@pytest.fixture
def credential_store(credential_repo, cipher):
    return CredentialStore(credential_repo, cipher=cipher, slots=4)


@pytest.fixture
def transaction_repo():
    return InMemoryTransactionRepository(
        existing=[persisted(1, date(2024, 3, 1), "390", "Netflix")],
        categories={"refund": 11, "payment": 12},
    )


@pytest.fixture
def text_registry():
    """Bundled bank parsers reading statement text straight from the bytes."""
    return ParserRegistry(text_extractor=lambda data: data.decode("utf-8"), reference=REFERENCE_DATE)


@pytest.fixture
def make_orchestrator(credential_store, transaction_repo, text_registry):
    def _make(unlocker=None, filename_rules=None, **kwargs):
        return IngestionOrchestrator(
            credential_store=credential_store,
            transactions=transaction_repo,
            parser=text_registry,
            decryptor=DocumentDecryptor(unlocker or FakeUnlocker()),
            filename_rules=filename_rules or [],
            **kwargs,
        )
    return _make


@pytest.fixture
def committer(transaction_repo):
    return ImportCommitter(transaction_repo)
