"""
Ingestion orchestrator: the main statement-import pipeline.

Runs the full flow for one submitted batch:
1. Validate each upload (MIME type, emptiness, size)
2. Read the user's credentials and the reconciliation snapshot once
3. Decrypt and parse every document concurrently
4. Annotate candidates against the snapshot
5. Record per-document outcomes

A failing document never affects its siblings; its failure is reported
in its own result and the batch carries on.
"""

import asyncio
import time
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from typing import Optional, Sequence

import structlog

from app.config import settings
from app.credentials.rules import FilenameRule, load_filename_rules, passwords_for_file
from app.credentials.store import CredentialStore
from app.errors import DecryptionFailed, ParseError, ValidationError
from app.models.enums import DocumentOutcome
from app.observability.metrics import (
    candidates_extracted_total,
    documents_ingested_total,
    ingestion_batch_duration_seconds,
)
from app.parsers.base import StatementParser
from app.parsers.registry import ParserRegistry
from app.pipeline.committer import ImportCommitter
from app.pipeline.decryptor import DocumentDecryptor
from app.pipeline.reconciler import DuplicateReconciler
from app.pipeline.selection import SelectionLedger
from app.pipeline.types import SourceDocument
from app.schemas.ingestion import AnnotatedCandidate, ImportSummary, IngestionResult
from app.storage.base import TransactionRepository

logger = structlog.get_logger(__name__)


class IngestionOrchestrator:
    """Decrypts, parses and reconciles a batch of statements for one user."""

    def __init__(
        self,
        credential_store: CredentialStore,
        transactions: TransactionRepository,
        parser: Optional[StatementParser] = None,
        decryptor: Optional[DocumentDecryptor] = None,
        filename_rules: Optional[list[FilenameRule]] = None,
        max_upload_bytes: Optional[int] = None,
        allowed_mime_types: Optional[Sequence[str]] = None,
    ):
        self.credential_store = credential_store
        self.transactions = transactions
        self.parser = parser or ParserRegistry()
        self.decryptor = decryptor or DocumentDecryptor()
        self.filename_rules = (
            filename_rules if filename_rules is not None
            else load_filename_rules(settings.FILENAME_RULES_PATH)
        )
        self.max_upload_bytes = max_upload_bytes or settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
        self.allowed_mime_types = set(allowed_mime_types or settings.ALLOWED_MIME_TYPES.split(","))

    async def submit(self, user_id: int, documents: Sequence[SourceDocument]) -> list[IngestionResult]:
        """
        Process one batch. Returns exactly one result per document, in
        submission order. Only an empty batch raises.
        """
        if not documents:
            raise ValidationError("no files uploaded")

        started = time.time()
        log = logger.bind(user_id=user_id, documents=len(documents))
        log.info("ingestion_started")

        credentials = await self.credential_store.ordered_secrets(user_id)
        reconciler = DuplicateReconciler(await self.transactions.fetch_for_reconciliation(user_id))

        loop = asyncio.get_running_loop()
        pool = ThreadPoolExecutor(max_workers=len(documents))
        try:
            results = await asyncio.gather(*[
                loop.run_in_executor(pool, self._process_document, doc, credentials, reconciler)
                for doc in documents
            ])
        finally:
            # Never block the event loop on workers; a cancelled batch
            # leaves its threads to finish in the background.
            pool.shutdown(wait=False)

        elapsed = time.time() - started
        ingestion_batch_duration_seconds.observe(elapsed)
        log.info(
            "ingestion_completed",
            failed=sum(1 for r in results if r.parse_error),
            candidates=sum(len(r.candidates) for r in results),
            duration_s=round(elapsed, 3),
        )
        return list(results)

    def _credentials_for(self, filename: str, credentials: list[tuple[int, str]]) -> list[tuple[int, str]]:
        # Rule passwords rank after every stored slot, in rule file order
        extra = passwords_for_file(self.filename_rules, filename)
        base = max([p for p, _ in credentials], default=0)
        return credentials + [(base + i, pw) for i, pw in enumerate(extra, start=1)]

    def _validate(self, document: SourceDocument) -> Optional[str]:
        if document.mime_type not in self.allowed_mime_types:
            return f"unsupported file type: {document.mime_type}"
        if not document.raw_bytes:
            return "file is empty"
        if len(document.raw_bytes) > self.max_upload_bytes:
            return f"file exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit"
        return None

    def _process_document(
        self,
        document: SourceDocument,
        credentials: list[tuple[int, str]],
        reconciler: DuplicateReconciler,
    ) -> IngestionResult:
        """Worker body. Runs on a pool thread; never raises."""
        log = logger.bind(filename=document.filename)

        rejection = self._validate(document)
        if rejection:
            documents_ingested_total.labels(outcome=DocumentOutcome.REJECTED.value).inc()
            log.info("document_rejected", reason=rejection)
            return IngestionResult(filename=document.filename, parse_error=rejection)

        try:
            readable = self.decryptor.decrypt(document, self._credentials_for(document.filename, credentials))
            parsed = self.parser.parse(readable, document.filename)
        except DecryptionFailed as e:
            documents_ingested_total.labels(outcome=DocumentOutcome.DECRYPTION_FAILED.value).inc()
            return IngestionResult(filename=document.filename, parse_error=e.message)
        except ParseError as e:
            documents_ingested_total.labels(outcome=DocumentOutcome.PARSE_FAILED.value).inc()
            log.warning("document_parse_failed", error=e.message)
            return IngestionResult(filename=document.filename, parse_error=e.message)
        except Exception as e:
            documents_ingested_total.labels(outcome=DocumentOutcome.PARSE_FAILED.value).inc()
            log.error("document_failed", error=str(e), exc_info=True)
            return IngestionResult(filename=document.filename, parse_error=f"unexpected error: {e}")

        candidates = reconciler.reconcile(parsed.candidates)
        duplicates = sum(1 for c in candidates if c.is_duplicate)
        candidates_extracted_total.labels(duplicate="true").inc(duplicates)
        candidates_extracted_total.labels(duplicate="false").inc(len(candidates) - duplicates)

        outcome = DocumentOutcome.PARSED if candidates else DocumentOutcome.EMPTY
        documents_ingested_total.labels(outcome=outcome.value).inc()
        log.info("document_ingested", bank=parsed.bank, candidates=len(candidates), duplicates=duplicates)

        return IngestionResult(
            filename=document.filename,
            bank=parsed.bank,
            candidates=candidates,
            total_amount=sum((c.amount for c in candidates), Decimal("0")),
        )


class IngestionSession:
    """
    One review-and-import round for a user: the results of a submission
    plus the working selection over them. Discarded after a successful
    commit or an explicit reset.
    """

    def __init__(self, user_id: int, orchestrator: IngestionOrchestrator, committer: ImportCommitter):
        self.user_id = user_id
        self.orchestrator = orchestrator
        self.committer = committer
        self.results: list[IngestionResult] = []
        self.selection = SelectionLedger()

    async def ingest(self, documents: Sequence[SourceDocument]) -> list[IngestionResult]:
        self.results = await self.orchestrator.submit(self.user_id, documents)
        self.selection.initialize(self.results)
        return self.results

    def toggle(self, filename: str, candidate: AnnotatedCandidate) -> bool:
        return self.selection.toggle(filename, candidate)

    def selected_count(self) -> int:
        return self.selection.selected_count()

    async def commit(self) -> ImportSummary:
        """Import the current selection. State is kept if the commit fails."""
        summary = await self.committer.commit(self.user_id, self.selection.all_selected())
        self.reset()
        return summary

    def reset(self) -> None:
        self.results = []
        self.selection.reset()
