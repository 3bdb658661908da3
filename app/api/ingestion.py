"""
/api/v1/ingestion and /api/v1/transactions/import endpoints.
Upload runs the whole decrypt-parse-reconcile pipeline inline and returns
one result per file. Import commits the client's selection.
"""

import structlog
from fastapi import APIRouter, Depends, File, UploadFile

from app.dependencies import get_committer, get_current_user_id, get_orchestrator, verify_api_key
from app.errors import ValidationError
from app.pipeline.committer import ImportCommitter
from app.pipeline.orchestrator import IngestionOrchestrator
from app.pipeline.types import SourceDocument
from app.schemas.ingestion import ImportRequest, ImportSummary, IngestionResponse

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["ingestion"], dependencies=[Depends(verify_api_key)])


@router.post("/ingestion", response_model=IngestionResponse)
async def submit_ingestion(
    files: list[UploadFile] = File(...),
    user_id: int = Depends(get_current_user_id),
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
):
    """Upload one or more statements. Per-file failures are reported per result."""
    if not files:
        raise ValidationError("no files uploaded")

    documents = [
        SourceDocument(
            filename=f.filename or "statement.pdf",
            raw_bytes=await f.read(),
            mime_type=f.content_type or "",
        )
        for f in files
    ]
    results = await orchestrator.submit(user_id, documents)
    return IngestionResponse(results=results)


@router.post("/transactions/import", response_model=ImportSummary)
async def commit_import(
    request: ImportRequest,
    user_id: int = Depends(get_current_user_id),
    committer: ImportCommitter = Depends(get_committer),
):
    """Persist the selected candidates as one all-or-nothing batch."""
    return await committer.commit(user_id, request.transactions)
