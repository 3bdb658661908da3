"""
FastAPI dependency injection.
Provides DB sessions, the caller's identity, API key validation and the
per-request pipeline services built on top of the session.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.credentials.rules import FilenameRule, load_filename_rules
from app.credentials.store import CredentialStore
from app.models.database import get_session
from app.pipeline.committer import ImportCommitter
from app.pipeline.orchestrator import IngestionOrchestrator
from app.storage.credential_repo import SqlCredentialRepository
from app.storage.transaction_repo import SqlTransactionRepository


async def get_db() -> AsyncSession:
    """Yield an async DB session."""
    async for session in get_session():
        yield session


async def verify_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
) -> Optional[str]:
    """
    Verify API key if configured.
    If API_KEY is not set, all requests are allowed (dev mode).
    """
    if settings.API_KEY is None:
        return None

    if x_api_key is None or x_api_key != settings.API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key",
        )
    return x_api_key


async def get_current_user_id(
    x_user_id: Optional[int] = Header(None, alias="X-User-Id"),
) -> int:
    """Identity is established upstream; the gateway forwards it as X-User-Id."""
    if x_user_id is None or x_user_id < 1:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid X-User-Id header",
        )
    return x_user_id


@lru_cache
def get_filename_rules() -> list[FilenameRule]:
    return load_filename_rules(settings.FILENAME_RULES_PATH)


def get_credential_store(session: AsyncSession = Depends(get_db)) -> CredentialStore:
    return CredentialStore(SqlCredentialRepository(session))


def get_orchestrator(
    session: AsyncSession = Depends(get_db),
    store: CredentialStore = Depends(get_credential_store),
) -> IngestionOrchestrator:
    return IngestionOrchestrator(
        credential_store=store,
        transactions=SqlTransactionRepository(session),
        filename_rules=get_filename_rules(),
    )


def get_committer(session: AsyncSession = Depends(get_db)) -> ImportCommitter:
    return ImportCommitter(SqlTransactionRepository(session))
