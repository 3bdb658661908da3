"""
Pydantic request/response schemas for /api/v1/settings/credentials.
Secret values are accepted on input only.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# ── Request Schemas ──────────────────────────────────────────

class CredentialInput(BaseModel):
    """One slot to upsert. Priority range is checked by the CredentialStore."""
    secret_value: str = Field(alias="password")
    priority: int
    label: str = ""

    model_config = {"populate_by_name": True}


class CredentialBatchInput(BaseModel):
    credentials: list[CredentialInput] = Field(alias="passwords")

    model_config = {"populate_by_name": True}


# ── Response Schemas ─────────────────────────────────────────

class CredentialView(BaseModel):
    """A stored slot as callers see it."""
    priority: int
    label: str = ""
    has_value: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CredentialListResponse(BaseModel):
    credentials: list[CredentialView]


class MessageResponse(BaseModel):
    message: str
