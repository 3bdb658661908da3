"""
/api/v1/settings/credentials endpoints.
Secrets are accepted but never returned; listings expose has_value only.
"""

from fastapi import APIRouter, Depends

from app.credentials.store import CredentialStore
from app.dependencies import get_credential_store, get_current_user_id, verify_api_key
from app.schemas.credentials import (
    CredentialBatchInput,
    CredentialInput,
    CredentialListResponse,
    MessageResponse,
)

router = APIRouter(
    prefix="/api/v1/settings/credentials",
    tags=["credentials"],
    dependencies=[Depends(verify_api_key)],
)


@router.get("", response_model=CredentialListResponse)
async def list_credentials(
    user_id: int = Depends(get_current_user_id),
    store: CredentialStore = Depends(get_credential_store),
):
    return CredentialListResponse(credentials=await store.list_all(user_id))


@router.put("", response_model=MessageResponse)
async def set_credentials(
    body: CredentialBatchInput,
    user_id: int = Depends(get_current_user_id),
    store: CredentialStore = Depends(get_credential_store),
):
    """Replace several slots at once. Blank secrets leave their slot untouched."""
    await store.set_many(user_id, body.credentials)
    return MessageResponse(message="passwords updated successfully")


@router.post("", response_model=MessageResponse)
async def set_credential(
    body: CredentialInput,
    user_id: int = Depends(get_current_user_id),
    store: CredentialStore = Depends(get_credential_store),
):
    await store.set_one(user_id, body.priority, body.secret_value, body.label)
    return MessageResponse(message="password saved successfully")


@router.delete("/{priority}", response_model=MessageResponse)
async def delete_credential(
    priority: int,
    user_id: int = Depends(get_current_user_id),
    store: CredentialStore = Depends(get_credential_store),
):
    await store.delete_one(user_id, priority)
    return MessageResponse(message="password deleted successfully")
