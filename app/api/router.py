"""
Top-level API router.
Combines all sub-routers into a single router.
"""

from fastapi import APIRouter

from app.api.credentials import router as credentials_router
from app.api.health import router as health_router
from app.api.ingestion import router as ingestion_router

api_router = APIRouter()

api_router.include_router(health_router)
api_router.include_router(ingestion_router)
api_router.include_router(credentials_router)
