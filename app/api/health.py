"""
Health check endpoints.
/health always answers 200; database reachability is reported in the body.
"""

from fastapi import APIRouter
from sqlalchemy import text

from app.config import settings
from app.models.database import async_session_factory

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    db_ok = False
    db_error = None
    try:
        async with async_session_factory() as session:
            result = await session.execute(text("SELECT 1"))
            db_ok = result.scalar() == 1
    except Exception as e:
        db_error = str(e)[:200]

    response = {
        "status": "healthy" if db_ok else "degraded",
        "version": settings.APP_VERSION,
        "database": "connected" if db_ok else "unreachable",
    }
    if db_error:
        response["database_error"] = db_error
    return response


@router.get("/health/ready")
async def readiness_check():
    """Readiness probe: ready only when the database answers."""
    try:
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
            return {"ready": True}
    except Exception:
        return {"ready": False}
