"""
Error taxonomy for the ingestion and import pipeline.

Per-document errors (DecryptionFailed, ParseError) are caught by the
orchestrator and reported on that document's result. Everything else is
batch-fatal and rendered by the handler registered in app.main.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base application error."""

    status_code = 500

    def __init__(self, message: str, error_code: str = "ERR_APP"):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class ValidationError(AppError):
    """Malformed input. Raised before any side effect."""

    status_code = 422

    def __init__(self, message: str):
        super().__init__(message, error_code="ERR_VALIDATION")


class DecryptionFailed(AppError):
    """No configured credential opened the document."""

    def __init__(self, filename: str, attempts: int = 0):
        self.filename = filename
        self.attempts = attempts
        super().__init__(
            f"unable to decrypt {filename}: all passwords failed or PDF is corrupted",
            error_code="ERR_DECRYPTION",
        )


class ParseError(AppError):
    """Document opened but no transactions could be extracted."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason, error_code="ERR_PARSE")


class ImportRejected(AppError):
    """Commit attempted with nothing to import."""

    status_code = 400

    def __init__(self, reason: str = "no transactions selected"):
        self.reason = reason
        super().__init__(reason, error_code="ERR_IMPORT_REJECTED")


class PersistenceFailure(AppError):
    """The store rejected a write. Nothing from the batch was persisted."""

    status_code = 503

    def __init__(self, message: str):
        super().__init__(message, error_code="ERR_PERSISTENCE")


def register_error_handlers(app: FastAPI) -> None:
    """Render AppError subclasses as {"error", "error_code"} JSON."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        logger.warning(
            "request_failed",
            path=str(request.url.path),
            error_code=exc.error_code,
            error=exc.message,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message, "error_code": exc.error_code},
        )
