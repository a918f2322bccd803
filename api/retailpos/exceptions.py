import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from retailpos.errors import DB_ERROR_MESSAGES, DEFAULT_DB_ERROR, ERROR_STATUS_MAP, ErrorType

logger = logging.getLogger(__name__)

# SQLite reports constraint failures by message only
_SQLITE_CODES = {
    "UNIQUE constraint failed": "23505",
    "FOREIGN KEY constraint failed": "23503",
    "NOT NULL constraint failed": "23502",
    "CHECK constraint failed": "23514",
}


class AppException(Exception):
    """Custom exception that services can raise."""

    def __init__(self, error_type: ErrorType, message: str):
        self.error_type = error_type
        self.message = message
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_MAP.get(self.error_type, 500)


def integrity_error_code(exc: IntegrityError) -> str | None:
    """Return the PostgreSQL error code behind an IntegrityError, if known."""
    code = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    if code:
        return code
    text = str(exc.orig)
    for prefix, sqlite_code in _SQLITE_CODES.items():
        if prefix in text:
            return sqlite_code
    return None


def from_integrity_error(exc: IntegrityError) -> AppException:
    error_type, message = DB_ERROR_MESSAGES.get(integrity_error_code(exc), DEFAULT_DB_ERROR)
    return AppException(error_type, message)


async def app_exception_handler(_request: Request, exc: AppException) -> JSONResponse:
    """Global handler for AppException - converts to proper HTTP response."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message}
    )


async def integrity_exception_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    """Constraint violations that escaped a service are reported with the mapped message."""
    app_exc = from_integrity_error(exc)
    logger.warning(f"Integrity error ({integrity_error_code(exc)}): {exc.orig}")
    return JSONResponse(
        status_code=app_exc.status_code,
        content={"detail": app_exc.message}
    )


async def generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Global handler for unhandled exceptions - returns 500."""
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Beklenmeyen bir hata oluştu"}
    )
