"""
Notekeeper Backend: Error Translator & Exception Handlers
==========================================================

What:  The single place mapping failures to HTTP responses.
How:   translate_storage_error() maps store-specific codes onto the error
       taxonomy; register_exception_handlers() installs FastAPI handlers that
       render every failure as {success: false, message, error?}.

Code map (PostgreSQL SQLSTATE / SQLite extended name / MySQL name):
    duplicate key            → ConflictError       (409)
    missing referenced row   → NotFoundError       (404)
    value too long           → InvalidInputError   (400)
    anything else            → InternalError       (500)

The raw `error` detail is only included when settings.include_error_detail
is true (any environment other than production).
"""

import logging
from typing import Dict, FrozenSet, Optional, Type

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    ConflictError,
    InternalError,
    InvalidInputError,
    NotekeeperError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from app.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

DUPLICATE_KEY_CODES: FrozenSet[str] = frozenset(
    {"23505", "SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY", "ER_DUP_ENTRY"}
)
MISSING_REFERENCE_CODES: FrozenSet[str] = frozenset(
    {"23503", "SQLITE_CONSTRAINT_FOREIGNKEY", "ER_NO_REFERENCED_ROW", "ER_NO_REFERENCED_ROW_2"}
)
VALUE_TOO_LONG_CODES: FrozenSet[str] = frozenset({"22001", "SQLITE_TOOBIG", "ER_DATA_TOO_LONG"})

STATUS_BY_ERROR: Dict[Type[NotekeeperError], int] = {
    ValidationError: 400,
    InvalidInputError: 400,
    NotFoundError: 404,
    ConflictError: 409,
    InternalError: 500,
    StorageError: 500,
}


def translate_storage_error(exc: StorageError) -> NotekeeperError:
    """Map a StorageError onto the error taxonomy by its code."""
    code = exc.code or ""
    context = {"code": code, "detail": exc.detail}
    if code in DUPLICATE_KEY_CODES:
        return ConflictError(message="Data conflict", context=context)
    if code in MISSING_REFERENCE_CODES:
        return NotFoundError(resource="resource", message="Resource not found", context=context)
    if code in VALUE_TOO_LONG_CODES:
        return InvalidInputError(message="Data too long", context=context)
    return InternalError(message="Internal server error", context=context)


def status_for(exc: NotekeeperError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]
    return 500


def error_response(status_code: int, message: str, detail: Optional[str] = None) -> JSONResponse:
    """Render the failure envelope; `error` only when detail is enabled."""
    content = {"success": False, "message": message}
    if detail and settings.include_error_detail:
        content["error"] = detail
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        RequestValidationError  → 400 (converted to ValidationError)
        StorageError            → translated, then rendered like the rest
        NotekeeperError         → status from STATUS_BY_ERROR
        Exception (fallback)    → 500
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        fields = []
        for error in errors:
            loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
            name = ".".join(loc) or "body"
            if name not in fields:
                fields.append(name)
        message = "Validation failed for: " + ", ".join(fields) if fields else "Validation failed"
        error = ValidationError(
            message=message,
            fields=fields,
            context={"errors": [f"{'.'.join(map(str, e.get('loc', ())))}: {e.get('msg')}" for e in errors]},
        )
        return await handle_app_error(request, error)

    @app.exception_handler(NotekeeperError)
    async def handle_app_error(request: Request, exc: NotekeeperError):
        rid = request_id_var.get("")
        if isinstance(exc, StorageError):
            exc = translate_storage_error(exc)
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return error_response(status_code, exc.message, exc.detail)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return error_response(500, "Internal server error", str(exc))
