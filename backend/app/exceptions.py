"""
Notekeeper Backend: Custom Exception Hierarchy
===============================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (app.error_handlers) catch these and
       return the `{success: false, message, error?}` envelope with the
       matching HTTP status code.
Who:   Raised by the database gateway and the notes service; caught by
       global handlers.

Exception Hierarchy:
    NotekeeperError (base)
    ├── ValidationError      → 400 Bad Request (client can fix)
    ├── NotFoundError        → 404 Not Found
    ├── ConflictError        → 409 Conflict
    ├── InvalidInputError    → 400 Bad Request (value exceeds storage limits)
    ├── InternalError        → 500 Internal Server Error
    └── StorageError         → 500 until translated (see app.error_handlers)

StorageError is the only exception raised by the persistence gateway. It
carries the store-specific failure code; translate_storage_error() maps that
code onto the rest of the taxonomy.
"""

from typing import Any, Dict, Optional


class NotekeeperError(Exception):
    """
    Base exception for all Notekeeper application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only as `error` detail
                  outside production)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    @property
    def detail(self) -> Optional[str]:
        """Raw diagnostic text for the response `error` field."""
        detail = self.context.get("detail")
        return str(detail) if detail is not None else None


class ValidationError(NotekeeperError):
    """
    Raised when client input fails validation.

    When:    Missing title/content on create or update, import payload that
             is not an array, malformed query or path parameters.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        fields: Optional[list] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if fields:
            ctx["fields"] = list(fields)
        super().__init__(message=message, context=ctx)
        self.fields = list(fields or [])

    @property
    def detail(self) -> Optional[str]:
        errors = self.context.get("errors")
        return str(errors) if errors else None


class NotFoundError(NotekeeperError):
    """
    Raised when a requested resource does not exist.

    When:    Any id-addressed note operation on an id that is not stored.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id is not None:
                message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource_id = resource_id


class ConflictError(NotekeeperError):
    """
    Raised when a write collides with an existing row (duplicate key).

    HTTP:    409 Conflict
    """

    def __init__(
        self,
        message: str = "The data conflicts with an existing record",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidInputError(NotekeeperError):
    """
    Raised when a value exceeds what the store accepts (e.g. a title longer
    than the column allows).

    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "The submitted data is too long",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InternalError(NotekeeperError):
    """
    Unrecognized storage failure or unexpected error.

    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "Internal server error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StorageError(NotekeeperError):
    """
    Raised by the persistence gateway when the database rejects or fails
    a statement (connectivity loss, constraint violation, bad SQL).

    Attributes:
        code:    Store-specific failure code: PostgreSQL SQLSTATE ("23505"),
                 SQLite extended error name ("SQLITE_CONSTRAINT_UNIQUE"), or
                 the driver exception class name when neither is available.
        detail:  Driver error text. Never returned to clients in production.

    Nothing in the core retries on StorageError; it is reported as-is.
    """

    def __init__(
        self,
        code: Optional[str] = None,
        detail: Optional[str] = None,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if code:
            ctx["code"] = code
        super().__init__(message=message, context=ctx)
        self.code = code
        self._detail = detail

    @property
    def detail(self) -> Optional[str]:
        return self._detail

    @classmethod
    def from_exception(cls, exc: BaseException) -> "StorageError":
        """Build a StorageError from a SQLAlchemy / DBAPI exception."""
        orig = getattr(exc, "orig", None) or exc
        code = (
            getattr(orig, "sqlstate", None)
            or getattr(orig, "pgcode", None)
            # sqlite3 exposes sqlite_errorname from Python 3.11
            or getattr(orig, "sqlite_errorname", None)
            or type(orig).__name__
        )
        return cls(code=str(code), detail=str(orig))
