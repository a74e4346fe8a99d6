"""
Library Store Backend - Error Kinds and Exception Hierarchy
============================================================

What:  Application exceptions, each tagged with an `ErrorKind`.
How:   Every exception carries a kind, a user-facing message, an optional list
       of per-item error strings, and a context dict for server-side logs.
       The single handler in main.py turns the kind into an HTTP status via
       `STATUS_BY_KIND`; nothing inspects message text to classify an error.
Who:   Raised by services and the auth dependency; caught by the global handler.

Exception Hierarchy:
    LibraryError (base, kind chosen per instance)
    ├── ValidationError       → VALIDATION      → 400 Bad Request
    ├── AuthenticationError   → AUTHENTICATION  → 401 Unauthorized
    ├── NotFoundError         → NOT_FOUND       → 404 Not Found
    ├── ConflictError         → CONFLICT        → 409 Conflict
    └── DatabaseError         → INTERNAL        → 500 Internal Server Error
"""

import enum
from typing import Any, Dict, List, Optional


class ErrorKind(str, enum.Enum):
    """Classification of every failure the API can report."""

    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


class LibraryError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        kind:     ErrorKind used to pick the HTTP status
        message:  User-facing description (safe to return in API response)
        errors:   Optional itemised problems, returned as `errors` in the body
        context:  Debug info (logged, NOT returned to the client)
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        errors: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
        kind: Optional[ErrorKind] = None,
    ):
        if kind is not None:
            self.kind = kind
        self.message = message
        self.errors = list(errors) if errors else []
        self.context = context or {}
        super().__init__(self.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]

    def to_body(self) -> Dict[str, Any]:
        """Error body returned to clients: {success, message, errors?}."""
        body: Dict[str, Any] = {"success": False, "message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(LibraryError):
    """
    Raised when client input fails validation.

    When:  Missing fields, bad ids, non-positive quantities, unknown update keys.
    HTTP:  400 Bad Request
    """

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str = "Validation failed",
        errors: Optional[List[str]] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, errors=errors, context=ctx)
        self.field = field


class AuthenticationError(LibraryError):
    """
    Raised when a request cannot be tied to a valid user.

    When:  Missing/invalid/expired bearer token, bad credentials on login.
    HTTP:  401 Unauthorized
    """

    kind = ErrorKind.AUTHENTICATION

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(LibraryError):
    """
    Raised when a requested resource does not exist (or is soft-deleted).

    HTTP:  404 Not Found

    SQLAlchemy returns None for missing rows; services convert that None into
    this exception so the HTTP layer stays out of service logic.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        message: Optional[str] = None,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if message is None:
            message = f"The requested {resource} was not found"
            if resource_id:
                message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(LibraryError):
    """
    Raised when the request conflicts with current state.

    When:  Insufficient stock at checkout, duplicate email/title/genre name.
    HTTP:  409 Conflict
    """

    kind = ErrorKind.CONFLICT

    def __init__(
        self,
        message: str = "The request conflicts with the current state of the resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(LibraryError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:  500 Internal Server Error

    The message returned to the client is always generic; query text,
    constraint names and driver errors go to the server log via `context`.
    """

    kind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
