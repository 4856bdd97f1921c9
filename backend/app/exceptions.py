"""
WellNest Backend — Custom Exception Hierarchy
==============================================

What:  Defines application-specific exceptions for each error category.
Why:   Services raise a category; global handlers in main.py translate it to
       an HTTP status code and the JSON error envelope. Services never build
       HTTP responses themselves.
How:   Each exception class carries a user-facing message, an optional
       context dict and a class-level `status_code`.
Who:   Raised by services, dependencies and routes; caught by global handlers.

Exception Hierarchy:
    WellNestError (base)
    ├── AuthenticationError      → 401 Unauthorized
    ├── ForbiddenError           → 403 Forbidden
    ├── ValidationError          → 400 Bad Request
    ├── InvalidOperationError    → 400 Bad Request (business rule refused)
    ├── NotFoundError            → 404 Not Found (absent or malformed id)
    ├── ConflictError            → 409 Conflict (unique key collision)
    ├── PayloadTooLargeError     → 413 Payload Too Large
    ├── FileStorageError         → 500 Internal Server Error
    ├── DatabaseError            → 500 Internal Server Error
    ├── ServiceUnavailableError  → 503 Service Unavailable
    └── GatewayTimeoutError      → 504 Gateway Timeout
"""

from typing import Any, Dict, Optional


class WellNestError(Exception):
    """
    Base exception for all WellNest application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only for client errors)
    """

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class AuthenticationError(WellNestError):
    """
    Raised when a request cannot be tied to an active account.

    Missing, malformed and expired tokens all use the same message so a
    caller cannot tell them apart.
    """

    status_code = 401
    error_code = "unauthenticated"

    def __init__(
        self,
        message: str = "Not authorized to access this route",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(WellNestError):
    """Raised when an authenticated principal lacks the required capability."""

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "Insufficient permissions",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ValidationError(WellNestError):
    """
    Raised when client input fails validation.

    What:    The client sent data that it can correct and resend.
    When:    Bad date strings, unknown date windows, wrong upload type,
             missing upload, unsafe filenames.
    HTTP:    400 Bad Request
    """

    status_code = 400
    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidOperationError(WellNestError):
    """
    Raised when a well-formed request violates a business safeguard.

    Example: deleting the last admin account, or deleting one's own account.
    """

    status_code = 400
    error_code = "invalid_operation"

    def __init__(
        self,
        message: str = "Operation not allowed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(WellNestError):
    """
    Raised when a requested resource does not exist.

    Malformed identifiers raise this too: an id that can never match a
    record is reported the same way as one that matches nothing.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource


class ConflictError(WellNestError):
    """Raised when a write collides with a unique key (e.g. an email)."""

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PayloadTooLargeError(WellNestError):
    """Raised when an upload exceeds the configured size limit."""

    status_code = 413
    error_code = "payload_too_large"

    def __init__(
        self,
        max_bytes: int,
        context: Optional[Dict[str, Any]] = None,
    ):
        max_mb = max_bytes // (1024 * 1024)
        message = f"File too large. Maximum size allowed is {max_mb}MB."
        ctx = context or {}
        ctx["max_bytes"] = max_bytes
        super().__init__(message=message, context=ctx)
        self.max_bytes = max_bytes


class FileStorageError(WellNestError):
    """
    Raised when file system operations fail.

    Recovery:
        - Log the error with full file path and OS error for debugging
        - Return generic message to client (don't expose file system paths)
    """

    status_code = 500
    error_code = "file_storage_error"

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(WellNestError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic.
        SQL text and constraint names are logged server-side only.
    """

    status_code = 500
    error_code = "database_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ServiceUnavailableError(WellNestError):
    """Raised when the store cannot be reached."""

    status_code = 503
    error_code = "service_unavailable"

    def __init__(
        self,
        message: str = "Database temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class GatewayTimeoutError(WellNestError):
    """Raised when a store operation exceeds its time budget."""

    status_code = 504
    error_code = "timeout"

    def __init__(
        self,
        message: str = "Request timed out. Please try again.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
