"""
ProductHub Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for each error scenario.
How:   Each exception carries a user-facing message, an optional context dict
       (logged, never returned for 5xx), the HTTP status it maps to, and a
       machine-readable error code. One global handler in main.py turns any
       of them into the JSON envelope.
Who:   Raised by validators, services and the auth guard; caught by the
       global handlers.

Exception Hierarchy:
    ProductHubError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── ConflictError            → 400 Bad Request (duplicate unique value)
    ├── AuthError                → 401 Unauthorized
    ├── AuthorizationError       → 403 Forbidden
    ├── NotFoundError            → 404 Not Found (400 for product ids)
    ├── FileStorageError         → 500 Internal Server Error
    └── DatabaseError            → 500 Internal Server Error

Messages returned to API consumers follow the wording the mobile client
already displays (Indonesian), so they are passed in by the raising code.
"""

from typing import Any, Dict, Optional


class ProductHubError(Exception):
    """
    Base exception for all ProductHub application errors.

    Attributes:
        message:      User-facing error description
        context:      Additional debug info (logged; returned only for 4xx)
        status_code:  HTTP status the global handler responds with
        error_code:   Machine-readable code placed in the envelope
    """

    status_code: int = 500
    error_code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ProductHubError):
    """
    Raised when client input fails validation.

    When:    Malformed email, short password, blank required fields, bad
             pagination pair, unsupported image type, missing upload.
    HTTP:    400 Bad Request

    Example response:
        {
            "status": 400,
            "error": "validation_error",
            "message": "Password minimal 8 karakter",
            "data": null,
            "request_id": "a1b2c3d4"
        }
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


class ConflictError(ValidationError):
    """Raised when a unique value (user email) is already taken. HTTP 400."""

    error_code = "conflict"


class AuthError(ProductHubError):
    """
    Raised when the caller is not authenticated.

    When:    Missing Authorization header, wrong scheme, invalid/expired token,
             unknown refresh session, wrong email/password at login.
    HTTP:    401 Unauthorized (with WWW-Authenticate: Bearer)
    """

    status_code = 401
    error_code = "unauthorized"

    def __init__(
        self,
        message: str = "Token tidak valid atau sudah kadaluwarsa",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(ProductHubError):
    """
    Raised when an authenticated caller targets a resource they do not own.

    When:    Updating, deleting or changing the image of another user's product.
    HTTP:    403 Forbidden
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "Anda tidak memiliki akses ke resource ini",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(ProductHubError):
    """
    Raised when a requested resource does not exist.

    HTTP:    404 by default. Product lookups pass status_code=400 because the
             client treats an unknown product id as a bad parameter.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
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
        if status_code is not None:
            self.status_code = status_code


class FileStorageError(ProductHubError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error; the path is logged, never returned.
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(ProductHubError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, timeout, deadlock, driver error.
    HTTP:    500 Internal Server Error

    The response message is always the opaque "System error"; the SQL error
    and its context are logged server-side only.
    """

    def __init__(
        self,
        message: str = "System error",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
