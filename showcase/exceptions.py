"""
Showcase Backend — Custom Exception Hierarchy
===============================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions enable targeted error handling with appropriate HTTP
       status codes and user-friendly messages.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services and the role gate; caught by global handlers.

Exception Hierarchy:
    ShowcaseError (base)
    ├── ValidationError          → 422 Unprocessable Entity (field-level errors)
    ├── InvalidCredentialsError  → 422 Unprocessable Entity (generic login failure)
    ├── UnauthenticatedError     → 401 Unauthorized
    ├── ForbiddenError           → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── InvalidUploadError       → 400 Bad Request
    ├── FileStorageError         → 500 Internal Server Error
    ├── DatabaseError            → 500 Internal Server Error
    └── RateLimitExceededError   → 429 Too Many Requests
"""

from typing import Any, Dict, List, Optional


class ShowcaseError(Exception):
    """
    Base exception for all Showcase application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ShowcaseError):
    """
    Raised when client input fails validation.

    Carries a field-level error map so clients can highlight the offending
    inputs. A single `field` is shorthand for `errors={field: [message]}`.

    Example response:
        {
            "error": "validation_error",
            "message": "The selected type is invalid.",
            "errors": {"type": ["The selected type is invalid."]}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        errors: Optional[Dict[str, List[str]]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field
        self.errors = dict(errors or {})
        if field and field not in self.errors:
            self.errors[field] = [message]


class InvalidCredentialsError(ShowcaseError):
    """
    Raised when a login attempt fails.

    The message and error map are fixed: an unknown email and a wrong
    password must produce byte-identical responses.
    """

    MESSAGE = "email or password is incorrect."

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message=self.MESSAGE, context=context)
        self.errors = {"email": [self.MESSAGE]}


class UnauthenticatedError(ShowcaseError):
    """Raised when a request carries no bearer token, or one that does not resolve."""

    def __init__(
        self,
        message: str = "Unauthenticated.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(ShowcaseError):
    """Raised when an authenticated caller lacks one of the required roles."""

    def __init__(
        self,
        message: str = "This action is unauthorized.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(ShowcaseError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing records; services convert that
    into this exception so the handler can answer with 404.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class InvalidUploadError(ShowcaseError):
    """
    Raised when an uploaded payload is missing, empty, too large or not an image.

    Always raised before anything is written, so no partial state remains.
    """

    def __init__(
        self,
        message: str = "Invalid image upload.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(ShowcaseError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error (message is generic; path goes to the log)
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(ShowcaseError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the original
    error type travels in `context` for the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(ShowcaseError):
    """Raised when a client exceeds the per-IP request rate limit."""

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
