"""
ScanPlant Backend — Custom Exception Hierarchy
================================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with correct HTTP status codes.
Who:   Raised by services, routes and middleware; caught by global handlers.

Exception Hierarchy:
    ScanPlantError (base)
    ├── ValidationError            → 400 Bad Request (client can fix)
    ├── AuthenticationRequiredError → 401 Unauthorized (no caller identity)
    ├── NotFoundError              → 404 Not Found (absent OR not yours)
    ├── RateLimitExceededError     → 429 Too Many Requests
    ├── FileStorageError           → 500 Internal Server Error
    ├── DatabaseError              → 500 Internal Server Error
    └── NotificationDispatchError  → 502 Bad Gateway

Not-found vs. forbidden:
    Services return None/False both when a record does not exist and when the
    caller may not touch it. Routes turn that single signal into NotFoundError,
    so a non-owner can never tell whether another user's record exists.
    There is no ForbiddenError in this hierarchy.
"""

from typing import Any, Dict, Optional


class ScanPlantError(Exception):
    """
    Base exception for all ScanPlant application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged; only some handlers return it)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ScanPlantError):
    """
    Raised when client input fails a business rule.

    When:    Missing scientific name, bad upload, priority outside 1-3,
             blank search term, plant reference not owned by the expected
             user, unknown notification target.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "Reminder's plant reference invalid: plant not found or not owned by user",
            "details": {"field": "plant_id"}
        }
    """

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


class AuthenticationRequiredError(ScanPlantError):
    """
    Raised when a caller-scoped route receives no resolved identity.

    The authentication gateway in front of this service is expected to set
    X-User-Id; the core never authenticates on its own.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = "A resolved caller identity (X-User-Id) is required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(ScanPlantError):
    """
    Raised when a requested resource does not exist or is not visible to the caller.

    HTTP:    404 Not Found
    The message is identical in both cases.
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


class FileStorageError(ScanPlantError):
    """
    Raised when blob store operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotificationDispatchError(ScanPlantError):
    """
    Raised by a notification sender whose channel failed.

    Not caught or retried by NotificationService: it propagates, the request
    transaction rolls back and the Pending notification is not kept.
    HTTP:    502 Bad Gateway
    """

    def __init__(
        self,
        message: str = "The notification could not be delivered",
        channel: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if channel:
            ctx["channel"] = channel
        super().__init__(message=message, context=ctx)
        self.channel = channel


class DatabaseError(ScanPlantError):
    """
    Raised when database operations fail unexpectedly.

    HTTP:    500 Internal Server Error
    The message returned to the client is always generic; details are
    logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(ScanPlantError):
    """
    Raised when a caller exceeds the request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After header)
    """

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
