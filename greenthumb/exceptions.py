"""
GreenThumb Backend - Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for the different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return structured JSON error responses with the right status code.
Who:   Raised by services and the persistence layer; caught by global handlers.

Exception Hierarchy:
    GreenThumbError (base)
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── UnauthorizedError        → 401 Unauthorized (not an admin, or banned)
    ├── NotFoundError            → 404 Not Found
    ├── DatabaseError            → 500 Internal Server Error
    ├── MLServiceError           → 500 Internal Server Error
    ├── CircuitBreakerOpenError  → 500 Internal Server Error
    └── RateLimitExceededError   → 429 Too Many Requests
"""

from typing import Any, Dict, Optional


class ErrorMessages:
    """
    Client-facing message vocabulary shared by request validation and services.

    Kept in one place so schema validation errors and service-level checks
    read the same to API consumers.
    """

    @staticmethod
    def missing_param(param: str) -> str:
        return f"Missing required '{param}' parameter in request body."

    @staticmethod
    def missing_object(obj: str) -> str:
        return f"The requested {obj} object could not be found in the database."

    @staticmethod
    def invalid_param(param: str) -> str:
        return f"Parameter '{param}' is invalid."

    @staticmethod
    def unauthorized() -> str:
        return "User is not authorized to perform this action."

    @staticmethod
    def missing_text(param: str) -> str:
        return f"Parameter '{param}' must be a non-empty String."

    @staticmethod
    def no_neg(param: str) -> str:
        return f"Parameter '{param}' may not be negative."

    @staticmethod
    def only_pos(param: str) -> str:
        return f"Parameter '{param}' must be positive."


class GreenThumbError(Exception):
    """
    Base exception for all GreenThumb application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client
                  for server-side errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(GreenThumbError):
    """
    Raised when client input fails validation.

    When:    Business rules the request schema cannot express: duplicate ids,
             references to records in the wrong state, handling a report
             twice.
    HTTP:    400 Bad Request
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


class UnauthorizedError(GreenThumbError):
    """
    Raised when the acting user may not perform the requested operation.

    When:    adminId does not belong to an admin, or the acting user is
             under an active ban.
    HTTP:    401 Unauthorized
    """

    def __init__(
        self,
        message: str = ErrorMessages.unauthorized(),
        user_id: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if user_id is not None:
            ctx["user_id"] = user_id
        super().__init__(message=message, context=ctx)
        self.user_id = user_id


class NotFoundError(GreenThumbError):
    """
    Raised when a requested record does not exist.

    SQLAlchemy returns None for missing rows; the persistence layer converts
    that into this exception so routes never check for None.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = ErrorMessages.missing_object(resource)
        if resource_id is not None:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class DatabaseError(GreenThumbError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic. Details
    (statement, constraint name) are logged server-side only.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MLServiceError(GreenThumbError):
    """
    Raised when the plant classifier fails or returns an unusable response.

    HTTP:    500 Internal Server Error (no detail leaked to the caller)
    """

    def __init__(
        self,
        message: str = "Plant classification service failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class CircuitBreakerOpenError(GreenThumbError):
    """
    Raised when the classifier circuit breaker is OPEN.

    How circuit breaker works:
        CLOSED (normal) → failures increment counter
        → After N failures → OPEN (reject all calls for recovery_time seconds)
        → After recovery_time → HALF-OPEN (allow one test call)
        → If test succeeds → CLOSED
        → If test fails → OPEN again
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        recovery_time: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            "Plant classification service is temporarily unavailable due to "
            f"repeated failures. Calls resume in approximately {recovery_time} seconds."
        )
        ctx = context or {}
        ctx["recovery_time"] = recovery_time
        super().__init__(message=message, context=ctx)
        self.recovery_time = recovery_time


class RateLimitExceededError(GreenThumbError):
    """
    Raised when a client exceeds the per-IP request rate limit.

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
