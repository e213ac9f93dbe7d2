"""
QuillMind Backend — Custom Exception Hierarchy
================================================

What:  Defines application-specific exceptions for each failure class.
Why:   Services raise these instead of HTTP errors; the global handlers
       registered in main.py turn them into the shared JSON error envelope.
How:   Each class carries a user-safe message, a debug-only context dict,
       a machine-readable `code` and the HTTP `status_code` it maps to.
Who:   Raised by services, dependencies and middleware; caught by handlers.

Exception Hierarchy:
    QuillMindError (base)
    ├── ValidationError          → 400 Bad Request
    ├── UnauthorizedError        → 401 Unauthorized
    ├── ForbiddenError           → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── RateLimitExceededError   → 429 Too Many Requests
    ├── UpstreamError            → upstream 5xx / 502 / 500
    │   └── CircuitBreakerOpenError → 503 Service Unavailable
    └── InternalError            → 500 Internal Server Error
        └── DatabaseError        → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class QuillMindError(Exception):
    """
    Base exception for all QuillMind application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    code = "internal_error"
    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(QuillMindError):
    """
    Raised when client input fails validation.

    When:    Missing or blank required fields, empty names, unsupported
             text actions.
    HTTP:    400 Bad Request
    """

    code = "validation_error"
    status_code = 400

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


class UnauthorizedError(QuillMindError):
    """
    Raised when the caller is not authenticated.

    When:    No bearer token on a protected route, or login with bad credentials.
    HTTP:    401 Unauthorized (with WWW-Authenticate: Bearer)
    """

    code = "unauthorized"
    status_code = 401

    def __init__(
        self,
        message: str = "Authentication required.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(QuillMindError):
    """
    Raised when an authenticated principal may not act on a resource.

    When:    Token signature invalid or expired; resource owned by someone else.
    HTTP:    403 Forbidden
    """

    code = "forbidden"
    status_code = 403

    def __init__(
        self,
        message: str = "You do not have access to this resource.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(QuillMindError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; the service layer converts
    that None into this exception.
    HTTP:    404 Not Found
    """

    code = "not_found"
    status_code = 404

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None,
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


class ConflictError(QuillMindError):
    """
    Raised when a write would violate a uniqueness rule.

    When:    Registering with an email or username that is already taken.
    HTTP:    409 Conflict
    """

    code = "conflict"
    status_code = 409

    def __init__(
        self,
        message: str = "The resource already exists.",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class RateLimitExceededError(QuillMindError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests (with Retry-After)
    """

    code = "rate_limit_exceeded"
    status_code = 429

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


class UpstreamError(QuillMindError):
    """
    Raised when the generative API call fails or returns an unusable shape.

    Status mapping:
        upstream status 5xx   → same status (passthrough)
        upstream status other → 502 Bad Gateway
        no upstream status    → 500
    """

    code = "upstream_error"

    def __init__(
        self,
        message: str = "The AI service failed to process the request.",
        upstream_status: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if upstream_status is not None:
            ctx["upstream_status"] = upstream_status
        super().__init__(message=message, context=ctx)
        self.upstream_status = upstream_status

    @property
    def status_code(self) -> int:
        if self.upstream_status is None:
            return 500
        if 500 <= self.upstream_status <= 599:
            return self.upstream_status
        return 502


class CircuitBreakerOpenError(UpstreamError):
    """
    Raised when the circuit breaker is in OPEN state.

    When:    After cb_failure_threshold consecutive Gemini failures.
    HTTP:    503 Service Unavailable (with Retry-After)
    """

    code = "upstream_unavailable"

    def __init__(
        self,
        recovery_time: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            "AI service is temporarily unavailable due to repeated failures. "
            f"Please retry in approximately {recovery_time} seconds."
        )
        ctx = context or {}
        ctx["recovery_time"] = recovery_time
        super().__init__(message=message, upstream_status=503, context=ctx)
        self.recovery_time = recovery_time


class InternalError(QuillMindError):
    """
    Raised for unexpected server faults (misconfiguration, invariant breaks).

    The message returned to the client is always generic; details are
    logged server-side only.
    HTTP:    500 Internal Server Error
    """

    code = "internal_error"
    status_code = 500

    def __init__(
        self,
        message: str = "An internal error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(InternalError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, deadlock, unexpected constraint failure.
    Security: SQL text and constraint names stay in the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
