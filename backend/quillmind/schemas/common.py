"""
QuillMind Backend — Shared Response Schemas
=============================================

What:  The error envelope, the plain message body, and the health report.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body returned by every failing endpoint.

    Fields:
        code:       Machine-readable error code ("not_found", "forbidden", ...)
        message:    Human-readable description, safe to show to users
        details:    Optional extra context (e.g. which field failed validation)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "code": "validation_error",
            "message": "Project name must not be empty.",
            "details": {"field": "name"},
            "request_id": "3f2a9c1e"
        }
    """
    code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class MessageResponse(BaseModel):
    """Body for successful operations that return no resource (deletes)."""
    message: str


class HealthResponse(BaseModel):
    """Health check response showing service and dependency status."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    ai: str = Field(description="Generative API status: available, unavailable, circuit_open")
    uptime_seconds: float = Field(description="Seconds since service started")
