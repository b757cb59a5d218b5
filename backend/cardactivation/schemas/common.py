"""
Card Activation Backend — Shared Response Schemas
===================================================

What:  Error body returned by every exception handler, and the /health body.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standard error body.

    Example:
        {
            "success": false,
            "message": "Daily limit must be between 0 and 5000.",
            "request_id": "1f3a9c2b"
        }
    """
    success: bool = Field(default=False)
    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and database status.
    Who:   Returned by GET /health for container and load balancer probes.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
