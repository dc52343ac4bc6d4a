"""
ProductHub Backend — Shared Response Schemas
==============================================

What:  The JSON envelope every endpoint answers with, plus the error and
       health payloads.

Envelope shape:
    {
        "status": 200,
        "message": "Success Get All Products",
        "data": [...]
    }

`status` mirrors the HTTP status code so clients that only read the body
still see the outcome.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Success envelope. `data` is null for operations with nothing to return."""

    status: int = Field(default=200, description="HTTP status code of the response")
    message: str = Field(description="Human-readable outcome")
    data: Optional[T] = Field(default=None, description="Operation payload")


class ErrorResponse(BaseModel):
    """
    Error envelope produced by the global exception handlers.

    Example:
        {
            "status": 400,
            "error": "validation_error",
            "message": "Product ID Tidak Ditemukan",
            "data": null,
            "request_id": "a1b2c3d4"
        }
    """

    status: int = Field(description="HTTP status code")
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    data: Optional[dict] = Field(default=None, description="Always null on errors")
    details: Optional[dict] = Field(default=None, description="Field-level context for 4xx errors")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for load balancer and container probes."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
