"""Shared response schemas."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error envelope returned for every failed request."""

    error: str
    message: str | None = None


class HealthResponse(BaseModel):
    """Liveness probe response."""

    status: str
    timestamp: str
