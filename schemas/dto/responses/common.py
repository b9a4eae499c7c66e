"""
Common response DTOs shared across multiple endpoints.

ErrorResponse    — standard error shape from AppError.to_dict(); attached to
                   routers through error_responses()
HealthResponse   — GET /health
MessageResponse  — generic {message} shape used by many endpoints
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    """Standard error JSON body produced by the AppError exception handler."""

    model_config = ConfigDict(populate_by_name=True)

    error: str
    code: str
    field: Optional[str] = None
    details: Optional[Any] = None


def error_responses(*status_codes: int) -> dict[int, dict[str, Any]]:
    """OpenAPI `responses=` entries documenting the AppError body."""
    return {code: {"model": ErrorResponse} for code in status_codes}


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    model_config = ConfigDict(populate_by_name=True)

    status: str
    checks: dict[str, str]


class MessageResponse(BaseModel):
    """Generic acknowledgement returned by several endpoints."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
