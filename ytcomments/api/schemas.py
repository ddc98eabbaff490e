"""Pydantic response models for the API."""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Liveness probe result."""

    status: str = "ok"


class ErrorResponse(BaseModel):
    """Error envelope of the download endpoint."""

    error: str
    message: str
