"""Health route."""

from __future__ import annotations

from fastapi import APIRouter

from ytcomments.api.schemas import HealthResponse

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Simple liveness check."""
    return HealthResponse(status="ok")
