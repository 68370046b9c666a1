"""
Health check API endpoints.

Routes: GET /health, GET /health/vector-store

Dependencies: askdocs.api.deps
System role: Health check HTTP API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from askdocs.api.deps import get_service_cache
from askdocs.api.deps.dependencies import ServiceCache

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/vector-store", response_model=HealthResponse)
async def health_check_vector_store(
    cache: ServiceCache = Depends(get_service_cache),
) -> HealthResponse:
    """Vector store health check: lists collections on the configured Qdrant."""
    try:
        await cache.vector_client.get_collections()
    except Exception as e:
        logger.error(f"{__name__}:health_check_vector_store - {type(e).__name__}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Vector store unreachable",
        )
    return HealthResponse(status="healthy", message="Vector store accessible")
