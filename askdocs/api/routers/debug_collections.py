"""
Collection debug API endpoints.

Routes:
- GET /collections - List session collections
- DELETE /collections/stale - Delete collections older than max_age_hours

Dependencies: askdocs.application.services.session_service
System role: Collection maintenance HTTP API
"""

from fastapi import APIRouter, Depends, Query

from askdocs.api.deps import get_session_service
from askdocs.api.routers.router_utils import handle_service_errors
from askdocs.application.services.session_service import SessionService
from askdocs.models.session import CollectionListResponse, SweepResponse

router = APIRouter(prefix="/collections", tags=["collections"])


@router.get("", response_model=CollectionListResponse)
@handle_service_errors
async def list_collections(
    session_service: SessionService = Depends(get_session_service),
) -> CollectionListResponse:
    """List every session collection with point counts and creation times."""
    return await session_service.list_collections()


@router.delete("/stale", response_model=SweepResponse)
@handle_service_errors
async def sweep_stale_collections(
    max_age_hours: float | None = Query(default=None, gt=0),
    session_service: SessionService = Depends(get_session_service),
) -> SweepResponse:
    """Delete collections older than max_age_hours (defaults to the configured age)."""
    return await session_service.sweep_stale(max_age_hours)
