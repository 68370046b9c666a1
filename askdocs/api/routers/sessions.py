"""
Session API endpoints.

Routes:
- POST /sessions/clear - Delete the session's knowledge base

Dependencies: askdocs.application.services.session_service, askdocs.models.session
System role: Session management HTTP API
"""

import logging

from fastapi import APIRouter, Depends

from askdocs.api.deps import get_session_service
from askdocs.api.routers.router_utils import handle_service_errors
from askdocs.application.services.session_service import SessionService
from askdocs.models.session import ClearSessionRequest, ClearSessionResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.post("/clear", response_model=ClearSessionResponse)
@handle_service_errors
async def clear_session(
    request: ClearSessionRequest,
    session_service: SessionService = Depends(get_session_service),
) -> ClearSessionResponse:
    """
    Clear a session's collection.

    Clearing a session with no data is not an error: cleared is False.

    Raises:
        HTTPException(400): Session ID missing
        HTTPException(503): Vector store unavailable
    """
    return await session_service.clear_session(request.session_id)
