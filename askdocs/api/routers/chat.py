"""Chat API endpoints.

Routes:
- POST /chat - Ask a question grounded in the session's knowledge base

Dependencies: askdocs.application.services.chat_service
System role: Chat HTTP API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from askdocs.api.deps import get_chat_service
from askdocs.api.routers.router_utils import (
    ClientDisconnectedError,
    handle_service_errors,
    run_until_disconnected,
)
from askdocs.api.routers.router_utils.disconnect import CLIENT_CLOSED_REQUEST
from askdocs.application.services.chat_service import ChatService
from askdocs.models.chat import ChatRequest, ChatResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.post("/chat", response_model=ChatResponse)
@handle_service_errors
async def chat(
    request: ChatRequest,
    http_request: Request,
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    """Answer a question from the session's documents.

    Model and vector store failures produce a degraded answer (200) rather than
    an error. The work is cancelled if the client disconnects.

    Raises:
        HTTPException(400): Session or question missing, or k invalid
    """
    try:
        answer = await run_until_disconnected(
            http_request,
            chat_service.ask(request.session_id, request.question, request.k),
        )
    except ClientDisconnectedError:
        raise HTTPException(status_code=CLIENT_CLOSED_REQUEST, detail="Client closed request")

    return ChatResponse(
        text=answer.text,
        sources=answer.sources,
        diagnostics=answer.diagnostics,
    )
