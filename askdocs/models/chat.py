"""
Chat domain models and schemas.

Request/response schemas for question answering.

Dependencies: pydantic, askdocs.core.rag_query.schemas
System role: Chat API contracts
"""

from typing import Any

from pydantic import BaseModel, Field

from askdocs.core.rag_query.schemas import AnswerDiagnostics, AnswerSource


class ChatRequest(BaseModel):
    """Request schema for a question."""

    session_id: str | None = Field(default=None, description="Caller session token")
    question: str | None = Field(default=None, description="User question")
    # Checked by RetrievalEngine.retrieve: any non-positive or non-integer value is a 400
    k: Any = Field(default=None, description="Number of chunks to retrieve (positive integer)")


class ChatResponse(BaseModel):
    """Response schema for a question."""

    text: str
    sources: list[AnswerSource]
    diagnostics: AnswerDiagnostics | None = None
