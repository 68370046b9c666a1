"""
Chat service for grounded Q&A.

Validates the question and delegates to the resilient generator.

Dependencies: askdocs.core.rag_query
System role: Chat service orchestration layer
"""

import logging

from askdocs.application.services.validation import require_text
from askdocs.core.rag_query.generator import ResilientGenerator
from askdocs.core.rag_query.schemas import GroundedAnswer

logger = logging.getLogger(__name__)


class ChatService:
    """Chat service for grounded Q&A over a session's documents."""

    def __init__(self, generator: ResilientGenerator) -> None:
        self.generator = generator

    async def ask(self, session_id: str | None, question: str | None, k: int | None = None) -> GroundedAnswer:
        """
        Answer a question from the session's knowledge base.

        Args:
            session_id: Caller session token
            question: Question text
            k: Number of chunks to retrieve

        Returns:
            GroundedAnswer: Answer text, sources and diagnostics

        Raises:
            ClientInputError: Session or question missing, or k invalid
        """
        session_id = require_text(session_id, "session_id", "Session ID")
        question = require_text(question, "question", "Question")

        logger.info(f"{__name__}:ask - START", extra={"k": k})
        answer = await self.generator.answer(session_id, question.strip(), k)
        logger.info(
            f"{__name__}:ask - DONE state={answer.diagnostics.state.value}",
            extra={"models_attempted": len(answer.diagnostics.models_attempted)},
        )
        return answer
