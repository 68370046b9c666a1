"""
Resilient grounded answer generator.

Retrieves session context, builds a citation prompt and walks a chain of chat
models (primary first, then fallbacks), each under its own deadline, until one
produces an answer. Model failures are classified and recorded as attempts,
never raised to the caller.

Dependencies: langchain_core, askdocs.core.rag_query
System role: Answer generation with graceful degradation
"""

import asyncio
import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from langchain_core.language_models import BaseChatModel

from askdocs.boundary.vdb.vector_schemas import ScoredChunk
from askdocs.configs.generation import GenerationSettings
from askdocs.core.exceptions import BackingStoreUnavailable, EmbeddingError
from askdocs.core.rag_query.prompt import ANSWER_PROMPT, build_candidate_models, format_context
from askdocs.core.rag_query.retrieval_engine import RetrievalEngine
from askdocs.core.rag_query.schemas import (
    AnswerDiagnostics,
    AnswerSource,
    AnswerState,
    GenerationAttempt,
    GenerationOutcome,
    GroundedAnswer,
)
from askdocs.observability.log_utils import log_with_context

logger = logging.getLogger(__name__)

NO_KNOWLEDGE_BASE_MESSAGE = (
    "No knowledge base found for this session. "
    "Please upload documents or add content first."
)
NO_MATCH_MESSAGE = (
    "I don't have any relevant information to answer your question. "
    "Please make sure you have uploaded some documents first."
)
EMPTY_ANSWER_MESSAGE = "I could not generate a response. Please try rephrasing your question."
BACKING_STORE_MESSAGE = "The knowledge base is temporarily unavailable. Please try again shortly."
DEGRADED_MESSAGES = {
    GenerationOutcome.SERVER_ERROR: (
        "The AI service is temporarily unavailable. Please try again in a few moments."
    ),
    GenerationOutcome.TIMEOUT: (
        "The request took too long to process. Please try a shorter question or try again."
    ),
    GenerationOutcome.OTHER_ERROR: (
        "Something went wrong while generating the answer. Please try again."
    ),
}

_SERVER_ERROR_PATTERN = re.compile(r"\b50[0234]\b|unavailable|overloaded|internal error")
_TIMEOUT_MARKERS = ("timeout", "timed out", "deadline")


def _status_code(exc: BaseException) -> int | None:
    for candidate in (getattr(exc, "status_code", None), getattr(exc, "code", None)):
        if isinstance(candidate, int):
            return candidate
    response = getattr(exc, "response", None)
    code = getattr(response, "status_code", None)
    return code if isinstance(code, int) else None


def classify_failure(exc: BaseException) -> GenerationOutcome:
    """
    Classify a failed model call.

    Deadlines and transport timeouts are TIMEOUT, 5xx and unavailable/overloaded
    responses are SERVER_ERROR, anything else is OTHER_ERROR.
    """
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return GenerationOutcome.TIMEOUT
    name = type(exc).__name__.lower()
    if any(marker in name for marker in _TIMEOUT_MARKERS):
        return GenerationOutcome.TIMEOUT

    status_code = _status_code(exc)
    if status_code is not None and status_code >= 500:
        return GenerationOutcome.SERVER_ERROR

    text = str(exc).lower()
    if _SERVER_ERROR_PATTERN.search(text):
        return GenerationOutcome.SERVER_ERROR
    if any(marker in text for marker in _TIMEOUT_MARKERS):
        return GenerationOutcome.TIMEOUT
    return GenerationOutcome.OTHER_ERROR


def _message_text(message) -> str:
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content or "")


@dataclass(frozen=True)
class AttemptResult:
    """Tagged result of one model attempt: text on success, a record either way."""

    attempt: GenerationAttempt
    text: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.attempt.outcome == GenerationOutcome.SUCCESS


def _sources(chunks: list[ScoredChunk]) -> list[AnswerSource]:
    return [
        AnswerSource(
            id=position,
            source=scored.chunk.metadata.source,
            source_type=scored.chunk.metadata.source_type,
            title=scored.chunk.metadata.title,
            domain=scored.chunk.metadata.domain,
            chunk_index=scored.chunk.metadata.chunk_index,
            score=scored.score,
        )
        for position, scored in enumerate(chunks, start=1)
    ]


class ResilientGenerator:
    """
    Grounded answer generator with a model fallback chain.

    Each question is independent: no state is carried between calls and a
    failed question is never retried by the generator itself.
    """

    def __init__(
        self,
        retrieval_engine: RetrievalEngine,
        model_factory: Callable[[str], BaseChatModel],
        settings: GenerationSettings | None = None,
    ) -> None:
        """
        Initialize generator.

        Args:
            retrieval_engine: Session-scoped retrieval
            model_factory: Returns a chat model for a model ID
            settings: Model chain, deadline and context preview length
        """
        self._retrieval_engine = retrieval_engine
        self._model_factory = model_factory
        self._settings = settings or GenerationSettings()
        self.candidate_models = build_candidate_models(
            self._settings.primary_model,
            self._settings.fallback_models,
        )

    async def _attempt(self, model_id: str, messages) -> AttemptResult:
        started_at = datetime.now(timezone.utc)
        start = time.perf_counter()
        text = None
        error = None
        try:
            model = self._model_factory(model_id)
            response = await asyncio.wait_for(
                model.ainvoke(messages),
                timeout=self._settings.request_timeout_seconds,
            )
            text = _message_text(response)
            outcome = GenerationOutcome.SUCCESS
        except Exception as e:
            # CancelledError is a BaseException and propagates
            outcome = classify_failure(e)
            error = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__

        elapsed_ms = (time.perf_counter() - start) * 1000
        log_with_context(
            logger,
            logging.INFO if outcome == GenerationOutcome.SUCCESS else logging.WARNING,
            f"{__name__}:answer - Model attempt {outcome.value}",
            model_id=model_id,
            elapsed_ms=round(elapsed_ms, 1),
            error=error,
        )
        return AttemptResult(
            attempt=GenerationAttempt(
                model_id=model_id,
                started_at=started_at,
                outcome=outcome,
                elapsed_ms=elapsed_ms,
                error=error,
            ),
            text=text,
        )

    async def answer(self, session_id: str, question: str, k: int | None = None) -> GroundedAnswer:
        """
        Answer a question from the session's knowledge base.

        Args:
            session_id: Caller session token
            question: Question text
            k: Number of chunks to retrieve (defaults to the engine's default)

        Returns:
            GroundedAnswer: Text, numbered sources and diagnostics

        Raises:
            ClientInputError: k is not a positive integer
        """
        try:
            retrieval = await self._retrieval_engine.retrieve(session_id, question, k)
        except (BackingStoreUnavailable, EmbeddingError) as e:
            log_with_context(
                logger,
                logging.ERROR,
                f"{__name__}:answer - Retrieval unavailable",
                error_type=type(e).__name__,
                error_msg=str(e),
            )
            return GroundedAnswer(
                text=BACKING_STORE_MESSAGE,
                diagnostics=AnswerDiagnostics(state=AnswerState.DEGRADED),
            )

        if not retrieval.has_knowledge_base:
            return GroundedAnswer(
                text=NO_KNOWLEDGE_BASE_MESSAGE,
                diagnostics=AnswerDiagnostics(state=AnswerState.NO_KNOWLEDGE_BASE),
            )

        chunks = retrieval.chunks
        if not chunks:
            return GroundedAnswer(
                text=NO_MATCH_MESSAGE,
                diagnostics=AnswerDiagnostics(state=AnswerState.NO_MATCH),
            )

        sources = _sources(chunks)
        messages = ANSWER_PROMPT.format_messages(
            context=format_context(chunks, self._settings.context_preview_chars),
            question=question,
        )

        attempts: list[GenerationAttempt] = []
        result = None
        for model_id in self.candidate_models:
            result = await self._attempt(model_id, messages)
            attempts.append(result.attempt)
            if result.succeeded:
                break

        diagnostics = AnswerDiagnostics(
            state=AnswerState.ANSWERED,
            model_called=bool(attempts),
            models_attempted=[attempt.model_id for attempt in attempts],
            attempts=attempts,
            retrieved_chunks=len(chunks),
        )

        if result is None or not result.succeeded:
            last = attempts[-1] if attempts else None
            outcome = last.outcome if last else GenerationOutcome.OTHER_ERROR
            diagnostics.state = AnswerState.DEGRADED
            diagnostics.last_outcome = outcome
            diagnostics.last_error = last.error if last else None
            logger.error(
                f"{__name__}:answer - All models failed",
                extra={"models_attempted": len(attempts), "last_outcome": outcome.value},
            )
            return GroundedAnswer(text=DEGRADED_MESSAGES[outcome], sources=sources, diagnostics=diagnostics)

        text = (result.text or "").strip()
        if not text:
            return GroundedAnswer(text=EMPTY_ANSWER_MESSAGE, sources=sources, diagnostics=diagnostics)

        return GroundedAnswer(text=text, sources=sources, diagnostics=diagnostics)
