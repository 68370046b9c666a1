"""
Retrieval and answer generation schemas.

Retrieval outcomes, per-attempt generation records and the grounded answer
returned to callers together with its diagnostics.

Dependencies: pydantic
System role: Contracts between retrieval, generation and the API
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from askdocs.boundary.vdb.vector_schemas import ScoredChunk
from askdocs.models.chunk import SourceType


class RetrievalStatus(str, Enum):
    """Whether the session had anything to search."""

    FOUND = "found"
    NO_KNOWLEDGE_BASE = "no_knowledge_base"


class RetrievalResult(BaseModel):
    """Outcome of a retrieval: a status plus up to k chunks, best first."""

    status: RetrievalStatus
    chunks: list[ScoredChunk] = Field(default_factory=list)

    @classmethod
    def no_knowledge_base(cls) -> "RetrievalResult":
        return cls(status=RetrievalStatus.NO_KNOWLEDGE_BASE)

    @classmethod
    def found(cls, chunks: list[ScoredChunk]) -> "RetrievalResult":
        return cls(status=RetrievalStatus.FOUND, chunks=chunks)

    @property
    def has_knowledge_base(self) -> bool:
        return self.status == RetrievalStatus.FOUND


class GenerationOutcome(str, Enum):
    """Classified result of a single model attempt."""

    SUCCESS = "success"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    OTHER_ERROR = "other_error"


class GenerationAttempt(BaseModel):
    """Record of one model call."""

    model_id: str
    started_at: datetime
    outcome: GenerationOutcome
    elapsed_ms: float = Field(ge=0)
    error: str | None = Field(default=None, description="Error summary for failed attempts")


class AnswerState(str, Enum):
    """Terminal state of a question."""

    NO_KNOWLEDGE_BASE = "no_knowledge_base"
    NO_MATCH = "no_match"
    ANSWERED = "answered"
    DEGRADED = "degraded"


class AnswerSource(BaseModel):
    """A retrieved chunk as presented to the caller, numbered like the prompt context."""

    id: int = Field(ge=1, description="1-based citation number used in the answer text")
    source: str
    source_type: SourceType
    title: str | None = None
    domain: str | None = None
    chunk_index: int
    score: float


class AnswerDiagnostics(BaseModel):
    """How an answer was produced."""

    state: AnswerState
    model_called: bool = False
    models_attempted: list[str] = Field(default_factory=list)
    attempts: list[GenerationAttempt] = Field(default_factory=list)
    last_outcome: GenerationOutcome | None = Field(default=None, description="Classification of the final failed attempt")
    last_error: str | None = Field(default=None, description="Error summary of the final failed attempt")
    retrieved_chunks: int = 0


class GroundedAnswer(BaseModel):
    """Answer text, the sources it may cite and diagnostics."""

    text: str
    sources: list[AnswerSource] = Field(default_factory=list)
    diagnostics: AnswerDiagnostics
