"""
Vector database schemas.

Pydantic models for namespace handles and search results.
Used for type-safe vector store interactions.

Dependencies: pydantic, askdocs.models.chunk
System role: Type definitions for vector operations
"""

from datetime import datetime

from pydantic import BaseModel, Field

from askdocs.models.chunk import Chunk


class NamespaceHandle(BaseModel):
    """Resolved session collection."""

    name: str = Field(description="Qdrant collection name")
    session_id: str = Field(description="Session that owns the collection")
    dimension: int = Field(description="Vector size fixed at creation")
    points_count: int = Field(default=0, description="Stored points when resolved")
    created_at: datetime | None = Field(default=None, description="Registry creation time")


class NamespaceInfo(BaseModel):
    """Collection summary used by listings and the stale sweep."""

    name: str
    session_id: str | None = None
    points_count: int = 0
    created_at: datetime | None = None
    active: bool = False


class ScoredChunk(BaseModel):
    """Single result from vector search."""

    chunk: Chunk
    score: float = Field(description="Similarity score reported by the index")
    rank: int = Field(ge=1, description="1-based position, used as citation index")
