"""
Chunk domain model.

Represents a stored passage of source text with its provenance and position.

Dependencies: pydantic
System role: Unit of storage and retrieval
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator


class SourceType(str, Enum):
    """Where a chunk's text came from."""

    FILE = "file"
    TEXT = "text"
    WEBSITE = "website"


class Provenance(BaseModel):
    """Caller-supplied description of an ingested item."""

    source: str = Field(description="Filename, URL or synthetic identifier")
    source_type: SourceType = Field(description="file, text or website")
    title: str | None = Field(default=None, description="Page or document title")
    domain: str | None = Field(default=None, description="Host of a scraped page")


class ChunkMetadata(BaseModel):
    """Metadata stored alongside every chunk."""

    source: str = Field(description="Filename, URL or synthetic identifier")
    source_type: SourceType = Field(description="file, text or website")
    session_id: str | None = Field(default=None, description="Owning session, stamped on write")
    chunk_index: int = Field(ge=0, description="Position of the chunk within its input")
    total_chunks: int = Field(ge=1, description="Number of chunks produced from the input")
    created_at: datetime | None = Field(default=None, description="Write time, stamped on write")
    title: str | None = None
    domain: str | None = None
    page: int | None = Field(default=None, description="Page number for paginated sources")
    original_filename: str | None = None
    start_index: int | None = Field(default=None, description="Character offset in the source text")

    @model_validator(mode="after")
    def _index_within_total(self) -> "ChunkMetadata":
        if self.chunk_index >= self.total_chunks:
            raise ValueError("chunk_index must be smaller than total_chunks")
        return self


class Chunk(BaseModel):
    """Document chunk model."""

    id: str = Field(description="Deterministic chunk identifier (UUIDv5)")
    content: str = Field(description="Chunk text content")
    metadata: ChunkMetadata
