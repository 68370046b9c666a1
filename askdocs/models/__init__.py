"""Domain models and API schemas."""

from askdocs.models.chunk import Chunk, ChunkMetadata, Provenance, SourceType

__all__ = ["Chunk", "ChunkMetadata", "Provenance", "SourceType"]
