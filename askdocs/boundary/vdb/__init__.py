"""
Vector database boundary layer.

Provides the Qdrant client factory, the embeddings wrapper and the schemas
exchanged with the collection manager.

Dependencies: qdrant_client, langchain_core, langchain_google_genai, tenacity
System role: Vector store adapter for session-scoped retrieval
"""

from askdocs.boundary.vdb.vector_schemas import NamespaceHandle, NamespaceInfo, ScoredChunk

__all__ = [
    "NamespaceHandle",
    "NamespaceInfo",
    "ScoredChunk",
]
