"""
Core business logic module.

Contains the collection lifecycle manager, ingestion pipeline, retrieval
engine, resilient answer generator and the exception hierarchy.
"""

from askdocs.core.exceptions import (
    AskDocsException,
    BackingStoreUnavailable,
    ClientInputError,
    DocumentProcessingError,
    EmbeddingError,
    NamespaceConfigurationError,
    ParsingError,
)

__all__ = [
    "AskDocsException",
    "BackingStoreUnavailable",
    "ClientInputError",
    "DocumentProcessingError",
    "EmbeddingError",
    "NamespaceConfigurationError",
    "ParsingError",
]
