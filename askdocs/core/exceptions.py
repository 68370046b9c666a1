"""
Exception hierarchy for the askdocs service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Model failures during answer generation are deliberately absent here: they
are recorded as GenerationOutcome values and never raised past the generator.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class AskDocsException(Exception):
    """Base exception for all askdocs application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging

        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ClientInputError(AskDocsException):
    """Raised when caller input is missing or invalid (4xx)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize client input error.

        Args:
            message: Error message safe to show to the caller
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        self.field = field
        super().__init__(message, details)


class BackingStoreUnavailable(AskDocsException):
    """Raised when the vector index cannot be reached or answers with a server error."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize backing store error.

        Args:
            message: Error message
            operation: Operation that failed (list, create, upsert, query, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        self.operation = operation
        super().__init__(message, details)


class NamespaceConfigurationError(AskDocsException):
    """Raised when an existing collection is incompatible with the configured embeddings."""

    def __init__(
        self,
        namespace: str,
        expected_dimension: int,
        actual_dimension: int | None,
    ) -> None:
        super().__init__(
            f"Collection {namespace} has vector size {actual_dimension}, "
            f"expected {expected_dimension}",
            {
                "namespace": namespace,
                "expected_dimension": expected_dimension,
                "actual_dimension": actual_dimension,
            },
        )


class DocumentProcessingError(AskDocsException):
    """Base exception for document processing errors."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document processing error.

        Args:
            message: Error message
            source: Filename or URL of the item that failed
            details: Additional context
        """
        details = details or {}
        if source:
            details["source"] = source
        self.source = source
        super().__init__(message, details)


class ParsingError(DocumentProcessingError):
    """Raised when raw input cannot be turned into text."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        content_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize parsing error.

        Args:
            message: Error message
            source: Filename or URL of the item
            content_type: Declared or inferred content type
            details: Additional context
        """
        details = details or {}
        if content_type:
            details["content_type"] = content_type
        super().__init__(message, source, details)


class EmbeddingError(DocumentProcessingError):
    """Raised when embedding generation fails or returns unexpected vectors."""

    pass
