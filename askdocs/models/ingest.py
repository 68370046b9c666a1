"""
Ingestion domain models and schemas.

Raw input description plus request/response schemas for the ingestion API.

Dependencies: pydantic
System role: Ingestion API contracts
"""

from enum import Enum

from pydantic import BaseModel, Field


class ContentType(str, Enum):
    """Declared type of raw input bytes."""

    TEXT = "text"
    MARKDOWN = "markdown"
    PDF = "pdf"


_EXTENSION_TYPES = {
    ".txt": ContentType.TEXT,
    ".text": ContentType.TEXT,
    ".md": ContentType.MARKDOWN,
    ".markdown": ContentType.MARKDOWN,
    ".pdf": ContentType.PDF,
}


class RawInput(BaseModel):
    """Bytes to ingest plus their declared type."""

    data: bytes
    filename: str
    content_type: ContentType | None = Field(
        default=None,
        description="Declared type; inferred from the filename extension when absent",
    )

    def resolved_type(self) -> ContentType | None:
        """Declared type, or the one implied by the filename extension."""
        if self.content_type is not None:
            return self.content_type
        name = self.filename.lower()
        for extension, content_type in _EXTENSION_TYPES.items():
            if name.endswith(extension):
                return content_type
        return None


class IngestionFailure(BaseModel):
    """One item that could not be ingested."""

    source: str
    reason: str


class IngestionReport(BaseModel):
    """Outcome of an ingestion batch."""

    documents_processed: int = 0
    total_chunks: int = 0
    failures: list[IngestionFailure] = Field(default_factory=list)


class TextIngestRequest(BaseModel):
    """Request schema for pasted text."""

    session_id: str | None = Field(default=None, description="Caller session token")
    text_content: str | None = Field(default=None, description="Text to ingest")
    filename: str | None = Field(default=None, description="Optional display name")


class WebsiteIngestRequest(BaseModel):
    """Request schema for already scraped page content."""

    session_id: str | None = Field(default=None, description="Caller session token")
    url: str | None = Field(default=None, description="Page URL")
    content: str | None = Field(default=None, description="Cleaned page text")
    title: str | None = Field(default=None, description="Page title")


class IngestResponse(BaseModel):
    """Response schema for every ingestion endpoint."""

    message: str
    documents_processed: int
    total_chunks: int
    warnings: list[str] = Field(default_factory=list)
