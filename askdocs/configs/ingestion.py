"""
Configuration settings for the ingestion pipeline.

Provides environment-based configuration for chunking, upload limits
and embedding retries.

Dependencies: pydantic, pydantic_settings
System role: Centralized ingestion configuration
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class IngestionSettings(BaseSettings):
    """Settings for document ingestion."""

    model_config = SettingsConfigDict(
        env_prefix="INGESTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking settings
    chunk_size: int = Field(
        default=1000,
        gt=0,
        description="Maximum chunk size in characters",
    )
    chunk_overlap: int = Field(
        default=200,
        ge=0,
        description="Overlap between consecutive chunks",
    )

    # Upload limits
    max_file_size_bytes: int = Field(
        default=5 * 1024 * 1024,
        gt=0,
        description="Files larger than this are rejected per item",
    )

    # Embedding calls
    embedding_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts per embedding call before giving up",
    )

    @model_validator(mode="after")
    def _overlap_fits_chunk(self) -> "IngestionSettings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self
