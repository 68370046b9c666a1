"""
Vector store configuration settings.

Manages Qdrant connection settings, session collection naming,
embedding model settings and stale-collection cleanup.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for session-scoped retrieval
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class VectorStoreSettings(BaseSettings):
    """Vector store configuration (remote Qdrant, or in-process when no URL is set)."""

    model_config = SettingsConfigDict(
        env_prefix="VECTOR_STORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    qdrant_url: str | None = Field(
        default=None,
        description="Qdrant server URL; leave empty for an in-process :memory: store",
    )
    qdrant_api_key: str | None = Field(default=None, description="Qdrant API key")
    timeout_seconds: int = Field(default=10, description="Qdrant request timeout")

    collection_base_name: str = Field(
        default="rag_collection",
        description="Fixed prefix shared by every session collection",
    )
    session_token_max_length: int = Field(
        default=48,
        ge=8,
        le=128,
        description="Maximum length of the sanitized session token inside a collection name",
    )

    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Google Gemini embedding model ID",
    )
    embedding_dimension: int = Field(
        default=3072,
        ge=1,
        description="Embedding vector dimension, fixed when a collection is first created",
    )
    distance: str = Field(
        default="Cosine",
        description="Qdrant distance metric: Cosine, Dot, Euclid or Manhattan",
    )

    default_top_k: int = Field(default=4, ge=1, description="Number of chunks to retrieve")

    stale_max_age_hours: float = Field(
        default=24.0,
        gt=0,
        description="Session collections older than this are removed by the sweep",
    )
    sweep_interval_minutes: float = Field(
        default=0.0,
        ge=0,
        description="Background sweep interval; 0 disables the periodic sweep",
    )
