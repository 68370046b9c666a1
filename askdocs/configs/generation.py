"""
Answer generation settings.

Chat model selection, fallback chain and per-attempt deadline.

Dependencies: pydantic, pydantic_settings
System role: Configuration for the resilient answer generator
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GenerationSettings(BaseSettings):
    """Chat model configuration for grounded answers."""

    model_config = SettingsConfigDict(
        env_prefix="GENERATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    primary_model: str = Field(
        default="gemini-2.5-flash",
        description="Model tried first for every question",
    )
    fallback_models: list[str] = Field(
        default=["gemini-2.5-flash", "gemini-2.0-flash", "gemini-2.5-flash-lite"],
        description="Models tried in order after the primary fails (duplicates are skipped)",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Deadline for a single model attempt",
    )
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    context_preview_chars: int = Field(
        default=1000,
        gt=0,
        description="Characters of each retrieved chunk placed in the prompt",
    )
