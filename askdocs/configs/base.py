"""
Base configuration settings.

Shared fields inherited by every askdocs settings class: deployment
environment, debug switch and log level. All of them come from the process
environment or a local .env file.

Dependencies: pydantic_settings
System role: Foundation for all configuration classes
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Common settings: environment, debug mode and log level."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(
        default="development",
        description="Deployment environment; API docs are hidden in production",
    )
    debug: bool = Field(
        default=False,
        description="Return tracebacks from unhandled API errors",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @field_validator("environment", "log_level")
    @classmethod
    def normalize(cls, value: str) -> str:
        return value.strip()

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"
