"""Configuration management for Mail Reviewer.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrievalStrategyName(str, Enum):
    """Available ways of fitting the corpus into model requests."""

    MAP_REDUCE = "map_reduce"
    INDEX_SELECT = "index_select"


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the MAIL_REVIEWER_ prefix (e.g., MAIL_REVIEWER_OPENAI_API_KEY).
    """

    model_config = SettingsConfigDict(
        env_prefix="MAIL_REVIEWER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Model endpoint configuration
    openai_api_key: str | None = Field(
        default=None,
        description="API key for the chat-completions endpoint. Unset means mock answers.",
    )
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of an OpenAI-compatible API",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="Model used for every completion request",
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for completion requests",
    )
    llm_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for a single completion request in seconds",
    )

    # Retrieval configuration
    retrieval_strategy: RetrievalStrategyName = Field(
        default=RetrievalStrategyName.MAP_REDUCE,
        description="How questions are answered: map_reduce over chunks or index_select",
    )
    chunk_char_budget: int = Field(
        default=80_000,
        gt=0,
        description="Maximum serialized characters per map-reduce chunk",
    )
    compact_chunks: bool = Field(
        default=False,
        description="Truncate record bodies to compact_body_chars inside chunks",
    )
    compact_body_chars: int = Field(
        default=1500,
        gt=0,
        description="Body length kept per record when compact_chunks is enabled",
    )
    context_char_budget: int = Field(
        default=100_000,
        gt=0,
        description="Maximum serialized characters of the select-then-answer context",
    )
    index_preview_chars: int = Field(
        default=200,
        gt=0,
        description="Length of the per-record preview in the compact index",
    )
    select_max_ids: int = Field(
        default=30,
        gt=0,
        description="Maximum number of record ids the selection pass may pick",
    )
    select_default_count: int = Field(
        default=20,
        gt=0,
        description="Number of records used when the selection pass yields nothing usable",
    )

    # Record construction
    email_body_max_chars: int | None = Field(
        default=None,
        description="Cap on email body length; None keeps the full body",
    )
    attachment_body_max_chars: int | None = Field(
        default=None,
        description="Cap on attachment body length; None keeps the full body",
    )
    min_attachment_chars: int = Field(
        default=20,
        ge=0,
        description="Attachments with a body at or below this length are dropped",
    )
    corpus_dir: Path = Field(
        default=Path("All"),
        description="Folder scanned by the convert-folder operation",
    )

    # Rate limiting
    request_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Pause between successful map-reduce requests",
    )
    rate_limit_delay_seconds: float = Field(
        default=5.0,
        ge=0,
        description="Initial delay before retrying a rate-limited request",
    )
    rate_limit_backoff: float = Field(
        default=2.0,
        ge=1.0,
        description="Multiplier applied to the delay after each rate-limited attempt",
    )
    rate_limit_max_attempts: int = Field(
        default=5,
        ge=1,
        description="Attempts per request before giving up on a rate-limited call",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    @property
    def has_credentials(self) -> bool:
        return bool(self.openai_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
