"""Configuration settings for GitHub PR Count."""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientConfig(BaseModel):
    """Configuration for the rate-limited request executor.

    Controls the retry ceiling for rate-limited responses and
    transport-level request behavior.
    """

    retry_limit: int = Field(
        default=5,
        ge=0,
        description="Maximum retries after a rate-limited response",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Transport timeout for a single HTTP call",
    )
    results_per_page: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Page size for full scans (GitHub maximum is 100)",
    )


class PacingConfig(BaseModel):
    """Configuration for request pacing and concurrency.

    The inter-request interval staggers page fetch initiation and sets a
    floor on rate-limit retry waits. It is normally 0: the executor relies
    on the server-supplied retry-after value instead of proactive pacing.
    """

    min_request_interval_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Minimum seconds between page fetch initiations",
    )
    max_concurrent_requests: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum parallel GitHub API requests within one page range",
    )


class CacheConfig(BaseModel):
    """Configuration for the page-count cache used by concurrent scans."""

    enabled: bool = Field(
        default=True,
        description="Use cached page counts to shortcut full scans",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # GitHub API
    # --------------------------------------------------------------------------
    github_token: str = Field(
        default="",
        validation_alias=AliasChoices("github_token", "github_api_key"),
        description="GitHub personal access token (GITHUB_TOKEN or GITHUB_API_KEY)",
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        description="Base URL of the GitHub REST API",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # --------------------------------------------------------------------------
    # Executor, Pacing & Cache
    # --------------------------------------------------------------------------
    client: ClientConfig = Field(
        default_factory=ClientConfig,
        description="Request executor configuration",
    )
    pacing: PacingConfig = Field(
        default_factory=PacingConfig,
        description="Request pacing configuration",
    )
    cache: CacheConfig = Field(
        default_factory=CacheConfig,
        description="Count cache configuration",
    )

    # --------------------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_github_token() -> str:
    """Read the GitHub token from the environment, bypassing the settings cache."""
    return Settings().github_token
