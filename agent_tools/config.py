"""Configuration management for the agent tool servers."""

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from agent_tools.errors import ConfigurationError
from agent_tools.logging_config import configure_logging


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # GitHub API configuration
    github_token: str | None = Field(
        default=None,
        description="Personal access token used as the GitHub bearer token",
        validation_alias=AliasChoices("GITHUB_TOKEN", "github_token"),
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        description="Base URL for GitHub REST API requests",
    )
    github_api_version: str = Field(
        default="2022-11-28",
        description="Value sent in the X-GitHub-Api-Version header",
    )
    github_user_agent: str = Field(
        default="agent-tools-github/1.0.0",
        description="User-Agent identifying this server to GitHub",
    )
    github_timeout: float = Field(
        default=30.0,
        description="Request timeout (seconds) for GitHub API calls",
    )

    # CoinGecko API configuration
    coingecko_base_url: str = Field(
        default="https://api.coingecko.com/api/v3/",
        description="Base URL for CoinGecko API requests",
    )
    coingecko_timeout: float = Field(
        default=30.0,
        description="Request timeout (seconds) for CoinGecko API calls",
    )

    # Shared HTTP behaviour
    http_retry_attempts: int = Field(
        default=1,
        ge=1,
        description="Attempts per idempotent GET request (1 disables retries)",
    )
    http_retry_backoff: float = Field(
        default=1.0,
        description="Initial backoff (seconds) between retried requests",
    )

    # Logging
    crypto_log_file: Path = Field(
        default=Path("crypto-mcp-debug.log"),
        description="Debug log written by the crypto server, truncated on startup",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="json",
        description="'json' for structured output or a logging format string",
    )
    log_date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Date format for log messages",
    )

    def require_github_token(self) -> str:
        """Return the GitHub token or fail if it is not configured."""
        if not self.github_token:
            raise ConfigurationError("GITHUB_TOKEN environment variable not set.")
        return self.github_token

    def configure_logging(self, log_file: Path | None = None) -> None:
        """Configure application logging."""
        configure_logging(
            self.log_level,
            self.log_format,
            self.log_date_format,
            log_file=log_file,
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
