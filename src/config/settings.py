"""Configuration and settings management using pydantic-settings."""
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Node pack settings with environment variable loading."""

    model_config = SettingsConfigDict(
        env_prefix="SLACK_NODES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Core settings
    env: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(default=True, description="Emit JSON log lines")

    # Slack Web API client
    slack_base_url: str = Field(
        default="https://slack.com/api/",
        description="Slack Web API base URL",
    )
    slack_timeout_s: int = Field(
        default=30,
        description="HTTP timeout for a single Web API request in seconds",
    )
    token: Optional[SecretStr] = Field(
        default=None,
        description="Fallback API token when no credential is configured",
    )

    # Node defaults
    default_page_limit: Optional[int] = Field(
        default=None,
        description="Page size used by paginated calls without a pageLimit",
    )
    directory_cache_ttl_s: float = Field(
        default=0,
        description="Seconds to keep channel/user directories (0 = rebuild every call)",
    )

    @field_validator("slack_timeout_s")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate that the client timeout is positive."""
        if v <= 0:
            raise ValueError("slack_timeout_s must be positive")
        return v

    @field_validator("default_page_limit")
    @classmethod
    def validate_page_limit(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("default_page_limit must be positive")
        return v

    @field_validator("directory_cache_ttl_s")
    @classmethod
    def validate_cache_ttl(cls, v: float) -> float:
        if v < 0:
            raise ValueError("directory_cache_ttl_s must not be negative")
        return v


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None
