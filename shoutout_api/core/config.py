"""Application configuration using Pydantic Settings"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent.parent.parent / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Twitch app credentials. Left empty, the service still starts and
    # answers health checks; token refresh raises ConfigurationError.
    twitch_client_id: str = Field(default="", description="Twitch application Client ID")
    twitch_client_secret: str = Field(default="", description="Twitch application Client Secret")

    # Environment
    environment: str = Field(default="development", description="Environment name")
    log_level: str = Field(default="INFO", description="Logging level")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3000, description="Server port")

    # Upstream
    request_timeout: float = Field(
        default=10.0, gt=0, description="Per-request timeout for Twitch calls in seconds"
    )
    token_refresh_margin: int = Field(
        default=60, ge=0, description="Seconds before expiry at which the app token is refreshed"
    )

    # Category detection
    broadcast_history_limit: int = Field(
        default=10, ge=1, le=100, description="Archived broadcasts inspected per lookup"
    )
    min_broadcast_minutes: int = Field(
        default=30, ge=0, description="Archived broadcasts must run longer than this to count"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(f"Invalid log level '{v}', defaulting to INFO")
            return "INFO"
        return v_upper

    @property
    def has_twitch_credentials(self) -> bool:
        return bool(self.twitch_client_id and self.twitch_client_secret)

    @property
    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
