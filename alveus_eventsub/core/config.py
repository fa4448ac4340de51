"""EventSub manager configuration using Pydantic Settings"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).parent.parent
PROJECT_DIR = PACKAGE_DIR.parent

HELIX_BASE = "https://api.twitch.tv/helix"
OAUTH_BASE = "https://id.twitch.tv/oauth2"

# Statuses that mean the subscription exists or is about to (still counts as present)
ACTIVE_STATUSES = frozenset({"enabled", "webhook_callback_verification_pending"})


class EventSubSettings(BaseSettings):
    """EventSub manager settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=PROJECT_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Twitch OAuth (empty values surface as ConfigurationError when used)
    twitch_client_id: str = Field(default="", description="Twitch OAuth Client ID")
    twitch_client_secret: str = Field(default="", description="Twitch OAuth Client Secret")

    # EventSub webhook transport
    twitch_eventsub_callback: str = Field(
        default="", description="Public URL Twitch delivers EventSub notifications to"
    )
    twitch_eventsub_secret: str = Field(
        default="", description="Shared secret used to sign EventSub notifications"
    )

    # Desired notification config (JSON); built-in channels when empty
    twitch_config_path: Path | None = Field(
        default=None, description="Path to a JSON channel notification config"
    )

    # HTTP
    helix_base: str = Field(default=HELIX_BASE, description="Twitch Helix API base URL")
    request_timeout: float = Field(default=10.0, description="Per-request timeout in seconds")

    # Optional proactive token expiry; None = only reactive (403) invalidation
    token_ttl: float | None = Field(
        default=None, description="Seconds before cached app token is refetched"
    )

    # Environment
    log_level: str = Field(default="INFO", description="Logging level")

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

    @field_validator("twitch_config_path", "token_ttl", mode="before")
    @classmethod
    def empty_is_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("token_ttl")
    @classmethod
    def validate_token_ttl(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("TOKEN_TTL must be a positive number of seconds")
        return v

    @property
    def helix_base_url(self) -> str:
        return self.helix_base.rstrip("/")


@lru_cache
def get_settings() -> EventSubSettings:
    """Get cached settings instance"""
    return EventSubSettings()
