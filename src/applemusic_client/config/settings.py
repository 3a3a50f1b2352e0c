"""Environment-based settings (pydantic-settings).

Hey future me - every field can come from the environment:

    APPLE_MUSIC_DEVELOPER_TOKEN=eyJ...
    APPLE_MUSIC_USER_TOKEN=Ag...
    APPLE_MUSIC_STOREFRONT=us
    APPLE_MUSIC_RATE_LIMIT_MAX_RETRIES=10
    LOG_LEVEL=DEBUG

or be passed explicitly: AppleMusicSettings(developer_token="...", user_token="...").
Missing tokens are NOT a validation error here - the client raises ConfigurationError
at the call site that actually needs them.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from applemusic_client.domain.value_objects.endpoints import Endpoint

API_BASE_URL = "https://api.music.apple.com"
API_VERSION = Endpoint.VERSION.value
DEFAULT_STOREFRONT = "gb"


class AppleMusicSettings(BaseSettings):
    """Apple Music API credentials and transport settings."""

    model_config = SettingsConfigDict(
        env_prefix="APPLE_MUSIC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    developer_token: str = Field(
        default="", description="Developer (service) JWT sent as Bearer token"
    )
    user_token: str | None = Field(
        default=None, description="Music-User-Token for library access"
    )
    storefront: str | None = Field(
        default=None, description="Storefront (region) code, discovered if omitted"
    )
    default_storefront: str = Field(
        default=DEFAULT_STOREFRONT,
        description="Storefront used when discovery is skipped or fails",
    )

    api_base_url: str = Field(default=API_BASE_URL, description="API base URL")
    api_version: str = Field(default=API_VERSION, description="API version path segment")
    timeout: float = Field(default=30.0, gt=0, description="Request timeout (seconds)")
    max_connections: int = Field(default=20, gt=0)
    max_keepalive_connections: int = Field(default=10, ge=0)

    rate_limit_fallback_delay: float = Field(
        default=1.0,
        ge=0,
        description="Wait after a 429 without Retry-After (seconds)",
    )
    rate_limit_max_retries: int | None = Field(
        default=None,
        ge=0,
        description="Give up after this many 429s (None = retry forever)",
    )
    rate_limit_max_delay: float | None = Field(
        default=None,
        ge=0,
        description="Cap for a single Retry-After wait (None = no cap)",
    )

    @field_validator("storefront", "default_storefront")
    @classmethod
    def normalize_storefront(cls, value: str | None) -> str | None:
        """Storefront codes are lower-case ISO 3166 alpha-2 codes."""
        if value is None:
            return None
        value = value.strip().lower()
        if not value:
            return None
        if len(value) != 2 or not value.isalpha():
            raise ValueError(f"Invalid storefront code: {value!r}")
        return value

    @field_validator("user_token")
    @classmethod
    def empty_user_token_is_none(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class LoggingSettings(BaseSettings):
    """Logging settings for applications embedding the client."""

    model_config = SettingsConfigDict(env_prefix="LOG_", extra="ignore")

    level: str = Field(default="INFO", description="Root log level")
    json_format: bool = Field(default=False, description="Emit JSON log lines")


class Settings(BaseSettings):
    """All settings."""

    model_config = SettingsConfigDict(extra="ignore")

    apple_music: AppleMusicSettings = Field(default_factory=AppleMusicSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings loaded from the environment."""
    return Settings()
