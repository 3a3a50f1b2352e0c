"""Configuration module for applemusic-client."""

from .settings import (
    API_BASE_URL,
    API_VERSION,
    DEFAULT_STOREFRONT,
    AppleMusicSettings,
    LoggingSettings,
    Settings,
    get_settings,
)

__all__ = [
    "API_BASE_URL",
    "API_VERSION",
    "DEFAULT_STOREFRONT",
    "AppleMusicSettings",
    "LoggingSettings",
    "Settings",
    "get_settings",
]
