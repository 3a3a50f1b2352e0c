"""Apple Music API integration: auth, dispatch, pagination and endpoints."""

from applemusic_client.infrastructure.integrations.apple_music_client import (
    AppleMusicClient,
    initialize,
)
from applemusic_client.infrastructure.integrations.auth_context import (
    AuthContext,
    Credentials,
    RequestDescriptor,
)
from applemusic_client.infrastructure.integrations.dispatcher import RequestDispatcher
from applemusic_client.infrastructure.integrations.paginator import Paginator

__all__ = [
    "AppleMusicClient",
    "AuthContext",
    "Credentials",
    "Paginator",
    "RequestDescriptor",
    "RequestDispatcher",
    "initialize",
]
