"""Async, typed client for the Apple Music API.

    from applemusic_client import initialize

    client = await initialize(developer_token, user_token)
    songs = await client.get_all_library_songs()
"""

from applemusic_client.domain.exceptions import (
    ConfigurationError,
    DecodeError,
    DomainException,
    ExternalServiceError,
    HttpStatusError,
    RateLimitExceededError,
    TransportError,
)
from applemusic_client.domain.resources import (
    Album,
    Artist,
    Artwork,
    LibraryAlbum,
    LibraryArtist,
    LibraryPlaylist,
    LibrarySearchResults,
    LibrarySong,
    Playlist,
    ResponseEnvelope,
    SearchResults,
    Song,
    Storefront,
)
from applemusic_client.domain.value_objects.endpoints import SearchType
from applemusic_client.infrastructure.integrations.apple_music_client import (
    AppleMusicClient,
    initialize,
)

__version__ = "0.1.0"

__all__ = [
    "Album",
    "AppleMusicClient",
    "Artist",
    "Artwork",
    "ConfigurationError",
    "DecodeError",
    "DomainException",
    "ExternalServiceError",
    "HttpStatusError",
    "LibraryAlbum",
    "LibraryArtist",
    "LibraryPlaylist",
    "LibrarySearchResults",
    "LibrarySong",
    "Playlist",
    "RateLimitExceededError",
    "ResponseEnvelope",
    "SearchResults",
    "SearchType",
    "Song",
    "Storefront",
    "TransportError",
    "initialize",
]
