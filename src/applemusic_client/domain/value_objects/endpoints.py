"""Path segments and search types of the Apple Music API.

Hey future me - URLs are built from ORDERED segments, never from format strings:

    [Endpoint.VERSION, Endpoint.ME, Endpoint.LIBRARY, Endpoint.PLAYLISTS, playlist_id, Endpoint.TRACKS]
    -> https://api.music.apple.com/v1/me/library/playlists/p.abc/tracks

    [Endpoint.VERSION, Endpoint.CATALOG, "us", Endpoint.SONGS]
    -> https://api.music.apple.com/v1/catalog/us/songs

Dynamic segments (ids, storefront codes) are plain strings mixed into the list.
"""

from enum import Enum


class Endpoint(str, Enum):
    """Static path segments."""

    VERSION = "v1"
    ME = "me"
    LIBRARY = "library"
    CATALOG = "catalog"
    STOREFRONT = "storefront"
    PLAYLISTS = "playlists"
    ALBUMS = "albums"
    ARTISTS = "artists"
    SONGS = "songs"
    TRACKS = "tracks"
    SEARCH = "search"


class SearchType(str, Enum):
    """Resource kinds accepted by the `types` search parameter.

    Catalog search takes the plain kinds, library search the library-* kinds.
    """

    SONGS = "songs"
    ALBUMS = "albums"
    ARTISTS = "artists"
    PLAYLISTS = "playlists"
    LIBRARY_SONGS = "library-songs"
    LIBRARY_ALBUMS = "library-albums"
    LIBRARY_ARTISTS = "library-artists"
    LIBRARY_PLAYLISTS = "library-playlists"

    @property
    def is_library(self) -> bool:
        """Whether this kind lives in the user's library."""
        return self.value.startswith("library-")


def join_search_types(search_types: list[SearchType]) -> str:
    """Comma-join search types for the `types` query parameter."""
    return ",".join(search_type.value for search_type in search_types)


__all__ = ["Endpoint", "SearchType", "join_search_types"]
