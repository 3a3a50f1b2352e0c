"""Apple Music API client - the endpoint call surface.

Hey future me - every public coroutine here follows the same three steps:

1. Build ordered path segments (+ query) via the AuthContext. Catalog paths call
   require_storefront() FIRST, so a missing storefront fails before any HTTP call.
2. Build an authenticated RequestDescriptor (user-scoped or catalog-scoped).
3. Hand it to the Paginator (collections), the dispatcher (single envelope / search)
   or dispatch_without_body() (write endpoints that only acknowledge).

No singleton: every AppleMusicClient owns its own credentials and HTTP client.
Credentials are immutable - resolving the storefront swaps in a NEW AuthContext.

USAGE:
    async with await initialize(developer_token, user_token) as client:
        songs = await client.get_all_library_songs()
"""

import logging
from types import TracebackType
from typing import Any

import httpx

from applemusic_client.config.settings import AppleMusicSettings
from applemusic_client.domain.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    HttpStatusError,
)
from applemusic_client.domain.resources import (
    Album,
    Artist,
    LibraryAlbum,
    LibraryArtist,
    LibraryPlaylist,
    LibraryPlaylistCreationRequest,
    LibraryPlaylistTracksRequest,
    LibrarySearchResponse,
    LibrarySearchResults,
    LibrarySong,
    Playlist,
    ResourceT,
    ResponseEnvelope,
    SearchResponse,
    SearchResults,
    Song,
    Storefront,
    build_track_references,
    encode_body,
    envelope_items,
)
from applemusic_client.domain.value_objects.endpoints import (
    Endpoint,
    SearchType,
    join_search_types,
)
from applemusic_client.infrastructure.integrations.auth_context import (
    AuthContext,
    Credentials,
    RequestDescriptor,
)
from applemusic_client.infrastructure.integrations.dispatcher import RequestDispatcher
from applemusic_client.infrastructure.integrations.paginator import Paginator
from applemusic_client.infrastructure.observability.log_messages import LogMessages
from applemusic_client.infrastructure.rate_limiter import RateLimiter, RateLimiterConfig

logger = logging.getLogger(__name__)

NOT_FOUND_STATUS = 404


class AppleMusicClient:
    """Typed async client for the Apple Music catalog and user library."""

    def __init__(
        self,
        settings: AppleMusicSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the client (no network call - see initialize()).

        Args:
            settings: Credentials and transport settings (default: from environment)
            http_client: Optional externally owned httpx.AsyncClient
        """
        self.settings = settings or AppleMusicSettings()
        self._auth = AuthContext(
            Credentials(
                developer_token=self.settings.developer_token,
                user_token=self.settings.user_token,
                storefront=self.settings.storefront,
            ),
            base_url=self.settings.api_base_url,
        )
        rate_limiter = RateLimiter(
            RateLimiterConfig(
                fallback_delay_seconds=self.settings.rate_limit_fallback_delay,
                max_retries=self.settings.rate_limit_max_retries,
                max_delay_seconds=self.settings.rate_limit_max_delay,
            )
        )
        self._dispatcher = RequestDispatcher(
            rate_limiter=rate_limiter,
            http_client=http_client,
            timeout=self.settings.timeout,
            max_connections=self.settings.max_connections,
            max_keepalive_connections=self.settings.max_keepalive_connections,
        )
        self._paginator = Paginator(self._dispatcher, self._auth)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def auth(self) -> AuthContext:
        return self._auth

    @property
    def storefront(self) -> str | None:
        return self._auth.storefront

    def is_initialized(self) -> bool:
        return self._auth.is_initialized()

    def has_user_access(self) -> bool:
        return self._auth.has_user_access()

    def _set_storefront(self, storefront: str) -> None:
        self._auth = self._auth.with_storefront(storefront)
        self._paginator.auth = self._auth

    async def initialize(self) -> "AppleMusicClient":
        """Resolve the storefront if it wasn't configured.

        With a user token, ask the API for the user's storefront (one call). If that
        call fails or returns nothing we fall back to the default storefront - this is
        the ONLY place where a request failure is deliberately not propagated.
        Without a user token the default storefront is adopted directly.

        Returns:
            self, so `client = await AppleMusicClient(settings).initialize()` works

        Raises:
            ConfigurationError: If no developer token is configured
        """
        if not self._auth.is_initialized():
            raise ConfigurationError(
                "Apple Music client not initialized - a developer token is required"
            )

        if self._auth.storefront:
            return self

        default_storefront = self.settings.default_storefront
        if not self._auth.has_user_access():
            self._set_storefront(default_storefront)
            return self

        try:
            storefronts = await self.get_user_storefront()
        except ExternalServiceError as e:
            logger.warning(LogMessages.storefront_fallback(default_storefront, str(e)))
            self._set_storefront(default_storefront)
            return self

        if not storefronts:
            logger.warning(
                LogMessages.storefront_fallback(
                    default_storefront, "storefront lookup returned no data"
                )
            )
            self._set_storefront(default_storefront)
            return self

        self._set_storefront(storefronts[0].id)
        logger.debug("Resolved user storefront: %s", storefronts[0].id)
        return self

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._dispatcher.close()

    async def __aenter__(self) -> "AppleMusicClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # =========================================================================
    # Request helpers
    # =========================================================================

    def _library_url(self, *segments: str, query: dict[str, str] | None = None) -> str:
        return self._auth.build_url(
            [self.settings.api_version, Endpoint.ME, Endpoint.LIBRARY, *segments], query
        )

    def _catalog_url(self, *segments: str, query: dict[str, str] | None = None) -> str:
        storefront = self._auth.require_storefront()
        return self._auth.build_url(
            [self.settings.api_version, Endpoint.CATALOG, storefront, *segments], query
        )

    async def _fetch_first(
        self, descriptor: RequestDescriptor, resource_model: type[ResourceT]
    ) -> ResourceT | None:
        """Single-resource lookup: first item, None on 404 or empty data."""
        try:
            envelope = await self._dispatcher.dispatch(
                descriptor, ResponseEnvelope[resource_model]  # type: ignore[valid-type]
            )
        except HttpStatusError as e:
            if e.status_code == NOT_FOUND_STATUS:
                logger.debug("%s not found: %s", resource_model.__name__, descriptor.url)
                return None
            raise
        return envelope.data[0] if envelope.data else None

    # =========================================================================
    # Storefront
    # =========================================================================

    async def get_user_storefront(self) -> list[Storefront]:
        """Storefront(s) of the authenticated user (GET v1/me/storefront).

        One request, never paginated: the answer is a single short page.
        """
        url = self._auth.build_url(
            [self.settings.api_version, Endpoint.ME, Endpoint.STOREFRONT]
        )
        descriptor = self._auth.build_request(url)
        envelope = await self._dispatcher.dispatch(descriptor, ResponseEnvelope[Storefront])
        return envelope.data

    # =========================================================================
    # Playlists
    # =========================================================================

    async def get_all_library_playlists(self) -> list[LibraryPlaylist]:
        """All playlists in the user's library (every page)."""
        descriptor = self._auth.build_request(self._library_url(Endpoint.PLAYLISTS))
        return await self._paginator.fetch_all_pages(descriptor, LibraryPlaylist)

    async def get_library_playlist(self, playlist_id: str) -> LibraryPlaylist | None:
        descriptor = self._auth.build_request(
            self._library_url(Endpoint.PLAYLISTS, playlist_id)
        )
        return await self._fetch_first(descriptor, LibraryPlaylist)

    async def get_library_playlist_songs(self, playlist_id: str) -> list[LibrarySong]:
        """Tracks of a library playlist, in playlist order."""
        descriptor = self._auth.build_request(
            self._library_url(Endpoint.PLAYLISTS, playlist_id, Endpoint.TRACKS)
        )
        return await self._paginator.fetch_all_pages(descriptor, LibrarySong)

    async def get_catalog_playlist(self, playlist_id: str) -> Playlist | None:
        descriptor = self._auth.build_request(
            self._catalog_url(Endpoint.PLAYLISTS, playlist_id),
            requires_user_access=False,
        )
        return await self._fetch_first(descriptor, Playlist)

    async def get_catalog_playlist_songs(self, playlist_id: str) -> list[Song]:
        descriptor = self._auth.build_request(
            self._catalog_url(Endpoint.PLAYLISTS, playlist_id, Endpoint.TRACKS),
            requires_user_access=False,
        )
        return await self._paginator.fetch_all_pages(descriptor, Song)

    async def create_library_playlist(
        self,
        name: str | None = None,
        description: str | None = None,
        songs: list[Song] | None = None,
        library_songs: list[LibrarySong] | None = None,
    ) -> LibraryPlaylist | None:
        """Create a playlist in the user's library.

        Args:
            name: Playlist name (omitted from the body when None)
            description: Playlist description (omitted from the body when None)
            songs: Catalog songs to add (listed first)
            library_songs: Library songs to add (listed after catalog songs)

        Returns:
            The created playlist as returned by the API, or None if it sent no data
        """
        body = LibraryPlaylistCreationRequest(
            name=name,
            description=description,
            tracks=build_track_references(songs or [], library_songs or []),
        )
        descriptor = self._auth.build_request(
            self._library_url(Endpoint.PLAYLISTS),
            method="POST",
            body=encode_body(body),
        )
        envelope = await self._dispatcher.dispatch(
            descriptor, ResponseEnvelope[LibraryPlaylist]
        )
        return envelope.data[0] if envelope.data else None

    async def add_tracks_to_library_playlist(
        self,
        playlist_id: str,
        songs: list[Song] | None = None,
        library_songs: list[LibrarySong] | None = None,
    ) -> bool:
        """Append tracks to a library playlist.

        Returns:
            True when the API acknowledged (200/202/204), False on a bodiless failure

        Raises:
            HttpStatusError: Failure status with a diagnostic body
        """
        body = LibraryPlaylistTracksRequest(
            data=build_track_references(songs or [], library_songs or [])
        )
        descriptor = self._auth.build_request(
            self._library_url(Endpoint.PLAYLISTS, playlist_id, Endpoint.TRACKS),
            method="POST",
            body=encode_body(body),
        )
        return await self._dispatcher.dispatch_without_body(descriptor)

    # =========================================================================
    # Albums
    # =========================================================================

    async def get_all_library_albums(self) -> list[LibraryAlbum]:
        descriptor = self._auth.build_request(self._library_url(Endpoint.ALBUMS))
        return await self._paginator.fetch_all_pages(descriptor, LibraryAlbum)

    async def get_library_album(self, album_id: str) -> LibraryAlbum | None:
        descriptor = self._auth.build_request(self._library_url(Endpoint.ALBUMS, album_id))
        return await self._fetch_first(descriptor, LibraryAlbum)

    async def get_catalog_album(self, album_id: str) -> Album | None:
        descriptor = self._auth.build_request(
            self._catalog_url(Endpoint.ALBUMS, album_id), requires_user_access=False
        )
        return await self._fetch_first(descriptor, Album)

    # =========================================================================
    # Artists
    # =========================================================================

    async def get_all_library_artists(self) -> list[LibraryArtist]:
        descriptor = self._auth.build_request(self._library_url(Endpoint.ARTISTS))
        return await self._paginator.fetch_all_pages(descriptor, LibraryArtist)

    async def get_library_artist(self, artist_id: str) -> LibraryArtist | None:
        descriptor = self._auth.build_request(
            self._library_url(Endpoint.ARTISTS, artist_id)
        )
        return await self._fetch_first(descriptor, LibraryArtist)

    async def get_catalog_artist(self, artist_id: str) -> Artist | None:
        descriptor = self._auth.build_request(
            self._catalog_url(Endpoint.ARTISTS, artist_id), requires_user_access=False
        )
        return await self._fetch_first(descriptor, Artist)

    # =========================================================================
    # Songs
    # =========================================================================

    async def get_all_library_songs(self) -> list[LibrarySong]:
        """Every song in the user's library. Large libraries mean MANY pages."""
        descriptor = self._auth.build_request(self._library_url(Endpoint.SONGS))
        return await self._paginator.fetch_all_pages(descriptor, LibrarySong)

    async def get_library_song(self, song_id: str) -> LibrarySong | None:
        descriptor = self._auth.build_request(self._library_url(Endpoint.SONGS, song_id))
        return await self._fetch_first(descriptor, LibrarySong)

    async def get_catalog_song(self, song_id: str) -> Song | None:
        descriptor = self._auth.build_request(
            self._catalog_url(Endpoint.SONGS, song_id), requires_user_access=False
        )
        return await self._fetch_first(descriptor, Song)

    async def get_catalog_song_by_isrc(self, isrc: str) -> Song | None:
        """First catalog song carrying this ISRC (GET .../songs?filter[isrc]=...)."""
        descriptor = self._auth.build_request(
            self._catalog_url(Endpoint.SONGS, query={"filter[isrc]": isrc}),
            requires_user_access=False,
        )
        return await self._fetch_first(descriptor, Song)

    async def get_library_song_isrc(self, library_song: LibrarySong) -> str | None:
        """Best-effort ISRC for a library song.

        Library songs don't expose an ISRC, so we search the catalog for
        "<name> <artist>" and take the ISRC of the first hit.

        Returns:
            ISRC of the first catalog match, or None (no attributes / no match)
        """
        attributes = library_song.attributes
        if attributes is None:
            return None

        term = " ".join(part for part in (attributes.name, attributes.artist_name) if part)
        songs = await self.search_catalog_songs(term)
        if not songs or songs[0].attributes is None:
            return None
        return songs[0].attributes.isrc

    # =========================================================================
    # Search (single call each, never paginated)
    # =========================================================================

    @staticmethod
    def _search_query(
        term: str, search_types: list[SearchType] | None, library: bool
    ) -> dict[str, str]:
        # Catalog search only knows plain kinds, library search only library-* kinds
        wrong = [t.value for t in search_types or [] if t.is_library != library]
        if wrong:
            scope = "library" if library else "catalog"
            raise ValueError(f"Search types not valid for {scope} search: {', '.join(wrong)}")

        query = {"term": term}
        if search_types:
            query["types"] = join_search_types(search_types)
        return query

    async def search_catalog(
        self, term: str, search_types: list[SearchType] | None = None
    ) -> SearchResults:
        """Search the storefront catalog.

        Args:
            term: Free-text search term (spaces are sent as "+")
            search_types: Kinds to search (all kinds when omitted)

        Returns:
            Results per kind; kinds the server omitted are None

        Raises:
            ValueError: If a library-* kind is passed
        """
        query = self._search_query(term, search_types, library=False)
        descriptor = self._auth.build_request(
            self._catalog_url(Endpoint.SEARCH, query=query),
            requires_user_access=False,
        )
        response = await self._dispatcher.dispatch(descriptor, SearchResponse)
        return response.results

    async def search_catalog_songs(self, term: str) -> list[Song]:
        results = await self.search_catalog(term, [SearchType.SONGS])
        return envelope_items(results.songs)

    async def search_catalog_albums(self, term: str) -> list[Album]:
        results = await self.search_catalog(term, [SearchType.ALBUMS])
        return envelope_items(results.albums)

    async def search_catalog_artists(self, term: str) -> list[Artist]:
        results = await self.search_catalog(term, [SearchType.ARTISTS])
        return envelope_items(results.artists)

    async def search_catalog_playlists(self, term: str) -> list[Playlist]:
        results = await self.search_catalog(term, [SearchType.PLAYLISTS])
        return envelope_items(results.playlists)

    async def search_library(
        self, term: str, search_types: list[SearchType] | None = None
    ) -> LibrarySearchResults:
        """Search the user's library (no storefront needed).

        Args:
            term: Free-text search term (spaces are sent as "+")
            search_types: library-* kinds to search (all kinds when omitted)

        Raises:
            ValueError: If a catalog kind is passed
        """
        query = self._search_query(term, search_types, library=True)
        descriptor = self._auth.build_request(self._library_url(Endpoint.SEARCH, query=query))
        response = await self._dispatcher.dispatch(descriptor, LibrarySearchResponse)
        return response.results

    async def search_library_songs(self, term: str) -> list[LibrarySong]:
        results = await self.search_library(term, [SearchType.LIBRARY_SONGS])
        return envelope_items(results.songs)

    async def search_library_albums(self, term: str) -> list[LibraryAlbum]:
        results = await self.search_library(term, [SearchType.LIBRARY_ALBUMS])
        return envelope_items(results.albums)

    async def search_library_artists(self, term: str) -> list[LibraryArtist]:
        results = await self.search_library(term, [SearchType.LIBRARY_ARTISTS])
        return envelope_items(results.artists)

    async def search_library_playlists(self, term: str) -> list[LibraryPlaylist]:
        results = await self.search_library(term, [SearchType.LIBRARY_PLAYLISTS])
        return envelope_items(results.playlists)

    # =========================================================================
    # Add to library
    # =========================================================================

    async def add_resources_to_library(
        self,
        songs: list[str | Song] | None = None,
        albums: list[str | Album] | None = None,
        playlists: list[str | Playlist] | None = None,
    ) -> bool:
        """Add catalog resources to the user's library (POST v1/me/library?ids[...]=).

        Accepts ids or catalog resources. Kinds without ids are left out of the query.

        Returns:
            True when the API acknowledged, False on a bodiless failure
        """
        query: dict[str, str] = {}
        for kind, items in (
            (SearchType.SONGS, songs),
            (SearchType.ALBUMS, albums),
            (SearchType.PLAYLISTS, playlists),
        ):
            ids = [item if isinstance(item, str) else item.id for item in items or []]
            if ids:
                query[f"ids[{kind.value}]"] = ",".join(ids)

        descriptor = self._auth.build_request(self._library_url(query=query), method="POST")
        return await self._dispatcher.dispatch_without_body(descriptor)

    async def add_songs_to_library(self, song_ids: list[str]) -> bool:
        return await self.add_resources_to_library(songs=song_ids)

    async def add_albums_to_library(self, album_ids: list[str]) -> bool:
        return await self.add_resources_to_library(albums=album_ids)

    async def add_playlists_to_library(self, playlist_ids: list[str]) -> bool:
        return await self.add_resources_to_library(playlists=playlist_ids)


async def initialize(
    developer_token: str,
    user_token: str | None = None,
    storefront: str | None = None,
    settings: AppleMusicSettings | None = None,
    **client_kwargs: Any,
) -> AppleMusicClient:
    """Create a client and resolve its storefront.

    Explicit arguments override the corresponding fields of `settings`.

    Args:
        developer_token: Developer (service) token
        user_token: Music-User-Token for library endpoints
        storefront: Storefront code; discovered (or defaulted) when omitted
        settings: Base settings for everything else
        **client_kwargs: Passed to AppleMusicClient (e.g. http_client)

    Returns:
        Ready-to-use AppleMusicClient
    """
    base = settings or AppleMusicSettings()
    overrides: dict[str, Any] = {"developer_token": developer_token}
    if user_token is not None:
        overrides["user_token"] = user_token
    if storefront is not None:
        overrides["storefront"] = storefront
    merged = AppleMusicSettings.model_validate({**base.model_dump(), **overrides})

    client = AppleMusicClient(merged, **client_kwargs)
    return await client.initialize()


__all__ = ["AppleMusicClient", "initialize"]
