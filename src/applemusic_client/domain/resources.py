"""Typed resource model for Apple Music API responses.

Hey future me - EVERY endpoint answers with the same shape:

    {"data": [{"id": "...", "type": "songs", "href": "...",
               "attributes": {...}, "relationships": {"albums": {"data": [...], "next": "..."}}}],
     "next": "/v1/me/library/songs?offset=100"}

So there is ONE generic envelope (ResponseEnvelope[T]) and one Resource base.
Each resource kind only narrows `attributes` and `relationships` to its own models.
The dispatcher decodes straight into ResponseEnvelope[Song], ResponseEnvelope[LibraryAlbum]
etc. - no per-kind parsing code anywhere.

Catalog and library variants are DIFFERENT types on purpose (Song vs LibrarySong):
the library flavour has fewer attributes and points to library relationships.

Wire keys are camelCase ("artistName"), Python fields are snake_case (artist_name).
The alias generator maps them; snake_case keys are accepted too. Unknown keys are ignored.

Relationship envelopes are NOT auto-paginated - they come back with their own `next`.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from applemusic_client.domain.value_objects.endpoints import SearchType


class ApiModel(BaseModel):
    """Base for everything decoded from (or encoded to) the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Resource(ApiModel):
    """Common shape of every catalog and library entity."""

    id: str
    type: str
    href: str | None = None


ResourceT = TypeVar("ResourceT", bound=Resource)


class ResponseEnvelope(ApiModel, Generic[ResourceT]):
    """One page of a collection response (also used for relationships).

    `next` is a RELATIVE reference ("/v1/me/library/songs?offset=25") and must be
    resolved against the API base URL before it can be requested.

    `data` is required: an `{"errors": [...]}` body on a 2xx is a decode failure,
    not an empty page.
    """

    data: list[ResourceT]
    href: str | None = None
    next: str | None = None

    @property
    def has_next(self) -> bool:
        """Whether the server announced another page."""
        return bool(self.next)


# =============================================================================
# Shared value objects
# =============================================================================


class Artwork(ApiModel):
    """Artwork template. `url` contains {w}x{h} placeholders."""

    url: str
    width: int | None = None
    height: int | None = None
    bg_color: str | None = None
    text_color1: str | None = None
    text_color2: str | None = None
    text_color3: str | None = None
    text_color4: str | None = None

    def sized_url(self, width: int, height: int | None = None) -> str:
        """Fill the size placeholders of the artwork URL."""
        return self.url.replace("{w}", str(width)).replace(
            "{h}", str(height if height is not None else width)
        )


class EditorialNotes(ApiModel):
    short: str | None = None
    standard: str | None = None


class PlayParams(ApiModel):
    id: str
    kind: str
    catalog_id: str | None = None
    global_id: str | None = None
    is_library: bool | None = None


class Preview(ApiModel):
    url: str
    artwork: Artwork | None = None


# =============================================================================
# Attributes
# =============================================================================


class StorefrontAttributes(ApiModel):
    name: str
    default_language_tag: str | None = None
    supported_language_tags: list[str] = Field(default_factory=list)
    explicit_content_policy: str | None = None


class SongAttributes(ApiModel):
    name: str
    album_name: str | None = None
    artist_name: str | None = None
    artwork: Artwork | None = None
    composer_name: str | None = None
    content_rating: str | None = None
    disc_number: int | None = None
    duration_in_millis: int | None = None
    editorial_notes: EditorialNotes | None = None
    genre_names: list[str] = Field(default_factory=list)
    isrc: str | None = None
    movement_count: int | None = None
    movement_name: str | None = None
    movement_number: int | None = None
    play_params: PlayParams | None = None
    previews: list[Preview] = Field(default_factory=list)
    release_date: str | None = None
    track_number: int | None = None
    url: str | None = None
    work_name: str | None = None


class LibrarySongAttributes(ApiModel):
    name: str
    album_name: str | None = None
    artist_name: str | None = None
    artwork: Artwork | None = None
    content_rating: str | None = None
    disc_number: int | None = None
    duration_in_millis: int | None = None
    play_params: PlayParams | None = None
    track_number: int | None = None


class AlbumAttributes(ApiModel):
    name: str
    artist_name: str | None = None
    artwork: Artwork | None = None
    content_rating: str | None = None
    copyright: str | None = None
    editorial_notes: EditorialNotes | None = None
    genre_names: list[str] = Field(default_factory=list)
    is_complete: bool | None = None
    is_single: bool | None = None
    is_mastered_for_itunes: bool | None = None
    play_params: PlayParams | None = None
    record_label: str | None = None
    release_date: str | None = None
    track_count: int | None = None
    upc: str | None = None
    url: str | None = None


class LibraryAlbumAttributes(ApiModel):
    name: str
    artist_name: str | None = None
    artwork: Artwork | None = None
    content_rating: str | None = None
    play_params: PlayParams | None = None
    track_count: int | None = None


class ArtistAttributes(ApiModel):
    name: str
    editorial_notes: EditorialNotes | None = None
    genre_names: list[str] = Field(default_factory=list)
    url: str | None = None


class LibraryArtistAttributes(ApiModel):
    name: str


class PlaylistAttributes(ApiModel):
    name: str
    artwork: Artwork | None = None
    curator_name: str | None = None
    description: EditorialNotes | None = None
    last_modified_date: str | None = None
    playlist_type: str | None = None
    play_params: PlayParams | None = None
    url: str | None = None


class LibraryPlaylistAttributes(ApiModel):
    name: str
    artwork: Artwork | None = None
    description: EditorialNotes | None = None
    play_params: PlayParams | None = None
    can_edit: bool | None = None
    date_added: str | None = None


# =============================================================================
# Relationships (forward references resolved by model_rebuild() at the bottom)
# =============================================================================


class SongRelationships(ApiModel):
    albums: ResponseEnvelope[Album] | None = None
    artists: ResponseEnvelope[Artist] | None = None


class LibrarySongRelationships(ApiModel):
    albums: ResponseEnvelope[LibraryAlbum] | None = None
    artists: ResponseEnvelope[LibraryArtist] | None = None


class AlbumRelationships(ApiModel):
    tracks: ResponseEnvelope[Song] | None = None
    artists: ResponseEnvelope[Artist] | None = None


class LibraryAlbumRelationships(ApiModel):
    tracks: ResponseEnvelope[LibrarySong] | None = None
    artists: ResponseEnvelope[LibraryArtist] | None = None


class ArtistRelationships(ApiModel):
    albums: ResponseEnvelope[Album] | None = None


class LibraryArtistRelationships(ApiModel):
    albums: ResponseEnvelope[LibraryAlbum] | None = None


class PlaylistRelationships(ApiModel):
    tracks: ResponseEnvelope[Song] | None = None


class LibraryPlaylistRelationships(ApiModel):
    tracks: ResponseEnvelope[LibrarySong] | None = None


# =============================================================================
# Resources
# =============================================================================


class Storefront(Resource):
    attributes: StorefrontAttributes | None = None


class Song(Resource):
    """Catalog song."""

    attributes: SongAttributes | None = None
    relationships: SongRelationships | None = None


class LibrarySong(Resource):
    """Song in the user's library (strict subset of catalog attributes)."""

    attributes: LibrarySongAttributes | None = None
    relationships: LibrarySongRelationships | None = None


class Album(Resource):
    attributes: AlbumAttributes | None = None
    relationships: AlbumRelationships | None = None


class LibraryAlbum(Resource):
    attributes: LibraryAlbumAttributes | None = None
    relationships: LibraryAlbumRelationships | None = None


class Artist(Resource):
    attributes: ArtistAttributes | None = None
    relationships: ArtistRelationships | None = None


class LibraryArtist(Resource):
    attributes: LibraryArtistAttributes | None = None
    relationships: LibraryArtistRelationships | None = None


class Playlist(Resource):
    attributes: PlaylistAttributes | None = None
    relationships: PlaylistRelationships | None = None


class LibraryPlaylist(Resource):
    attributes: LibraryPlaylistAttributes | None = None
    relationships: LibraryPlaylistRelationships | None = None


# =============================================================================
# Search envelopes (single call, never paginated by us)
# =============================================================================


class SearchResults(ApiModel):
    """Catalog search results. The server OMITS empty categories -> None."""

    songs: ResponseEnvelope[Song] | None = None
    albums: ResponseEnvelope[Album] | None = None
    artists: ResponseEnvelope[Artist] | None = None
    playlists: ResponseEnvelope[Playlist] | None = None


class LibrarySearchResults(ApiModel):
    """Library search results, keyed by library-* kinds on the wire."""

    songs: ResponseEnvelope[LibrarySong] | None = Field(
        default=None, alias="library-songs"
    )
    albums: ResponseEnvelope[LibraryAlbum] | None = Field(
        default=None, alias="library-albums"
    )
    artists: ResponseEnvelope[LibraryArtist] | None = Field(
        default=None, alias="library-artists"
    )
    playlists: ResponseEnvelope[LibraryPlaylist] | None = Field(
        default=None, alias="library-playlists"
    )


class SearchResponse(ApiModel):
    results: SearchResults


class LibrarySearchResponse(ApiModel):
    results: LibrarySearchResults


def envelope_items(envelope: ResponseEnvelope[ResourceT] | None) -> list[ResourceT]:
    """Items of an optional envelope (absent search category -> empty list)."""
    if envelope is None:
        return []
    return list(envelope.data)


# =============================================================================
# Request bodies
# =============================================================================


class TrackReference(ApiModel):
    """One entry of a playlist track list: catalog ("songs") or library ("library-songs")."""

    id: str
    type: str


def build_track_references(
    songs: list[Song], library_songs: list[LibrarySong]
) -> list[TrackReference]:
    """Catalog songs first, then library songs, each in caller order."""
    references = [
        TrackReference(id=song.id, type=SearchType.SONGS.value) for song in songs
    ]
    references.extend(
        TrackReference(id=song.id, type=SearchType.LIBRARY_SONGS.value)
        for song in library_songs
    )
    return references


class LibraryPlaylistCreationRequest(ApiModel):
    name: str | None = None
    description: str | None = None
    tracks: list[TrackReference] = Field(default_factory=list)


class LibraryPlaylistTracksRequest(ApiModel):
    data: list[TrackReference] = Field(default_factory=list)


def encode_body(body: ApiModel) -> bytes:
    """Serialize a request body with wire names, dropping unset optionals."""
    return body.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")


for _model in (
    SongRelationships,
    LibrarySongRelationships,
    AlbumRelationships,
    LibraryAlbumRelationships,
    ArtistRelationships,
    LibraryArtistRelationships,
    PlaylistRelationships,
    LibraryPlaylistRelationships,
    Song,
    LibrarySong,
    Album,
    LibraryAlbum,
    Artist,
    LibraryArtist,
    Playlist,
    LibraryPlaylist,
    SearchResults,
    LibrarySearchResults,
    SearchResponse,
    LibrarySearchResponse,
):
    _model.model_rebuild()


__all__ = [
    "ApiModel",
    "Resource",
    "ResourceT",
    "ResponseEnvelope",
    "Artwork",
    "EditorialNotes",
    "PlayParams",
    "Preview",
    "Storefront",
    "Song",
    "LibrarySong",
    "Album",
    "LibraryAlbum",
    "Artist",
    "LibraryArtist",
    "Playlist",
    "LibraryPlaylist",
    "SearchResults",
    "LibrarySearchResults",
    "SearchResponse",
    "LibrarySearchResponse",
    "TrackReference",
    "LibraryPlaylistCreationRequest",
    "LibraryPlaylistTracksRequest",
    "build_track_references",
    "encode_body",
    "envelope_items",
]
