"""Tests for typed resource decoding and request bodies."""

import json

import pytest
from pydantic import ValidationError

from applemusic_client.domain.resources import (
    Album,
    Artwork,
    LibraryPlaylistCreationRequest,
    LibraryPlaylistTracksRequest,
    LibrarySearchResponse,
    LibrarySong,
    ResponseEnvelope,
    SearchResponse,
    Song,
    TrackReference,
    build_track_references,
    encode_body,
    envelope_items,
)

CATALOG_SONG = {
    "id": "1440857781",
    "type": "songs",
    "href": "/v1/catalog/us/songs/1440857781",
    "attributes": {
        "name": "Bohemian Rhapsody",
        "artistName": "Queen",
        "albumName": "A Night at the Opera",
        "durationInMillis": 354320,
        "isrc": "GBUM71029604",
        "trackNumber": 11,
        "genreNames": ["Rock", "Music"],
        "artwork": {"url": "https://is1.mzstatic.com/{w}x{h}bb.jpg", "width": 3000},
        "playParams": {"id": "1440857781", "kind": "song"},
        "someFutureField": {"nested": True},
    },
    "relationships": {
        "albums": {
            "href": "/v1/catalog/us/songs/1440857781/albums",
            "data": [{"id": "1440857764", "type": "albums"}],
            "next": "/v1/catalog/us/songs/1440857781/albums?offset=1",
        }
    },
}


class TestEnvelopeDecoding:
    """Test decoding of the generic response envelope."""

    def test_decodes_catalog_song_page(self) -> None:
        """camelCase wire keys populate snake_case fields."""
        envelope = ResponseEnvelope[Song].model_validate(
            {"data": [CATALOG_SONG], "next": "/v1/catalog/us/songs?offset=1"}
        )

        assert len(envelope.data) == 1
        song = envelope.data[0]
        assert isinstance(song, Song)
        assert song.id == "1440857781"
        assert song.attributes is not None
        assert song.attributes.artist_name == "Queen"
        assert song.attributes.duration_in_millis == 354320
        assert song.attributes.isrc == "GBUM71029604"
        assert song.attributes.play_params is not None
        assert song.attributes.play_params.kind == "song"
        assert envelope.has_next

    def test_unknown_fields_are_ignored(self) -> None:
        """New server fields don't break decoding."""
        envelope = ResponseEnvelope[Song].model_validate_json(
            json.dumps({"data": [CATALOG_SONG], "meta": {"total": 1}})
        )
        assert not hasattr(envelope.data[0].attributes, "some_future_field")

    def test_snake_case_keys_are_accepted(self) -> None:
        """Fields can also be populated by their Python name."""
        song = LibrarySong.model_validate(
            {"id": "i.1", "type": "library-songs", "attributes": {"name": "x", "artist_name": "y"}}
        )
        assert song.attributes is not None
        assert song.attributes.artist_name == "y"

    def test_optional_fields_default_to_none(self) -> None:
        """Resources without attributes or relationships still decode."""
        song = Song.model_validate({"id": "1", "type": "songs"})
        assert song.attributes is None
        assert song.relationships is None
        assert song.href is None

    def test_empty_envelope(self) -> None:
        """A page without data decodes to an empty list and no next."""
        envelope = ResponseEnvelope[LibrarySong].model_validate({"data": []})
        assert envelope.data == []
        assert envelope.next is None
        assert not envelope.has_next

    def test_envelope_without_data_fails(self) -> None:
        """An error document is not an empty page."""
        with pytest.raises(ValidationError):
            ResponseEnvelope[LibrarySong].model_validate({"errors": [{"status": "500"}]})

    def test_missing_required_field_fails(self) -> None:
        """A resource without id is a decoding failure."""
        with pytest.raises(ValidationError):
            ResponseEnvelope[Song].model_validate({"data": [{"type": "songs"}]})

    def test_relationship_keeps_its_own_next(self) -> None:
        """Relationship envelopes are decoded but not auto-paginated."""
        song = Song.model_validate(CATALOG_SONG)
        assert song.relationships is not None
        albums = song.relationships.albums
        assert albums is not None
        assert isinstance(albums.data[0], Album)
        assert albums.next == "/v1/catalog/us/songs/1440857781/albums?offset=1"


class TestArtwork:
    """Test artwork URL templating."""

    def test_sized_url_square(self) -> None:
        artwork = Artwork(url="https://img/{w}x{h}bb.jpg")
        assert artwork.sized_url(300) == "https://img/300x300bb.jpg"

    def test_sized_url_rectangle(self) -> None:
        artwork = Artwork(url="https://img/{w}x{h}bb.jpg")
        assert artwork.sized_url(640, 480) == "https://img/640x480bb.jpg"


class TestSearchEnvelopes:
    """Test search response decoding."""

    def test_catalog_search_missing_categories_are_none(self) -> None:
        """The server omits empty categories."""
        response = SearchResponse.model_validate(
            {"results": {"songs": {"data": [CATALOG_SONG]}}}
        )
        assert response.results.albums is None
        assert len(envelope_items(response.results.songs)) == 1
        assert envelope_items(response.results.albums) == []

    def test_library_search_uses_library_keys(self) -> None:
        """Library results arrive under library-* keys."""
        response = LibrarySearchResponse.model_validate(
            {
                "results": {
                    "library-songs": {
                        "data": [
                            {"id": "i.1", "type": "library-songs", "attributes": {"name": "x"}}
                        ]
                    },
                    "library-playlists": {"data": []},
                }
            }
        )
        songs = envelope_items(response.results.songs)
        assert [song.id for song in songs] == ["i.1"]
        assert isinstance(songs[0], LibrarySong)
        assert response.results.playlists is not None
        assert response.results.albums is None

    def test_search_with_empty_results(self) -> None:
        """The server omits every category when nothing matched."""
        response = SearchResponse.model_validate({"results": {}})
        assert response.results.songs is None

    def test_search_without_results_key_fails(self) -> None:
        with pytest.raises(ValidationError):
            SearchResponse.model_validate({"unexpected": 1})
        with pytest.raises(ValidationError):
            LibrarySearchResponse.model_validate({"errors": [{"status": "500"}]})


class TestTrackReferences:
    """Test playlist write bodies."""

    def test_catalog_songs_come_first(self) -> None:
        """Catalog songs, then library songs, each in caller order."""
        songs = [Song(id="c2", type="songs"), Song(id="c1", type="songs")]
        library_songs = [LibrarySong(id="i.9", type="library-songs")]

        references = build_track_references(songs, library_songs)

        assert [(ref.id, ref.type) for ref in references] == [
            ("c2", "songs"),
            ("c1", "songs"),
            ("i.9", "library-songs"),
        ]

    def test_tracks_body_round_trips(self) -> None:
        """Encoded body decodes back to the same ordered {id, type} list."""
        references = [
            TrackReference(id="c1", type="songs"),
            TrackReference(id="i.1", type="library-songs"),
        ]
        body = encode_body(LibraryPlaylistTracksRequest(data=references))

        assert json.loads(body) == {
            "data": [{"id": "c1", "type": "songs"}, {"id": "i.1", "type": "library-songs"}]
        }
        assert LibraryPlaylistTracksRequest.model_validate_json(body).data == references

    def test_creation_body_omits_absent_optionals(self) -> None:
        """name/description keys are left out when not given."""
        body = encode_body(LibraryPlaylistCreationRequest(tracks=[]))
        assert json.loads(body) == {"tracks": []}

    def test_creation_body_with_name_and_description(self) -> None:
        body = encode_body(
            LibraryPlaylistCreationRequest(
                name="Road Trip",
                description="Loud",
                tracks=[TrackReference(id="c1", type="songs")],
            )
        )
        assert json.loads(body) == {
            "name": "Road Trip",
            "description": "Loud",
            "tracks": [{"id": "c1", "type": "songs"}],
        }
