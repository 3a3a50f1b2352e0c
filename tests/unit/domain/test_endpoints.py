"""Tests for path segments and search types."""

from applemusic_client.domain.value_objects.endpoints import (
    Endpoint,
    SearchType,
    join_search_types,
)


class TestEndpoint:
    """Test static path segments."""

    def test_segment_values(self) -> None:
        assert Endpoint.VERSION.value == "v1"
        assert Endpoint.ME.value == "me"
        assert Endpoint.CATALOG.value == "catalog"
        assert Endpoint.STOREFRONT.value == "storefront"


class TestSearchType:
    """Test search type helpers."""

    def test_is_library(self) -> None:
        assert SearchType.LIBRARY_SONGS.is_library
        assert not SearchType.SONGS.is_library

    def test_join_search_types(self) -> None:
        """Types are comma-joined in caller order."""
        assert join_search_types([SearchType.SONGS, SearchType.ALBUMS]) == "songs,albums"

    def test_join_single_type(self) -> None:
        assert join_search_types([SearchType.LIBRARY_PLAYLISTS]) == "library-playlists"
