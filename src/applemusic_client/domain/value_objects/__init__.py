"""Value objects."""

from applemusic_client.domain.value_objects.endpoints import (
    Endpoint,
    SearchType,
    join_search_types,
)

__all__ = ["Endpoint", "SearchType", "join_search_types"]
