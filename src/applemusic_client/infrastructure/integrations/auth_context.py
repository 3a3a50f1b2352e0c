"""Credentials, URL building and authenticated request descriptors.

Hey future me - this module NEVER touches the network. It only turns
"path segments + query + access level" into a RequestDescriptor the dispatcher
can send, and refuses (ConfigurationError) when credentials are insufficient.
That way a missing user token or storefront fails BEFORE any HTTP call.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from urllib.parse import quote, urlencode

import httpx

from applemusic_client.config.settings import API_BASE_URL
from applemusic_client.domain.exceptions import ConfigurationError

AUTHORIZATION_HEADER = "Authorization"
USER_TOKEN_HEADER = "Music-User-Token"
CONTENT_TYPE_HEADER = "Content-Type"

# Kept literal in query strings: "types=songs,albums", "filter[isrc]=...", "ids[songs]=..."
QUERY_SAFE_CHARS = ",[]"


def _segment_text(segment: str) -> str:
    # str() of a str-Enum member is "Endpoint.SONGS", we want "songs"
    if isinstance(segment, Enum):
        return str(segment.value)
    return str(segment)


@dataclass(frozen=True)
class Credentials:
    """Immutable credential set.

    Attributes:
        developer_token: Developer (service) token, sent as Bearer token
        user_token: Music-User-Token for library access (optional)
        storefront: Region code for catalog access (optional until resolved)
    """

    developer_token: str
    user_token: str | None = None
    storefront: str | None = None

    def with_storefront(self, storefront: str) -> "Credentials":
        """Copy of these credentials with the storefront set."""
        return replace(self, storefront=storefront)

    def __repr__(self) -> str:
        # Tokens must never end up in logs
        developer_token = "***" if self.developer_token else ""
        user_token = "***" if self.user_token else None
        return (
            f"Credentials(developer_token={developer_token!r}, "
            f"user_token={user_token!r}, storefront={self.storefront!r})"
        )


@dataclass(frozen=True)
class RequestDescriptor:
    """A fully resolved request, ready to transmit (and re-transmit on 429).

    `requires_user_access` travels with the request so follow-up pages are
    authenticated at the same level as the first one.
    """

    url: str
    method: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None
    requires_user_access: bool = True

    def to_httpx_request(self) -> httpx.Request:
        """Build a fresh httpx.Request for one transmission attempt."""
        return httpx.Request(
            self.method,
            self.url,
            headers=dict(self.headers),
            content=self.body,
        )


class AuthContext:
    """Builds URLs and authenticated requests from immutable credentials.

    Safe to share between concurrent tasks - nothing in here ever changes.
    """

    def __init__(self, credentials: Credentials, base_url: str = API_BASE_URL) -> None:
        self._credentials = credentials
        self._base_url = base_url.rstrip("/")

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def storefront(self) -> str | None:
        return self._credentials.storefront

    def with_storefront(self, storefront: str) -> "AuthContext":
        """New context with the storefront resolved (this one stays untouched)."""
        return AuthContext(self._credentials.with_storefront(storefront), self._base_url)

    def is_initialized(self) -> bool:
        """Whether a developer token is present."""
        return bool(self._credentials.developer_token)

    def has_user_access(self) -> bool:
        """Whether both developer and user token are present."""
        return self.is_initialized() and bool(self._credentials.user_token)

    def require_storefront(self) -> str:
        """Storefront for catalog paths.

        Raises:
            ConfigurationError: If no storefront has been resolved
        """
        if not self._credentials.storefront:
            raise ConfigurationError(
                "Storefront not resolved - call initialize() or pass a storefront "
                "before using catalog endpoints"
            )
        return self._credentials.storefront

    def build_url(
        self,
        segments: Iterable[str],
        query: Mapping[str, str] | None = None,
    ) -> str:
        """Join ordered path segments (and an optional query) onto the base URL.

        Segments are percent-quoted individually, so ids can't inject extra path parts.
        In the query, spaces become "+" and ",[]" stay literal.
        """
        path = "/".join(quote(_segment_text(segment), safe="") for segment in segments)
        url = f"{self._base_url}/{path}"
        if query:
            url = f"{url}?{urlencode(dict(query), safe=QUERY_SAFE_CHARS)}"
        return url

    def resolve_next(self, next_ref: str) -> str:
        """Resolve a relative `next` reference ("/v1/me/library/songs?offset=25")."""
        return str(httpx.URL(self._base_url).join(next_ref))

    def build_request(
        self,
        url: str,
        method: str = "GET",
        requires_user_access: bool = True,
        body: bytes | None = None,
    ) -> RequestDescriptor:
        """Attach auth headers to a request.

        Args:
            url: Absolute request URL
            method: HTTP method
            requires_user_access: Attach the Music-User-Token header
            body: JSON body (sets Content-Type)

        Returns:
            RequestDescriptor ready for the dispatcher

        Raises:
            ConfigurationError: If the developer token is missing, or user access is
                required and no user token is configured
        """
        if not self.is_initialized():
            raise ConfigurationError(
                "Apple Music client not initialized - a developer token is required"
            )
        if requires_user_access and not self._credentials.user_token:
            raise ConfigurationError(
                "Apple Music client not initialized with user access - "
                "a Music-User-Token is required for library endpoints"
            )

        headers = {AUTHORIZATION_HEADER: f"Bearer {self._credentials.developer_token}"}
        if requires_user_access:
            headers[USER_TOKEN_HEADER] = self._credentials.user_token or ""
        if body is not None:
            headers[CONTENT_TYPE_HEADER] = "application/json"

        return RequestDescriptor(
            url=url,
            method=method.upper(),
            headers=MappingProxyType(headers),
            body=body,
            requires_user_access=requires_user_access,
        )


__all__ = [
    "AUTHORIZATION_HEADER",
    "USER_TOKEN_HEADER",
    "AuthContext",
    "Credentials",
    "RequestDescriptor",
]
