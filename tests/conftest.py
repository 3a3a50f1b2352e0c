"""Shared fixtures: settings and a scripted fake Apple Music API (httpx.MockTransport)."""

import json
from collections.abc import AsyncIterator, Callable
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest

from applemusic_client.config.settings import AppleMusicSettings
from applemusic_client.infrastructure.integrations.apple_music_client import (
    AppleMusicClient,
)
from applemusic_client.infrastructure.integrations.auth_context import (
    AuthContext,
    Credentials,
)

DEVELOPER_TOKEN = "dev-token-123"
USER_TOKEN = "user-token-456"

Handler = Callable[[httpx.Request], httpx.Response]


class FakeAppleMusicApi:
    """Records every request and answers from a queue of responses (or a handler)."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responses: list[httpx.Response] = []
        self.handler: Handler | None = None

    def queue(self, *responses: httpx.Response) -> None:
        self._responses.extend(responses)

    def queue_json(self, payload: Any, status_code: int = 200, **kwargs: Any) -> None:
        self._responses.append(httpx.Response(status_code, json=payload, **kwargs))

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.handler is not None:
            return self.handler(request)
        if not self._responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        return self._responses.pop(0)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)


@pytest.fixture
def fake_api() -> FakeAppleMusicApi:
    """Scripted fake API."""
    return FakeAppleMusicApi()


@pytest.fixture
async def http_client(fake_api: FakeAppleMusicApi) -> AsyncIterator[httpx.AsyncClient]:
    """httpx client that never touches the network."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_api)) as client:
        yield client


@pytest.fixture
def sleep_mock(mocker: Any) -> AsyncMock:
    """Patch the rate limiter's sleep so 429 tests run instantly."""
    asyncio_mock = mocker.patch("applemusic_client.infrastructure.rate_limiter.asyncio")
    asyncio_mock.sleep = AsyncMock()
    return asyncio_mock.sleep


@pytest.fixture
def apple_music_settings() -> AppleMusicSettings:
    """Settings with both tokens and a resolved storefront."""
    return AppleMusicSettings(
        developer_token=DEVELOPER_TOKEN,
        user_token=USER_TOKEN,
        storefront="us",
    )


@pytest.fixture
def auth_context() -> AuthContext:
    """Fully authorised context for the "us" storefront."""
    return AuthContext(
        Credentials(developer_token=DEVELOPER_TOKEN, user_token=USER_TOKEN, storefront="us")
    )


@pytest.fixture
def apple_music_client(
    apple_music_settings: AppleMusicSettings, http_client: httpx.AsyncClient
) -> AppleMusicClient:
    """Client wired to the fake API."""
    return AppleMusicClient(apple_music_settings, http_client=http_client)
