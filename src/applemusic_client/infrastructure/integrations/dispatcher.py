"""Single-request dispatcher with 429 retry and typed decoding.

Hey future me - per logical call the state machine is:

    SENT ──transport error──────────────► FAILED(TransportError)      (no retry!)
      │ ──429─► wait (Retry-After or 1s) ─► SENT again (same descriptor)
      │ ──2xx + body─► decode ──ok──────► SUCCEEDED(model)
      │                       └─fail────► FAILED(DecodeError, raw body kept)
      │ ──2xx, ack-only call────────────► SUCCEEDED(True)
      └─ anything else──────────────────► FAILED(HttpStatusError) / False for ack-only w/o body

The wait is asyncio.sleep - the event loop keeps running other requests meanwhile.
"""

import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from applemusic_client.domain.exceptions import (
    DecodeError,
    HttpStatusError,
    RateLimitExceededError,
    TransportError,
)
from applemusic_client.infrastructure.integrations.auth_context import RequestDescriptor
from applemusic_client.infrastructure.observability.log_messages import LogMessages
from applemusic_client.infrastructure.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

RATE_LIMITED_STATUS = 429
ACKNOWLEDGED_STATUSES = frozenset({200, 202, 204})


class RequestDispatcher:
    """Sends authenticated requests and classifies the responses."""

    # Same lazy-client pattern as every other integration client: the AsyncClient is
    # created on first use inside the running event loop, not in __init__.
    def __init__(
        self,
        rate_limiter: RateLimiter | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        max_connections: int = 20,
        max_keepalive_connections: int = 10,
    ) -> None:
        """
        Initialize the dispatcher.

        Args:
            rate_limiter: 429 policy (default: unbounded retries, 1s fallback)
            http_client: Externally owned client (NOT closed by close())
            timeout: Request timeout in seconds for the lazily created client
            max_connections: Connection pool limit for the lazily created client
            max_keepalive_connections: Idle connections kept open
        """
        self.rate_limiter = rate_limiter or RateLimiter()
        self._client = http_client
        self._owns_client = http_client is None
        self._timeout = timeout
        self._limits = httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                limits=self._limits,
                headers={"Accept": "application/json"},
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if we created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RequestDispatcher":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _send(self, descriptor: RequestDescriptor) -> httpx.Response:
        """Send a descriptor, re-sending it while the API answers 429.

        Returns:
            The first non-429 response

        Raises:
            TransportError: If no response was received
            RateLimitExceededError: If a retry cap is configured and exhausted
        """
        client = await self._get_client()
        attempt = 0

        while True:
            try:
                response = await client.send(descriptor.to_httpx_request())
            except httpx.TransportError as e:
                logger.error(
                    LogMessages.transport_failed(descriptor.url, str(e) or type(e).__name__)
                )
                raise TransportError(
                    f"Could not reach Apple Music API: {e}", url=descriptor.url
                ) from e

            if response.status_code != RATE_LIMITED_STATUS:
                return response

            attempt += 1
            retry_after = self.rate_limiter.parse_retry_after(
                response.headers.get("Retry-After")
            )
            if not self.rate_limiter.should_retry(attempt):
                logger.error(LogMessages.rate_limit_exhausted(descriptor.url, attempt))
                raise RateLimitExceededError(
                    attempts=attempt,
                    url=descriptor.url,
                    retry_after=retry_after,
                    raw_payload=response.text or None,
                )

            await self.rate_limiter.wait(retry_after, url=descriptor.url, attempt=attempt)

    async def dispatch(
        self, descriptor: RequestDescriptor, response_model: type[ModelT]
    ) -> ModelT:
        """Send a request and decode the body into `response_model`.

        Args:
            descriptor: Authenticated request
            response_model: pydantic model to decode into (e.g. ResponseEnvelope[Song])

        Returns:
            Decoded model instance

        Raises:
            TransportError: No response received
            HttpStatusError: Non-2xx (and non-429) status
            DecodeError: Body missing or not matching response_model
        """
        response = await self._send(descriptor)

        if not response.is_success:
            logger.error(
                LogMessages.request_failed(descriptor.url, response.status_code, response.text)
            )
            raise HttpStatusError(
                response.status_code,
                url=descriptor.url,
                raw_payload=response.text or None,
            )

        try:
            return response_model.model_validate_json(response.content)
        except ValidationError as e:
            model_name = getattr(response_model, "__name__", str(response_model))
            logger.error(
                LogMessages.decode_failed(
                    descriptor.url,
                    model_name,
                    f"{e.error_count()} validation error(s): {e.errors()[0]['msg']}",
                    response.text,
                )
            )
            raise DecodeError(
                f"Could not decode {model_name} from response",
                url=descriptor.url,
                status_code=response.status_code,
                raw_payload=response.text,
            ) from e

    async def dispatch_without_body(self, descriptor: RequestDescriptor) -> bool:
        """Send an acknowledgement-only request (e.g. add tracks to a playlist).

        Returns:
            True on 200/202/204, False on any other status without a body

        Raises:
            TransportError: No response received
            HttpStatusError: Failure status WITH a body (the body is the diagnostics)
        """
        response = await self._send(descriptor)

        if response.status_code in ACKNOWLEDGED_STATUSES:
            return True

        logger.error(
            LogMessages.request_failed(descriptor.url, response.status_code, response.text)
        )
        if response.content:
            raise HttpStatusError(
                response.status_code,
                url=descriptor.url,
                raw_payload=response.text,
            )
        return False


__all__ = ["RequestDispatcher", "ACKNOWLEDGED_STATUSES"]
