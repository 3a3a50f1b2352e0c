"""
Rate limit (429) handling for Apple Music API calls.

Hey future me – this is NOT a token bucket. Apple doesn't publish a request
budget, so we don't throttle up front. We only react to 429 responses:

- Server sent Retry-After? Wait EXACTLY that long.
- No Retry-After (Apple usually doesn't send one)? Wait the fallback delay (1s).
- Then re-send the same request.

DEFAULT IS UNBOUNDED: we keep retrying as long as the API answers 429.
max_retries / max_delay_seconds exist for callers who want a hard stop,
but they are opt-in. Don't change the defaults silently!

The limiter holds no mutable state - one instance can be shared by any number
of concurrent requests. The attempt counter lives in the dispatcher loop.

USAGE:
    limiter = RateLimiter(RateLimiterConfig(fallback_delay_seconds=1.0))

    if limiter.should_retry(attempt):
        await limiter.wait(limiter.parse_retry_after(response.headers.get("Retry-After")))
"""

import asyncio
import logging
import math
from dataclasses import dataclass, field

from applemusic_client.infrastructure.observability.log_messages import LogMessages

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimiterConfig:
    """Configuration for 429 handling.

    Attributes:
        fallback_delay_seconds: Wait when the server sends no usable Retry-After
        max_retries: Give up after this many 429s (None = retry forever)
        max_delay_seconds: Cap for a single wait (None = honour Retry-After as-is)
    """

    fallback_delay_seconds: float = 1.0
    max_retries: int | None = None
    max_delay_seconds: float | None = None

    def __post_init__(self) -> None:
        if self.fallback_delay_seconds < 0:
            raise ValueError("fallback_delay_seconds must not be negative")
        if self.max_retries is not None and self.max_retries < 0:
            raise ValueError("max_retries must not be negative")
        if self.max_delay_seconds is not None and self.max_delay_seconds < 0:
            raise ValueError("max_delay_seconds must not be negative")


@dataclass(frozen=True)
class RateLimiter:
    """Computes and performs the wait before re-sending a throttled request."""

    config: RateLimiterConfig = field(default_factory=RateLimiterConfig)
    name: str = "apple-music"

    @staticmethod
    def parse_retry_after(header_value: str | None) -> float | None:
        """Parse a Retry-After header given in seconds.

        Returns None for a missing, non-numeric (e.g. HTTP-date), non-finite or
        negative value, so the caller falls back to the default delay.
        """
        if header_value is None:
            return None
        try:
            seconds = float(header_value.strip())
        except ValueError:
            logger.debug(
                f"RateLimiter: ignoring unparseable Retry-After header {header_value!r}"
            )
            return None
        if not math.isfinite(seconds) or seconds < 0:
            return None
        return seconds

    def should_retry(self, attempt: int) -> bool:
        """Whether the `attempt`-th 429 (1-based) may be retried."""
        if self.config.max_retries is None:
            return True
        return attempt <= self.config.max_retries

    def delay_for(self, retry_after: float | None) -> float:
        """Seconds to wait before the next attempt."""
        wait_time = (
            retry_after if retry_after is not None else self.config.fallback_delay_seconds
        )
        if self.config.max_delay_seconds is not None:
            wait_time = min(wait_time, self.config.max_delay_seconds)
        return wait_time

    async def wait(
        self, retry_after: float | None, url: str | None = None, attempt: int = 1
    ) -> float:
        """Sleep (without blocking the event loop) before a retry.

        Args:
            retry_after: Parsed Retry-After value, None if absent
            url: Request URL (for the log line only)
            attempt: Number of the 429 being handled (1-based)

        Returns:
            The actual wait time used
        """
        wait_time = self.delay_for(retry_after)
        logger.warning(
            LogMessages.rate_limited(
                service=self.name,
                url=url or "<unknown>",
                wait_seconds=wait_time,
                attempt=attempt,
                server_provided=retry_after is not None,
            )
        )
        await asyncio.sleep(wait_time)
        return wait_time


__all__ = ["RateLimiter", "RateLimiterConfig"]
