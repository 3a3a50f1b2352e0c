"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all client exceptions."""

    # Hey future me, we store message as an attribute so code can inspect it without parsing str(exception).
    # Don't raise this directly - always use a specific subclass so callers can catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ConfigurationError(DomainException):
    """Client misconfiguration.

    Raised when a required credential or region is missing: no developer
    token, a user-scoped call without a user token, a catalog call before the
    storefront is resolved, or any call before the client is initialized.

    This is a programmer error, NOT a runtime condition. It is never retried
    and never wrapped into ExternalServiceError, so callers can let it bubble
    up instead of treating it like a flaky network.

    Example:
        raise ConfigurationError("User token required for library access")
    """

    pass


class ExternalServiceError(DomainException):
    """A request to the Apple Music API failed.

    Single "request failed" category for everything that is not a
    configuration error. Subclasses tell transport, HTTP and decode failures
    apart; all of them carry whatever detail was available.

    Attributes:
        url: Request URL (if known)
        status_code: HTTP status (None for transport errors)
        raw_payload: Raw response body for diagnostics (None if no body)
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        raw_payload: str | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.raw_payload = raw_payload


class TransportError(ExternalServiceError):
    """No response was received (connect failure, timeout, protocol error).

    The underlying httpx exception is chained as __cause__.
    """

    pass


class HttpStatusError(ExternalServiceError):
    """The API answered with a non-2xx status other than 429."""

    def __init__(
        self,
        status_code: int,
        url: str | None = None,
        raw_payload: str | None = None,
        message: str | None = None,
    ) -> None:
        super().__init__(
            message or f"Apple Music API returned HTTP {status_code}",
            url=url,
            status_code=status_code,
            raw_payload=raw_payload,
        )


class RateLimitExceededError(HttpStatusError):
    """Still rate limited after the configured number of retries.

    Only raised when a retry cap is configured - the default policy retries
    429 responses indefinitely.
    """

    def __init__(
        self,
        attempts: int,
        url: str | None = None,
        retry_after: float | None = None,
        raw_payload: str | None = None,
    ) -> None:
        super().__init__(
            429,
            url=url,
            raw_payload=raw_payload,
            message=f"Apple Music API rate limited (429) after {attempts} attempts",
        )
        self.attempts = attempts
        self.retry_after = retry_after


class DecodeError(ExternalServiceError):
    """A 2xx response body did not match the expected resource shape.

    The offending body is kept in raw_payload.
    """

    pass


__all__ = [
    "DomainException",
    "ConfigurationError",
    "ExternalServiceError",
    "TransportError",
    "HttpStatusError",
    "RateLimitExceededError",
    "DecodeError",
]
