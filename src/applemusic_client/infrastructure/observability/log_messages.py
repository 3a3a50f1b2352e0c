"""Structured log message templates for consistent, human-readable logging.

Hey future me - instead of cryptic one-liners like "request failed: 500", API problems
are logged as a small tree:

    🔴 Apple Music Request Failed
    ├─ Status: 500
    ├─ URL: https://api.music.apple.com/v1/me/library/songs
    ├─ Body: {"errors": [...]}
    └─ 💡 Check the Apple Music service status or retry later

Principles:
1. **Icon First** - visual marker for quick scanning (🔴 error, ⚠️ warning, ⏳ waiting)
2. **Title** - what happened
3. **Fields** - status, URL, raw payload
4. **Hint** - what to check

Usage:
    from applemusic_client.infrastructure.observability.log_messages import LogMessages

    logger.error(LogMessages.request_failed(url=url, status_code=500, payload=response.text))
"""

from dataclasses import dataclass, field

# Raw bodies can be huge (a full page of songs). Keep log lines readable.
MAX_PAYLOAD_CHARS = 2000


def truncate_payload(payload: str | None, limit: int = MAX_PAYLOAD_CHARS) -> str:
    """Shorten a raw response body for logging."""
    if not payload:
        return "<empty>"
    if len(payload) <= limit:
        return payload
    return f"{payload[:limit]}... ({len(payload) - limit} more chars)"


@dataclass
class LogTemplate:
    """A rendered log message: icon + title, tree-structured fields, optional hint.

    Field values are used verbatim (no str.format on them) - response bodies and
    artwork URLs contain braces.
    """

    icon: str
    title: str
    fields: dict[str, str] = field(default_factory=dict)
    hint: str | None = None

    def render(self) -> str:
        """Render the multi-line log message."""
        lines = [f"{self.icon} {self.title}"]

        field_items = list(self.fields.items())
        for i, (key, value) in enumerate(field_items):
            # Last line uses └─ instead of ├─
            prefix = "└─" if i == len(field_items) - 1 and not self.hint else "├─"
            lines.append(f"{prefix} {key}: {value}")

        if self.hint:
            lines.append(f"└─ 💡 {self.hint}")

        return "\n".join(lines)


class LogMessages:
    """Collection of standardized log message templates.

    Categories:
    - Rate limiting (429 waits)
    - Request failures (HTTP status, transport, decode)
    - Initialization (storefront discovery)
    """

    # === Rate Limiting ===

    @staticmethod
    def rate_limited(
        service: str,
        url: str,
        wait_seconds: float,
        attempt: int,
        server_provided: bool,
    ) -> str:
        """Format a 429 wait message.

        Args:
            service: Rate limiter name
            url: Throttled URL
            wait_seconds: How long we wait before re-sending
            attempt: Number of the 429 being handled
            server_provided: True if the delay came from Retry-After
        """
        source = "Retry-After header" if server_provided else "fallback delay"
        return LogTemplate(
            icon="⏳",
            title=f"{service} Rate Limited (429)",
            fields={
                "URL": url,
                "Attempt": str(attempt),
                "Waiting": f"{wait_seconds:.1f}s ({source})",
            },
        ).render()

    @staticmethod
    def rate_limit_exhausted(url: str, attempts: int) -> str:
        """Format a message for giving up after the configured retry cap."""
        return LogTemplate(
            icon="❌",
            title="Apple Music Rate Limit Retries Exhausted",
            fields={"URL": url, "Attempts": str(attempts)},
            hint="Raise rate_limit_max_retries or unset it to retry indefinitely",
        ).render()

    # === Request Failures ===

    @staticmethod
    def request_failed(
        url: str,
        status_code: int,
        payload: str | None = None,
        hint: str | None = None,
    ) -> str:
        """Format an unexpected HTTP status message.

        Args:
            url: Request URL
            status_code: HTTP status code
            payload: Raw response body
            hint: Custom troubleshooting hint
        """
        default_hint = "Check the Apple Music service status or retry later"
        if status_code in (401, 403):
            default_hint = "Developer token or Music-User-Token is invalid or expired"
        elif status_code == 404:
            default_hint = "Resource does not exist in this storefront or library"

        return LogTemplate(
            icon="🔴",
            title="Apple Music Request Failed",
            fields={
                "Status": str(status_code),
                "URL": url,
                "Body": truncate_payload(payload),
            },
            hint=hint or default_hint,
        ).render()

    @staticmethod
    def transport_failed(url: str, error: str) -> str:
        """Format a connectivity/timeout failure message."""
        return LogTemplate(
            icon="🔴",
            title="Apple Music Connection Failed",
            fields={"Target": url, "Reason": error},
            hint="Check network connectivity; the request was not retried",
        ).render()

    @staticmethod
    def decode_failed(url: str, expected: str, error: str, payload: str | None) -> str:
        """Format a response decoding failure message.

        Args:
            url: Request URL
            expected: Name of the model we tried to decode into
            error: Validation error summary
            payload: Raw response body
        """
        return LogTemplate(
            icon="🔴",
            title="Apple Music Response Decoding Failed",
            fields={
                "URL": url,
                "Expected": expected,
                "Reason": error,
                "Body": truncate_payload(payload),
            },
        ).render()

    # === Initialization ===

    @staticmethod
    def storefront_fallback(default_storefront: str, reason: str) -> str:
        """Format a storefront discovery fallback warning."""
        return LogTemplate(
            icon="⚠️",
            title="Storefront Discovery Failed",
            fields={"Reason": reason, "Using": default_storefront},
            hint="Pass storefront explicitly to skip discovery",
        ).render()


__all__ = ["LogMessages", "LogTemplate", "truncate_payload", "MAX_PAYLOAD_CHARS"]
