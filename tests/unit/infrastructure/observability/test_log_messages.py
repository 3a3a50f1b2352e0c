"""Tests for structured log message templates."""

from applemusic_client.infrastructure.observability.log_messages import (
    MAX_PAYLOAD_CHARS,
    LogMessages,
    LogTemplate,
    truncate_payload,
)


class TestLogTemplate:
    """Test template rendering."""

    def test_render_with_hint(self) -> None:
        text = LogTemplate(
            icon="🔴", title="Failed", fields={"Status": "500", "URL": "u"}, hint="retry"
        ).render()

        assert text.splitlines() == [
            "🔴 Failed",
            "├─ Status: 500",
            "├─ URL: u",
            "└─ 💡 retry",
        ]

    def test_last_field_closes_tree_without_hint(self) -> None:
        text = LogTemplate(icon="⏳", title="Waiting", fields={"A": "1", "B": "2"}).render()
        assert text.splitlines()[-1] == "└─ B: 2"

    def test_braces_are_kept_verbatim(self) -> None:
        text = LogTemplate(icon="x", title="t", fields={"Body": '{"data": {}}'}).render()
        assert '{"data": {}}' in text


class TestTruncatePayload:
    """Test raw body shortening."""

    def test_empty(self) -> None:
        assert truncate_payload(None) == "<empty>"
        assert truncate_payload("") == "<empty>"

    def test_short_payload_unchanged(self) -> None:
        assert truncate_payload("abc") == "abc"

    def test_long_payload_truncated(self) -> None:
        text = truncate_payload("x" * (MAX_PAYLOAD_CHARS + 10))
        assert text.startswith("x" * MAX_PAYLOAD_CHARS)
        assert text.endswith("(10 more chars)")


class TestLogMessages:
    """Test individual message templates."""

    def test_rate_limited_names_delay_source(self) -> None:
        server = LogMessages.rate_limited("apple-music", "u", 2.0, 1, server_provided=True)
        fallback = LogMessages.rate_limited("apple-music", "u", 1.0, 3, server_provided=False)

        assert "2.0s (Retry-After header)" in server
        assert "1.0s (fallback delay)" in fallback
        assert "Attempt: 3" in fallback

    def test_request_failed_auth_hint(self) -> None:
        text = LogMessages.request_failed("u", 401, '{"errors": []}')
        assert "Status: 401" in text
        assert '{"errors": []}' in text
        assert "invalid or expired" in text

    def test_request_failed_custom_hint(self) -> None:
        assert "custom" in LogMessages.request_failed("u", 500, hint="custom")

    def test_decode_failed_includes_body(self) -> None:
        text = LogMessages.decode_failed("u", "ResponseEnvelope[Song]", "bad", "{nope")
        assert "Expected: ResponseEnvelope[Song]" in text
        assert "Body: {nope" in text

    def test_transport_and_storefront_messages(self) -> None:
        assert "Reason: refused" in LogMessages.transport_failed("u", "refused")
        assert "Using: gb" in LogMessages.storefront_fallback("gb", "HTTP 500")
        assert "Attempts: 4" in LogMessages.rate_limit_exhausted("u", 4)
