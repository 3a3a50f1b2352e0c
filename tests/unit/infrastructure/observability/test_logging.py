"""Tests for structured logging."""

import json
import logging
from collections.abc import Iterator

import pytest

from applemusic_client.config.settings import LoggingSettings
from applemusic_client.domain.exceptions import HttpStatusError, TransportError
from applemusic_client.infrastructure.observability.logging import (
    CompactExceptionFormatter,
    CorrelationIdFilter,
    CustomJsonFormatter,
    configure_logging,
    configure_logging_from_settings,
    get_correlation_id,
    set_correlation_id,
)


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    """configure_logging() replaces root handlers - put the originals back."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    root_logger.handlers = handlers
    root_logger.setLevel(level)


def make_record(message: str = "hello", exc_info: object = None) -> logging.LogRecord:
    return logging.LogRecord(
        name="applemusic_client.test",
        level=logging.ERROR,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=exc_info,  # type: ignore[arg-type]
    )


class TestCorrelationId:
    """Test correlation ID functionality."""

    def test_set_and_get_correlation_id(self):
        """Test setting and getting correlation ID."""
        test_id = "test-123-abc"
        result = set_correlation_id(test_id)
        assert result == test_id
        assert get_correlation_id() == test_id

    def test_set_correlation_id_generates_uuid_when_none(self):
        """Test that setting None generates a UUID."""
        result = set_correlation_id(None)
        assert result is not None
        assert len(result) > 0
        assert get_correlation_id() == result

    def test_filter_adds_correlation_id(self):
        """Records get the current correlation ID attached."""
        set_correlation_id("cid-42")
        record = make_record()

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "cid-42"  # type: ignore[attr-defined]


class TestLoggingConfiguration:
    """Test logging configuration."""

    def test_configure_logging_debug_level(self):
        """Test configuring logging with DEBUG level."""
        configure_logging(log_level="DEBUG", json_format=False, app_name="test-app")
        logger = logging.getLogger("test")
        assert logger.getEffectiveLevel() <= logging.DEBUG

    def test_configure_logging_info_level(self):
        """Test configuring logging with INFO level."""
        configure_logging(log_level="INFO", json_format=False, app_name="test-app")
        logger = logging.getLogger("test")
        assert logger.getEffectiveLevel() == logging.INFO

    def test_configure_logging_json_format(self):
        """Test configuring logging with JSON format."""
        configure_logging(log_level="INFO", json_format=True, app_name="test-app")
        root_logger = logging.getLogger()
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, CustomJsonFormatter)

    def test_configure_logging_text_format(self):
        """Test configuring logging with text format."""
        configure_logging(log_level="INFO", json_format=False, app_name="test-app")
        root_logger = logging.getLogger()
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, CompactExceptionFormatter)

    def test_http_libraries_are_quieted(self):
        """httpx request logs are noise at INFO."""
        configure_logging(log_level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING


class TestFormatters:
    """Test formatter output."""

    def test_json_formatter_includes_correlation_id(self):
        set_correlation_id("cid-json")
        record = make_record("page fetched")
        CorrelationIdFilter().filter(record)

        output = json.loads(CustomJsonFormatter("%(message)s").format(record))

        assert output["message"] == "page fetched"
        assert output["level"] == "ERROR"
        assert output["correlation_id"] == "cid-json"

    def test_compact_formatter_shows_chain_root_first(self):
        try:
            try:
                raise ConnectionError("refused")
            except ConnectionError as e:
                raise TransportError("Could not reach Apple Music API") from e
        except TransportError as error:
            text = CompactExceptionFormatter().formatException(
                (type(error), error, error.__traceback__)
            )

        lines = [line for line in text.splitlines() if line.startswith("╰─►")]
        assert lines == [
            "╰─► ConnectionError: refused",
            "╰─► TransportError: Could not reach Apple Music API",
        ]

    def test_compact_formatter_shows_api_error_details(self):
        """Status code and URL of API errors are shown inline."""
        error = HttpStatusError(503, url="https://api.music.apple.com/v1/me/storefront")

        text = CompactExceptionFormatter().formatException((type(error), error, None))

        assert text == (
            "╰─► HttpStatusError: Apple Music API returned HTTP 503 "
            "[503 https://api.music.apple.com/v1/me/storefront]"
        )

    def test_json_formatter_adds_api_error_fields(self):
        error = HttpStatusError(404, url="https://api/x")
        record = make_record("lookup failed", exc_info=(type(error), error, None))

        output = json.loads(CustomJsonFormatter("%(message)s").format(record))

        assert output["status_code"] == 404
        assert output["url"] == "https://api/x"
        assert output["error_type"] == "HttpStatusError"


class TestSettingsDrivenConfiguration:
    """Test configuration from LoggingSettings."""

    def test_configure_from_settings(self):
        configure_logging_from_settings(LoggingSettings(level="WARNING", json_format=True))
        root_logger = logging.getLogger()
        assert root_logger.level == logging.WARNING
        assert isinstance(root_logger.handlers[0].formatter, CustomJsonFormatter)

    def test_unknown_level_falls_back_to_info(self):
        configure_logging(log_level="chatty")
        assert logging.getLogger().level == logging.INFO
