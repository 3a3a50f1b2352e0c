"""Logging setup for applications embedding the client.

The library itself only logs through module loggers (logging.getLogger(__name__)).
configure_logging() is for the app: one stdout handler, either human-readable
lines or JSON (python-json-logger), both tagged with the current correlation ID.

    configure_logging("DEBUG")                  # local debugging
    configure_logging("INFO", json_format=True) # log shipping
    configure_logging_from_settings(get_settings().logging)
"""

import contextvars
import logging
import sys
import traceback
import uuid
from collections.abc import Iterator
from pathlib import PurePath
from typing import TYPE_CHECKING, Any

from pythonjsonlogger import jsonlogger

from applemusic_client.domain.exceptions import ExternalServiceError

if TYPE_CHECKING:
    from applemusic_client.config.settings import LoggingSettings

PACKAGE_NAME = "applemusic_client"

TEXT_FORMAT = "%(asctime)s │ %(levelname)-7s │ %(correlation_id)s │ %(name)s │ %(message)s"
JSON_FORMAT = "%(timestamp)s %(level)s %(name)s %(message)s"

# Hey future me - one ID per logical call (all pages + all 429 retries share it).
# Each asyncio task sees its own value, so concurrent calls never mix.
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)


def get_correlation_id() -> str:
    """Current correlation ID ("" outside any tracked operation)."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Bind a correlation ID to the current context, generating one if omitted."""
    value = correlation_id if correlation_id is not None else str(uuid.uuid4())
    correlation_id_var.set(value)
    return value


class CorrelationIdFilter(logging.Filter):
    """Stamps `correlation_id` on every record passing the handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"
        return True


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield the chain root cause first (cycles are cut)."""
    seen: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and current not in seen:
        seen.append(current)
        current = current.__cause__ or current.__context__
    yield from reversed(seen)


def _describe(exc: BaseException) -> str:
    line = f"{type(exc).__name__}: {exc}"
    if isinstance(exc, ExternalServiceError):
        details = [str(exc.status_code)] if exc.status_code is not None else []
        if exc.url:
            details.append(exc.url)
        if details:
            line = f"{line} [{' '.join(details)}]"
    return line


def _own_frames(exc: BaseException) -> Iterator[traceback.FrameSummary]:
    for frame in traceback.extract_tb(exc.__traceback__):
        parts = PurePath(frame.filename).parts
        if PACKAGE_NAME in parts and "site-packages" not in parts:
            yield frame


class CompactExceptionFormatter(logging.Formatter):
    """Prints exception chains as one line per exception, root cause first.

    Only frames from this package are shown, and API errors carry their status
    and URL inline:

        ╰─► ConnectError: All connection attempts failed
        ╰─► TransportError: Could not reach Apple Music API [https://api.music.apple.com/v1/...]
            dispatcher.py:107 in _send
    """

    def formatException(self, ei: Any) -> str:  # noqa: N802
        exc = ei[1]
        if exc is None:
            return ""

        lines: list[str] = []
        for link in _exception_chain(exc):
            lines.append(f"╰─► {_describe(link)}")
            lines.extend(
                f"    {PurePath(frame.filename).name}:{frame.lineno} in {frame.name}"
                for frame in _own_frames(link)
            )
        return "\n".join(lines)


class CustomJsonFormatter(jsonlogger.JsonFormatter):  # type: ignore[name-defined,misc]
    """JSON lines with level, location, correlation ID and API error details."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.update(
            timestamp=self.formatTime(record, self.datefmt),
            level=record.levelname,
            logger=record.name,
            location=f"{record.module}:{record.funcName}:{record.lineno}",
        )

        correlation_id = getattr(record, "correlation_id", "")
        if correlation_id and correlation_id != "-":
            log_record["correlation_id"] = correlation_id

        if record.exc_info:
            error = record.exc_info[1]
            if isinstance(error, ExternalServiceError):
                log_record["error_type"] = type(error).__name__
                log_record["status_code"] = error.status_code
                log_record["url"] = error.url
            log_record["exc_info"] = self.formatException(record.exc_info)


def configure_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    app_name: str = PACKAGE_NAME,
) -> None:
    """Replace the root handlers with one stdout handler.

    Args:
        log_level: Level name (unknown names fall back to INFO)
        json_format: Emit JSON lines instead of text
        app_name: Reported in the startup log line
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(CorrelationIdFilter())
    handler.setFormatter(
        CustomJsonFormatter(JSON_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S")
        if json_format
        else CompactExceptionFormatter(TEXT_FORMAT, datefmt="%H:%M:%S")
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)

    # httpx logs one INFO line per request, the retry loop already reports what matters
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured for %s (level=%s, json=%s)",
        app_name,
        logging.getLevelName(level),
        json_format,
    )


def configure_logging_from_settings(settings: "LoggingSettings") -> None:
    """configure_logging() driven by LOG_LEVEL / LOG_JSON_FORMAT."""
    configure_logging(log_level=settings.level, json_format=settings.json_format)


__all__ = [
    "CompactExceptionFormatter",
    "CorrelationIdFilter",
    "CustomJsonFormatter",
    "configure_logging",
    "configure_logging_from_settings",
    "get_correlation_id",
    "set_correlation_id",
]
