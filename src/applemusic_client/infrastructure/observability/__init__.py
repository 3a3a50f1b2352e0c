"""Observability infrastructure for structured logging."""

from applemusic_client.infrastructure.observability.log_messages import (
    LogMessages,
    LogTemplate,
)
from applemusic_client.infrastructure.observability.logger_template import (
    log_operation,
)
from applemusic_client.infrastructure.observability.logging import (
    configure_logging,
    configure_logging_from_settings,
    get_correlation_id,
    set_correlation_id,
)

__all__ = [
    "LogMessages",
    "LogTemplate",
    "configure_logging",
    "configure_logging_from_settings",
    "get_correlation_id",
    "log_operation",
    "set_correlation_id",
]
