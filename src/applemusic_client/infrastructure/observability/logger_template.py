"""Shared logger utilities.

USAGE:
    from applemusic_client.infrastructure.observability.logger_template import log_operation

    async with log_operation(logger, "fetch_all_pages", resource="LibrarySong") as summary:
        items = await ...
        summary["items"] = len(items)
"""

import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from applemusic_client.infrastructure.observability.logging import (
    correlation_id_var,
    get_correlation_id,
)


# Yo, this context manager times one logical operation and logs start/end. The yielded dict
# is merged into the completion log, so callers can report counts (items, pages) they only
# know at the end. On exception it logs {operation}.failed and RE-RAISES - never swallows.
# If no correlation ID is set yet, one is created so every page/retry log of this operation
# shares it, and it is dropped again on exit so the next operation gets a fresh one.
@asynccontextmanager
async def log_operation(
    logger: logging.Logger,
    operation: str,
    log_level: int = logging.DEBUG,
    **context: Any,
) -> AsyncIterator[dict[str, Any]]:
    """Context manager for logging operation start/end with automatic timing.

    Logs:
    - {operation}.started with context fields
    - {operation}.completed with context + summary + duration_ms
    - {operation}.failed with context + duration_ms + error details (if exception)

    Args:
        logger: Module logger
        operation: Operation name (e.g., "fetch_all_pages")
        log_level: Level for started/completed (failures always log at ERROR)
        **context: Additional fields to include in logs (e.g., resource="Song")

    Yields:
        Mutable summary dict merged into the completion log
    """
    token = None if get_correlation_id() else correlation_id_var.set(str(uuid.uuid4()))

    summary: dict[str, Any] = {}
    start = time.monotonic()
    logger.log(log_level, f"{operation}.started", extra=context)

    try:
        yield summary
    except Exception as e:
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.error(
            f"{operation}.failed",
            extra={
                **context,
                "duration_ms": duration_ms,
                "error": str(e),
                "error_type": type(e).__name__,
            },
        )
        raise
    else:
        duration_ms = int((time.monotonic() - start) * 1000)
        logger.log(
            log_level,
            f"{operation}.completed",
            extra={**context, **summary, "duration_ms": duration_ms},
        )
    finally:
        if token is not None:
            correlation_id_var.reset(token)


__all__ = ["log_operation"]
