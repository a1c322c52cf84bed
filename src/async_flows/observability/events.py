"""Structured JSON event logging shared by the patterns and the scenario runner."""

import json
import logging
from datetime import UTC, datetime
from typing import Any


def log_event(
    logger: logging.Logger,
    event: str,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """Log ``event`` with ``fields`` as a single JSON document.

    The payload is only serialized when the logger is enabled for ``level``.
    Values that are not JSON-serializable are rendered with ``str``.

    Args:
        logger: Logger to emit on.
        event: Event name, stored under the "event" key.
        level: Logging level. Defaults to INFO.
        **fields: Extra key/value pairs for the payload.
    """
    if not logger.isEnabledFor(level):
        return

    log_entry = {
        "event": event,
        **fields,
        "timestamp": datetime.now(UTC).isoformat(),
    }
    logger.log(level, json.dumps(log_entry, default=str))


__all__ = ["log_event"]
