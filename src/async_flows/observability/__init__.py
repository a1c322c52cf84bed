"""Observability module for structured event logging."""

from async_flows.observability.events import log_event

__all__ = [
    "log_event",
]
