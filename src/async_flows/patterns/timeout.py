"""Timeout wrapper that races an operation against a timer."""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from async_flows.observability.events import log_event
from async_flows.operations.simulated import SimulatedOperationError
from async_flows.patterns.combinators import discard

T = TypeVar("T")

logger = logging.getLogger(__name__)


class OperationTimeoutError(SimulatedOperationError):
    """Raised when an operation does not settle within its timeout."""

    def __init__(self, timeout_ms: float) -> None:
        shown = int(timeout_ms) if float(timeout_ms).is_integer() else timeout_ms
        super().__init__(f"timeout after {shown}ms")
        self.timeout_ms = timeout_ms


async def with_timeout(
    aw: Awaitable[T],
    timeout_ms: float,
    *,
    cancel_on_timeout: bool = False,
) -> T:
    """Return the outcome of ``aw`` unless ``timeout_ms`` elapses first.

    On timeout the operation is discarded: it runs to completion in the
    background and its outcome is ignored. Pass ``cancel_on_timeout=True``
    to cancel it instead.

    Args:
        aw: The operation to wait for.
        timeout_ms: Time budget in milliseconds.
        cancel_on_timeout: Cancel the operation when the timer wins.

    Returns:
        T: The operation's result if it settles in time.

    Raises:
        OperationTimeoutError: If the timer wins the race.
        ValueError: If timeout_ms is negative.
    """
    if timeout_ms < 0:
        raise ValueError("timeout_ms must be non-negative")

    task = asyncio.ensure_future(aw)
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000.0)
    except asyncio.CancelledError:
        task.cancel()
        raise

    if task in done:
        return task.result()

    if cancel_on_timeout:
        task.cancel()
    discard(task)
    log_event(
        logger,
        "operation_timeout",
        logging.DEBUG,
        timeout_ms=timeout_ms,
        cancelled=cancel_on_timeout,
    )
    raise OperationTimeoutError(timeout_ms)


__all__ = [
    "OperationTimeoutError",
    "with_timeout",
]
