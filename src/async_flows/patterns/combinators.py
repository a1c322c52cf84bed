"""Concurrent fan-out combinators: gather-all, settle-all and race.

Losers of a race (and siblings left behind by a failed gather) are not
cancelled by default. They are *discarded*: the task keeps running, its
eventual outcome is retrieved and dropped, and a strong reference is held
until it finishes so the event loop does not garbage-collect it mid-flight.
``drain_discarded`` waits for those tasks, which lets a caller finish only
after every simulated timer has fired.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import Any, TypeVar

from async_flows.observability.events import log_event
from async_flows.operations.models import SettledOutcome

T = TypeVar("T")

logger = logging.getLogger(__name__)

_discarded: set[asyncio.Future[Any]] = set()


def _consume_outcome(task: asyncio.Future[Any]) -> None:
    """Retrieve and drop the outcome of a discarded task."""
    _discarded.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    log_event(
        logger,
        "discarded_task_settled",
        logging.DEBUG,
        outcome="rejected" if exc is not None else "fulfilled",
        error=str(exc) if exc is not None else None,
    )


def discard(task: asyncio.Future[Any]) -> None:
    """Stop caring about ``task`` without cancelling it."""
    _discarded.add(task)
    task.add_done_callback(_consume_outcome)


def discarded_count() -> int:
    """Number of discarded tasks still running on the current event loop."""
    loop = asyncio.get_running_loop()
    return sum(1 for task in _discarded if task.get_loop() is loop and not task.done())


async def drain_discarded() -> int:
    """Wait until every discarded task on the current loop has settled.

    Returns:
        int: Number of tasks that were awaited.
    """
    loop = asyncio.get_running_loop()
    pending = [task for task in _discarded if task.get_loop() is loop]
    if pending:
        await asyncio.wait(pending)
    return len(pending)


async def gather_all(*aws: Awaitable[T]) -> list[T]:
    """Run awaitables concurrently and return their results in input order.

    Fails fast with the first exception. Operations still running at that
    point are discarded, not cancelled.

    Raises:
        Exception: The first failure among the awaitables.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except Exception:
        for task in tasks:
            if not task.done():
                discard(task)
        raise


async def settle_all(*aws: Awaitable[T]) -> list[SettledOutcome[T]]:
    """Run awaitables concurrently and collect one outcome for each.

    Never fails because of an individual operation. The returned list has
    the same length and order as the inputs, whatever the completion order.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    outcomes: list[SettledOutcome[T]] = []
    for result in results:
        if isinstance(result, BaseException):
            outcomes.append(SettledOutcome.rejected(result))
        else:
            outcomes.append(SettledOutcome.fulfilled(result))
    return outcomes


async def race(*aws: Awaitable[T], cancel_pending: bool = False) -> T:
    """Settle with whichever awaitable completes first.

    The winner's outcome is returned or raised as-is. When several complete
    in the same loop iteration the earliest in input order wins.

    Args:
        *aws: Awaitables to race.
        cancel_pending: Cancel the losers instead of discarding them.

    Raises:
        ValueError: If no awaitables are given.
    """
    if not aws:
        raise ValueError("race requires at least one awaitable")

    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        raise

    winner = next(task for task in tasks if task in done)
    for task in tasks:
        if task is winner:
            continue
        if cancel_pending and not task.done():
            task.cancel()
        discard(task)

    return winner.result()


__all__ = [
    "discard",
    "discarded_count",
    "drain_discarded",
    "gather_all",
    "race",
    "settle_all",
]
