"""Non-blocking delay primitive."""

import asyncio


async def sleep_ms(ms: float) -> None:
    """Suspend the current task for ``ms`` milliseconds.

    Other scheduled tasks keep running while this one is suspended.

    Raises:
        ValueError: If ms is negative.
    """
    if ms < 0:
        raise ValueError("ms must be non-negative")
    await asyncio.sleep(ms / 1000.0)
