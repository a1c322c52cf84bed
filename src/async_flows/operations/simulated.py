"""Simulated I/O operation that completes after a delay and may fail at random."""

import random
from datetime import UTC, datetime

from async_flows.operations import delay
from async_flows.operations.models import OperationResult


class SimulatedOperationError(Exception):
    """Raised when a simulated operation fails."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


def _completion_timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def simulate_io(
    name: str,
    duration_ms: int,
    fail_rate: float = 0.0,
    *,
    rng: random.Random | None = None,
) -> OperationResult:
    """Wait ``duration_ms`` then succeed, or fail with probability ``fail_rate``.

    The failure draw happens after the delay, so a failing operation still
    takes its full duration.

    Args:
        name: Identifier reported in the result or the error message.
        duration_ms: Simulated latency in milliseconds.
        fail_rate: Probability of failure in [0, 1]. Defaults to 0.
        rng: Optional random generator for reproducible draws.

    Returns:
        OperationResult: The completed operation.

    Raises:
        SimulatedOperationError: If the failure draw hits.
        ValueError: If duration_ms is negative or fail_rate is outside [0, 1].
    """
    if duration_ms < 0:
        raise ValueError("duration_ms must be non-negative")
    if not 0.0 <= fail_rate <= 1.0:
        raise ValueError("fail_rate must be between 0 and 1")

    await delay.sleep_ms(duration_ms)

    draw = (rng or random).random()
    if draw < fail_rate:
        raise SimulatedOperationError(f"[{name}] failed (simulated)", operation=name)

    return OperationResult(
        name=name,
        duration_ms=duration_ms,
        timestamp=_completion_timestamp(),
    )


__all__ = [
    "SimulatedOperationError",
    "simulate_io",
]
