"""Async-Flows.

A small suite demonstrating asyncio control-flow idioms (chaining, fan-out,
settle-all, race, timeout, retry with backoff and a staged pipeline) over a
simulated I/O operation.
"""

from async_flows.operations import (
    OperationResult,
    RetryConfig,
    SettledOutcome,
    SettledStatus,
    SimulatedOperationError,
    simulate_io,
    sleep_ms,
)
from async_flows.patterns import (
    OperationTimeoutError,
    RetryPolicy,
    StagedPipeline,
    gather_all,
    race,
    retry,
    settle_all,
    with_timeout,
)

__version__ = "0.1.0"

__all__ = [
    "OperationResult",
    "OperationTimeoutError",
    "RetryConfig",
    "RetryPolicy",
    "SettledOutcome",
    "SettledStatus",
    "SimulatedOperationError",
    "StagedPipeline",
    "gather_all",
    "race",
    "retry",
    "settle_all",
    "simulate_io",
    "sleep_ms",
    "with_timeout",
]
