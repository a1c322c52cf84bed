"""Simulated operations and the data they produce."""

from async_flows.operations.delay import sleep_ms
from async_flows.operations.models import (
    OperationResult,
    RetryConfig,
    SettledOutcome,
    SettledStatus,
)
from async_flows.operations.simulated import SimulatedOperationError, simulate_io

__all__ = [
    "OperationResult",
    "RetryConfig",
    "SettledOutcome",
    "SettledStatus",
    "SimulatedOperationError",
    "simulate_io",
    "sleep_ms",
]
