"""Domain models shared by the simulated operations and the control-flow patterns.

This module defines the core data structures produced and consumed by every
pattern in the package.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class SettledStatus(str, Enum):
    """Tag of a settled operation.

    Attributes:
        FULFILLED: The operation completed with a value.
        REJECTED: The operation raised an exception.
    """

    FULFILLED = "fulfilled"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Result of a single simulated operation.

    This dataclass is immutable (frozen=True) and uses slots for memory efficiency.

    Attributes:
        name: Identifier of the operation.
        duration_ms: Simulated latency in milliseconds.
        timestamp: ISO-8601 UTC time at which the operation completed.
    """

    name: str
    duration_ms: int
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        """Return the result as a camel-case mapping for trace output."""
        return {
            "name": self.name,
            "durationMs": self.duration_ms,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True, slots=True)
class SettledOutcome(Generic[T]):
    """Fulfilled-or-rejected outcome of one awaited operation.

    Attributes:
        status: Whether the operation fulfilled or rejected.
        value: The operation's value when fulfilled, None otherwise.
        reason: The raised exception when rejected, None otherwise.
    """

    status: SettledStatus
    value: T | None = None
    reason: BaseException | None = None

    @classmethod
    def fulfilled(cls, value: T) -> SettledOutcome[T]:
        return cls(status=SettledStatus.FULFILLED, value=value)

    @classmethod
    def rejected(cls, reason: BaseException) -> SettledOutcome[T]:
        return cls(status=SettledStatus.REJECTED, reason=reason)

    @property
    def is_fulfilled(self) -> bool:
        return self.status is SettledStatus.FULFILLED

    @property
    def is_rejected(self) -> bool:
        return self.status is SettledStatus.REJECTED


@dataclass(frozen=True, slots=True)
class RetryConfig:
    """Configuration for retry logic with linear backoff.

    Implements the formula: delay = base_delay_ms × attempt

    Attributes:
        max_attempts: Total number of attempts including the first (default: 3).
        base_delay_ms: Backoff unit in milliseconds (default: 200).
    """

    max_attempts: int = 3
    base_delay_ms: int = 200

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_ms < 0:
            raise ValueError("base_delay_ms must be non-negative")

    def delay_for(self, attempt: int) -> int:
        """Calculate the wait after a failed attempt.

        Args:
            attempt: The attempt number that just failed (1-indexed).

        Returns:
            Delay in milliseconds.
        """
        return self.base_delay_ms * attempt

    def total_backoff_ms(self) -> int:
        """Total wait incurred when every attempt fails."""
        return sum(self.delay_for(attempt) for attempt in range(1, self.max_attempts))
