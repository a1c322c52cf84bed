"""Retry pattern with linear backoff for unreliable operations."""

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import Any, Generic, TypeVar

from async_flows.observability.events import log_event
from async_flows.operations.delay import sleep_ms
from async_flows.operations.models import RetryConfig

T = TypeVar("T")

logger = logging.getLogger(__name__)

RetryHook = Callable[[int, Exception, int], None]


@dataclass(frozen=True, slots=True)
class RetryExecutionResult(Generic[T]):
    """Result of a retry execution with per-call attempt count and backoff."""

    value: T
    attempt_count: int
    total_delay_ms: int


def _accepts_attempt(func: Callable[..., Any]) -> bool:
    """Check whether ``func`` can be called with the attempt number."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return False
    positional = (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    )
    for param in signature.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return True
        # Defaulted parameters stay with their defaults
        if param.kind in positional and param.default is inspect.Parameter.empty:
            return True
    return False


class RetryPolicy:
    """
    Retry policy with linear backoff.

    Attempts are numbered from 1. After a failed attempt ``n`` the policy
    waits ``base_delay_ms × n`` before trying again; there is no jitter and
    no cap. No wait follows the last attempt. When every attempt fails the
    last error is re-raised unchanged.

    Args:
        config: RetryConfig instance with retry parameters.
        max_attempts: Overrides ``config.max_attempts``.
        base_delay_ms: Overrides ``config.base_delay_ms``.
        on_retry: Called as ``on_retry(attempt, error, wait_ms)`` before each
            backoff wait.

    Example:
        ```python
        policy = RetryPolicy(max_attempts=4, base_delay_ms=150)

        async def fetch_with_retry():
            return await policy.execute(lambda: simulate_io("unstable", 150, 0.65))
        ```
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        *,
        max_attempts: int | None = None,
        base_delay_ms: int | None = None,
        on_retry: RetryHook | None = None,
    ) -> None:
        effective_config = config or RetryConfig()
        if max_attempts is not None:
            effective_config = replace(effective_config, max_attempts=max_attempts)
        if base_delay_ms is not None:
            effective_config = replace(effective_config, base_delay_ms=base_delay_ms)

        self._config = effective_config
        self._on_retry = on_retry

    @property
    def config(self) -> RetryConfig:
        return self._config

    @property
    def max_attempts(self) -> int:
        """Total number of attempts including the first."""
        return self._config.max_attempts

    async def execute(self, func: Callable[..., Awaitable[T]]) -> T:
        """Execute an operation factory with retry logic.

        Args:
            func: Factory returning the awaitable for one attempt. It may take
                no arguments or the attempt number.

        Returns:
            T: Result of the first successful attempt.

        Raises:
            Exception: The last attempt's error when every attempt fails.
        """
        result = await self.execute_with_metrics(func)
        return result.value

    async def execute_with_metrics(
        self,
        func: Callable[..., Awaitable[T]],
    ) -> RetryExecutionResult[T]:
        """Execute an operation factory and report attempts and backoff.

        Args:
            func: Factory returning the awaitable for one attempt. It may take
                no arguments or the attempt number.

        Returns:
            RetryExecutionResult[T]: Result value, attempt count and total wait.
        """
        pass_attempt = _accepts_attempt(func)
        max_attempts = self._config.max_attempts
        total_delay_ms = 0

        for attempt in range(1, max_attempts + 1):
            try:
                value = await (func(attempt) if pass_attempt else func())
            except Exception as exc:
                if attempt == max_attempts:
                    log_event(
                        logger,
                        "retry_exhausted",
                        logging.WARNING,
                        attempts=max_attempts,
                        total_delay_ms=total_delay_ms,
                        error=str(exc),
                    )
                    raise

                wait_ms = self._config.delay_for(attempt)
                log_event(
                    logger,
                    "retry_attempt_failed",
                    logging.WARNING,
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error=str(exc),
                    wait_ms=wait_ms,
                )
                if self._on_retry is not None:
                    self._on_retry(attempt, exc, wait_ms)

                total_delay_ms += wait_ms
                await sleep_ms(wait_ms)
                continue

            return RetryExecutionResult(
                value=value,
                attempt_count=attempt,
                total_delay_ms=total_delay_ms,
            )

        # Should not reach here, max_attempts is at least 1
        raise RuntimeError(f"All {max_attempts} attempts exhausted without an outcome")


async def retry(
    func: Callable[..., Awaitable[T]],
    *,
    max_attempts: int = 3,
    base_delay_ms: int = 200,
    on_retry: RetryHook | None = None,
) -> T:
    """Run ``func`` under a one-off RetryPolicy."""
    policy = RetryPolicy(
        RetryConfig(max_attempts=max_attempts, base_delay_ms=base_delay_ms),
        on_retry=on_retry,
    )
    return await policy.execute(func)


__all__ = [
    "RetryConfig",
    "RetryExecutionResult",
    "RetryHook",
    "RetryPolicy",
    "retry",
]
