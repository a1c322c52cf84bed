"""Demonstration scenarios, one per control-flow pattern.

Every scenario catches its own failures and prints a human-readable trace to
stdout. Durations and failure rates come from ``ScenarioSettings`` so tests
can run the same flows faster and with a seeded random generator.
"""

from __future__ import annotations

import random
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import Any

from async_flows.operations.models import OperationResult, RetryConfig, SettledOutcome
from async_flows.operations.simulated import simulate_io
from async_flows.patterns.combinators import gather_all, race, settle_all
from async_flows.patterns.pipeline import StagedPipeline
from async_flows.patterns.retry import RetryPolicy
from async_flows.patterns.timeout import with_timeout

CHAIN_RESULT = "final result from promise chain"
CHAIN_FALLBACK = "chain recovered with fallback"
SEQUENTIAL_RESULT = "final result from async/await"
SEQUENTIAL_FALLBACK = "async/await fallback result"


@dataclass(frozen=True, slots=True)
class OperationSpec:
    """Parameters of one simulated operation."""

    name: str
    duration_ms: int
    fail_rate: float = 0.0

    def start(self, rng: random.Random | None = None) -> Awaitable[OperationResult]:
        return simulate_io(self.name, self.duration_ms, self.fail_rate, rng=rng)

    def scaled(self, factor: float) -> OperationSpec:
        return replace(self, duration_ms=round(self.duration_ms * factor))


@dataclass(frozen=True, slots=True)
class ScenarioSettings:
    """Durations, failure rates and policies used by the scenarios."""

    chain: tuple[OperationSpec, ...] = (
        OperationSpec("step-1", 300),
        OperationSpec("step-2", 250),
    )
    sequential: tuple[OperationSpec, ...] = (
        OperationSpec("await-1", 200),
        OperationSpec("await-2", 200),
    )
    parallel: tuple[OperationSpec, ...] = (
        OperationSpec("A", 400),
        OperationSpec("B", 300),
        OperationSpec("C", 200),
    )
    settle: tuple[OperationSpec, ...] = (
        OperationSpec("S1", 200, 0.0),
        OperationSpec("S2", 250, 0.7),
        OperationSpec("S3", 150, 0.2),
    )
    race: tuple[OperationSpec, ...] = (
        OperationSpec("slow", 400),
        OperationSpec("fast", 120),
    )
    timeout_operation: OperationSpec = OperationSpec("operation", 500)
    timeout_ms: int = 250
    retry_operation: OperationSpec = OperationSpec("unstable", 150, 0.65)
    retry: RetryConfig = RetryConfig(max_attempts=4, base_delay_ms=150)
    pipeline_fetch: OperationSpec = OperationSpec("fetch-data", 200)
    pipeline_process: tuple[OperationSpec, ...] = (
        OperationSpec("process-part-1", 250),
        OperationSpec("process-part-2", 300),
    )
    pipeline_save: OperationSpec = OperationSpec("save", 150)

    def __post_init__(self) -> None:
        if len(self.chain) != 2 or len(self.sequential) != 2:
            raise ValueError("chain and sequential scenarios take exactly two steps")
        if not self.race:
            raise ValueError("race scenario needs at least one operation")
        if self.timeout_ms < 0:
            raise ValueError("timeout_ms must be non-negative")

    def scaled(self, factor: float) -> ScenarioSettings:
        """Return a copy with every duration, timeout and backoff multiplied by ``factor``."""

        def scale_all(specs: tuple[OperationSpec, ...]) -> tuple[OperationSpec, ...]:
            return tuple(spec.scaled(factor) for spec in specs)

        return replace(
            self,
            chain=scale_all(self.chain),
            sequential=scale_all(self.sequential),
            parallel=scale_all(self.parallel),
            settle=scale_all(self.settle),
            race=scale_all(self.race),
            timeout_operation=self.timeout_operation.scaled(factor),
            timeout_ms=round(self.timeout_ms * factor),
            retry_operation=self.retry_operation.scaled(factor),
            retry=replace(self.retry, base_delay_ms=round(self.retry.base_delay_ms * factor)),
            pipeline_fetch=self.pipeline_fetch.scaled(factor),
            pipeline_process=scale_all(self.pipeline_process),
            pipeline_save=self.pipeline_save.scaled(factor),
        )


DEFAULT_SETTINGS = ScenarioSettings()

ScenarioFunc = Callable[[ScenarioSettings, random.Random | None], Awaitable[Any]]


async def demo_chain(
    settings: ScenarioSettings = DEFAULT_SETTINGS,
    rng: random.Random | None = None,
) -> str:
    """Two dependent steps, each with its own success handler.

    Any failure is replaced with a fallback value; the finalization line is
    always printed.
    """
    first, second = settings.chain
    try:
        result1 = await first.start(rng)
        print("success:", result1.to_dict())
        result2 = await second.start(rng)
        print("success:", result2.to_dict())
    except Exception as exc:
        print("error in chain:", exc)
        return CHAIN_FALLBACK
    else:
        return CHAIN_RESULT
    finally:
        print("finally: always executed")


async def demo_sequential(
    settings: ScenarioSettings = DEFAULT_SETTINGS,
    rng: random.Random | None = None,
) -> str:
    """Same dependency structure as the chain, under a single handler."""
    first, second = settings.sequential
    try:
        result1 = await first.start(rng)
        print("success:", result1.to_dict())

        result2 = await second.start(rng)
        print("success:", result2.to_dict())

        return SEQUENTIAL_RESULT
    except Exception as exc:
        print("error in async/await:", exc)
        return SEQUENTIAL_FALLBACK


async def demo_parallel_all(
    settings: ScenarioSettings = DEFAULT_SETTINGS,
    rng: random.Random | None = None,
) -> list[OperationResult] | None:
    """Launch independent operations together and wait for every one."""
    start = time.perf_counter()
    try:
        results = await gather_all(*(spec.start(rng) for spec in settings.parallel))
    except Exception as exc:
        print("parallel failed:", exc)
        return None

    print("results:", [result.name for result in results])
    print(f"elapsed(ms): {(time.perf_counter() - start) * 1000:.0f}")
    return results


async def demo_settle_all(
    settings: ScenarioSettings = DEFAULT_SETTINGS,
    rng: random.Random | None = None,
) -> list[SettledOutcome[OperationResult]]:
    """Collect an outcome for every operation without failing fast."""
    outcomes = await settle_all(*(spec.start(rng) for spec in settings.settle))

    for outcome in outcomes:
        if outcome.is_fulfilled:
            print("fulfilled:", getattr(outcome.value, "name", outcome.value))
        else:
            print("rejected:", outcome.reason)
    return outcomes


async def demo_race(
    settings: ScenarioSettings = DEFAULT_SETTINGS,
    rng: random.Random | None = None,
) -> OperationResult | None:
    """Proceed with whichever operation settles first."""
    try:
        winner = await race(*(spec.start(rng) for spec in settings.race))
    except Exception as exc:
        print("race lost to a failure:", exc)
        return None

    print("winner:", winner.name)
    return winner


async def demo_timeout(
    settings: ScenarioSettings = DEFAULT_SETTINGS,
    rng: random.Random | None = None,
) -> OperationResult | None:
    """Race one operation against a timer."""
    try:
        result = await with_timeout(settings.timeout_operation.start(rng), settings.timeout_ms)
    except Exception as exc:
        print("timeout/error:", exc)
        return None

    print("success:", result.to_dict())
    return result


async def demo_retry(
    settings: ScenarioSettings = DEFAULT_SETTINGS,
    rng: random.Random | None = None,
) -> OperationResult | None:
    """Drive an unreliable operation through the retry policy."""

    def report(attempt: int, error: Exception, wait_ms: int) -> None:
        print(f"attempt {attempt} failed: {error} | waiting {wait_ms}ms")

    policy = RetryPolicy(settings.retry, on_retry=report)
    try:
        result = await policy.execute(lambda: settings.retry_operation.start(rng))
    except Exception as exc:
        print("failed after retries:", exc)
        return None

    print("success after retry:", result.to_dict())
    return result


async def demo_pipeline(
    settings: ScenarioSettings = DEFAULT_SETTINGS,
    rng: random.Random | None = None,
) -> dict[str, Any] | None:
    """Fetch, then process two parts concurrently, then save."""
    pipeline = (
        StagedPipeline("fetch-process-save")
        .add_stage("fetch", lambda: settings.pipeline_fetch.start(rng))
        .add_stage(
            "process",
            *(lambda spec=spec: spec.start(rng) for spec in settings.pipeline_process),
        )
        .add_stage("save", lambda: settings.pipeline_save.start(rng))
    )

    try:
        result = await pipeline.run()
    except Exception as exc:
        print("pipeline failed:", exc)
        return None

    fetched = result["fetch"][0]
    processed = result["process"]
    saved = result["save"][0]
    print("fetched:", fetched.name)
    print("processed:", *(part.name for part in processed))
    print("saved:", saved.name)

    return {
        "fetched": fetched,
        "processed": processed,
        "saved": saved,
    }


__all__ = [
    "CHAIN_FALLBACK",
    "CHAIN_RESULT",
    "DEFAULT_SETTINGS",
    "OperationSpec",
    "SEQUENTIAL_FALLBACK",
    "SEQUENTIAL_RESULT",
    "ScenarioFunc",
    "ScenarioSettings",
    "demo_chain",
    "demo_parallel_all",
    "demo_pipeline",
    "demo_race",
    "demo_retry",
    "demo_sequential",
    "demo_settle_all",
    "demo_timeout",
]
