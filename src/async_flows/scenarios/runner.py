#!/usr/bin/env python3
"""Scenario runner for the async control-flow demonstrations.

Runs every scenario once, in a fixed order, and exits after the last one
completes and every discarded race/timeout loser has settled.

Usage:
    python -m async_flows
"""

from __future__ import annotations

import asyncio
import logging
import random
import sys
import time
from collections.abc import Callable, Coroutine, Sequence
from dataclasses import dataclass, field
from typing import Any

from async_flows.observability.events import log_event
from async_flows.patterns.combinators import drain_discarded
from async_flows.scenarios.demos import (
    DEFAULT_SETTINGS,
    ScenarioFunc,
    ScenarioSettings,
    demo_chain,
    demo_parallel_all,
    demo_pipeline,
    demo_race,
    demo_retry,
    demo_sequential,
    demo_settle_all,
    demo_timeout,
)

logger = logging.getLogger(__name__)


def _describe_pipeline(value: dict[str, Any] | None) -> str | None:
    if value is None:
        return None
    summary = {
        "fetched": value["fetched"].name,
        "processed": [part.name for part in value["processed"]],
        "saved": value["saved"].name,
    }
    return f"final pipeline result: {summary}"


@dataclass(frozen=True, slots=True)
class Scenario:
    """A named demonstration and how to report its return value."""

    name: str
    title: str
    run: ScenarioFunc
    describe: Callable[[Any], str | None] | None = None


SCENARIOS: tuple[Scenario, ...] = (
    Scenario(
        "chain",
        "1) Chain (sequential steps / fallback / finally)",
        demo_chain,
        describe=lambda value: f"chain return: {value}",
    ),
    Scenario(
        "sequential",
        "2) Sequential await (try / except)",
        demo_sequential,
        describe=lambda value: f"async/await return: {value}",
    ),
    Scenario("parallel-all", "3) Parallel execution with gather_all", demo_parallel_all),
    Scenario("settle-all", "4) settle_all (success + failure)", demo_settle_all),
    Scenario("race", "5) race (first to finish)", demo_race),
    Scenario("timeout", "6) Timeout (race against a timer)", demo_timeout),
    Scenario("retry", "7) Retry with backoff", demo_retry),
    Scenario(
        "pipeline",
        "8) Pipeline: fetch -> process -> save",
        demo_pipeline,
        describe=_describe_pipeline,
    ),
)


@dataclass(frozen=True, slots=True)
class ScenarioOutcome:
    """Outcome of one scenario within a run.

    Attributes:
        name: Scenario name.
        status: "completed" or "failed".
        value: Whatever the scenario returned, None on failure.
        error: Error message if the scenario raised, None otherwise.
        elapsed_ms: Wall-clock duration in milliseconds.
    """

    name: str
    status: str
    value: Any
    error: str | None
    elapsed_ms: float

    @property
    def completed(self) -> bool:
        return self.status == "completed"


@dataclass
class RunReport:
    """Ordered outcomes of one run over all scenarios."""

    outcomes: list[ScenarioOutcome] = field(default_factory=list)
    total_time_ms: float = 0.0
    drained_tasks: int = 0

    @property
    def completed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.completed)

    @property
    def failed_count(self) -> int:
        return len(self.outcomes) - self.completed_count

    def get(self, name: str) -> ScenarioOutcome:
        for outcome in self.outcomes:
            if outcome.name == name:
                return outcome
        raise KeyError(name)


async def run_scenario(
    scenario: Scenario,
    settings: ScenarioSettings = DEFAULT_SETTINGS,
    rng: random.Random | None = None,
) -> ScenarioOutcome:
    """Run one scenario, containing any failure it lets escape."""
    print(f"\n=== {scenario.title} ===")
    log_event(logger, "scenario_started", scenario=scenario.name)
    start_time = time.perf_counter()

    try:
        value = await scenario.run(settings, rng)
    except Exception as exc:
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        print(f"scenario {scenario.name} failed: {exc}")
        log_event(
            logger,
            "scenario_failed",
            logging.ERROR,
            scenario=scenario.name,
            error=str(exc),
            elapsed_ms=elapsed_ms,
        )
        return ScenarioOutcome(
            name=scenario.name,
            status="failed",
            value=None,
            error=str(exc),
            elapsed_ms=elapsed_ms,
        )

    elapsed_ms = (time.perf_counter() - start_time) * 1000
    if scenario.describe is not None:
        description = scenario.describe(value)
        if description is not None:
            print(description)
    log_event(
        logger,
        "scenario_completed",
        scenario=scenario.name,
        elapsed_ms=elapsed_ms,
    )
    return ScenarioOutcome(
        name=scenario.name,
        status="completed",
        value=value,
        error=None,
        elapsed_ms=elapsed_ms,
    )


async def run_scenarios(
    scenarios: Sequence[Scenario] = SCENARIOS,
    settings: ScenarioSettings = DEFAULT_SETTINGS,
    rng: random.Random | None = None,
    drain: bool = True,
) -> RunReport:
    """Run scenarios sequentially and collect their outcomes.

    Args:
        scenarios: Scenarios to run, in order.
        settings: Durations, failure rates and policies.
        rng: Optional random generator shared by every scenario.
        drain: Wait for discarded race/timeout losers before returning.

    Returns:
        RunReport: One outcome per scenario, in input order.
    """
    report = RunReport()
    start_time = time.perf_counter()

    for scenario in scenarios:
        report.outcomes.append(await run_scenario(scenario, settings, rng))

    if drain:
        report.drained_tasks = await drain_discarded()
    report.total_time_ms = (time.perf_counter() - start_time) * 1000
    return report


def _run_event_loop(coro: Coroutine[Any, Any, RunReport]) -> RunReport:
    """Run ``coro`` on uvloop where available, else the default event loop."""
    # Windows is not supported by uvloop
    if sys.platform != "win32":
        try:
            import uvloop
        except ImportError:
            # uvloop not installed, use default asyncio event loop
            # Install with: pip install "async-flows[performance]"
            pass
        else:
            return uvloop.run(coro)
    return asyncio.run(coro)


def main() -> int:
    """Run all scenarios once and return the process exit code."""
    logging.basicConfig(level=logging.WARNING, format="%(message)s")

    print("POC: coroutines & asyncio control flow - Python")
    _run_event_loop(run_scenarios())
    print("\nDone")
    return 0


if __name__ == "__main__":
    sys.exit(main())
