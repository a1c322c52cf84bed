"""Staged pipeline mixing sequential and concurrent steps."""

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from async_flows.observability.events import log_event
from async_flows.patterns.combinators import gather_all

logger = logging.getLogger(__name__)

StepFactory = Callable[[], Awaitable[Any]]


@dataclass
class PipelineMetrics:
    """Metrics for tracking pipeline progress."""

    stages_completed: int
    operations_completed: int
    processing_time_ms: float
    failed_stage: str | None = field(default=None)


@dataclass(frozen=True, slots=True)
class PipelineResult:
    """Outputs of a completed pipeline run.

    Attributes:
        stages: Stage name mapped to that stage's outputs, in stage order.
        elapsed_ms: Wall-clock duration of the run in milliseconds.
    """

    stages: dict[str, list[Any]]
    elapsed_ms: float

    def __getitem__(self, stage_name: str) -> list[Any]:
        return self.stages[stage_name]


@dataclass(frozen=True, slots=True)
class _Stage:
    name: str
    steps: tuple[StepFactory, ...]

    @property
    def concurrent(self) -> bool:
        return len(self.steps) > 1


class StagedPipeline:
    """
    Pipeline of named stages run one after another.

    A stage holding one step runs it on its own; a stage holding several
    runs them concurrently and waits for all of them. A failing step aborts
    the run and its error propagates to the caller.

    Args:
        name: Identifier used in log events.

    Example:
        ```python
        pipeline = (
            StagedPipeline("etl")
            .add_stage("fetch", lambda: simulate_io("fetch-data", 200))
            .add_stage(
                "process",
                lambda: simulate_io("process-part-1", 250),
                lambda: simulate_io("process-part-2", 300),
            )
            .add_stage("save", lambda: simulate_io("save", 150))
        )
        result = await pipeline.run()
        ```
    """

    def __init__(self, name: str = "pipeline") -> None:
        self._name = name
        self._stages: list[_Stage] = []
        self._metrics = PipelineMetrics(
            stages_completed=0,
            operations_completed=0,
            processing_time_ms=0.0,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def stage_names(self) -> list[str]:
        return [stage.name for stage in self._stages]

    def add_stage(self, stage_name: str, *steps: StepFactory) -> "StagedPipeline":
        """Append a stage.

        Raises:
            ValueError: If the stage has no steps or the name is taken.
        """
        if not steps:
            raise ValueError("a stage needs at least one step")
        if stage_name in self.stage_names:
            raise ValueError(f"duplicate stage name: {stage_name}")
        self._stages.append(_Stage(name=stage_name, steps=steps))
        return self

    async def run(self) -> PipelineResult:
        """Run every stage in order.

        Returns:
            PipelineResult: Outputs of each stage.

        Raises:
            Exception: The first failure of any step.
        """
        self._metrics = PipelineMetrics(
            stages_completed=0,
            operations_completed=0,
            processing_time_ms=0.0,
        )
        outputs: dict[str, list[Any]] = {}
        start_time = time.perf_counter()

        for stage in self._stages:
            try:
                if stage.concurrent:
                    outputs[stage.name] = await gather_all(*(step() for step in stage.steps))
                else:
                    outputs[stage.name] = [await stage.steps[0]()]
            except Exception as exc:
                self._metrics.failed_stage = stage.name
                self._metrics.processing_time_ms = (time.perf_counter() - start_time) * 1000
                log_event(
                    logger,
                    "pipeline_stage_failed",
                    logging.WARNING,
                    pipeline=self._name,
                    stage=stage.name,
                    error=str(exc),
                )
                raise

            self._metrics.stages_completed += 1
            self._metrics.operations_completed += len(stage.steps)
            log_event(
                logger,
                "pipeline_stage_completed",
                logging.DEBUG,
                pipeline=self._name,
                stage=stage.name,
                concurrent=stage.concurrent,
            )

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self._metrics.processing_time_ms = elapsed_ms
        return PipelineResult(stages=outputs, elapsed_ms=elapsed_ms)

    def get_metrics(self) -> PipelineMetrics:
        """Get metrics for the most recent run."""
        return self._metrics


__all__ = [
    "PipelineMetrics",
    "PipelineResult",
    "StagedPipeline",
    "StepFactory",
]
