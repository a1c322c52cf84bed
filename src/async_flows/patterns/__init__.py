"""Control-flow patterns module."""

from async_flows.patterns.combinators import (
    drain_discarded,
    gather_all,
    race,
    settle_all,
)
from async_flows.patterns.pipeline import (
    PipelineMetrics,
    PipelineResult,
    StagedPipeline,
)
from async_flows.patterns.retry import (
    RetryConfig,
    RetryExecutionResult,
    RetryPolicy,
    retry,
)
from async_flows.patterns.timeout import (
    OperationTimeoutError,
    with_timeout,
)

__all__ = [
    # Combinators
    "drain_discarded",
    "gather_all",
    "race",
    "settle_all",
    # Pipeline
    "PipelineMetrics",
    "PipelineResult",
    "StagedPipeline",
    # Retry
    "RetryConfig",
    "RetryExecutionResult",
    "RetryPolicy",
    "retry",
    # Timeout
    "OperationTimeoutError",
    "with_timeout",
]
