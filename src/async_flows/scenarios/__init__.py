"""Demonstration scenarios and the runner that executes them in order."""

from async_flows.scenarios.demos import (
    DEFAULT_SETTINGS,
    OperationSpec,
    ScenarioSettings,
)
from async_flows.scenarios.runner import (
    SCENARIOS,
    RunReport,
    Scenario,
    ScenarioOutcome,
    main,
    run_scenario,
    run_scenarios,
)

__all__ = [
    "DEFAULT_SETTINGS",
    "OperationSpec",
    "RunReport",
    "SCENARIOS",
    "Scenario",
    "ScenarioOutcome",
    "ScenarioSettings",
    "main",
    "run_scenario",
    "run_scenarios",
]
