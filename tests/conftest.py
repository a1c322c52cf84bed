"""Pytest configuration and fixtures for async-flows tests."""

from __future__ import annotations

import random

import pytest

from async_flows.scenarios.demos import DEFAULT_SETTINGS, ScenarioSettings


class FixedDraw(random.Random):
    """Random generator whose draws always return the same value."""

    def __init__(self, value: float) -> None:
        super().__init__()
        self._value = value

    def random(self) -> float:
        return self._value


@pytest.fixture()
def seeded_rng() -> random.Random:
    """Provide a deterministic random generator."""
    return random.Random(1234)


@pytest.fixture()
def fixed_draw():
    """Factory for generators that always draw the given value."""
    return FixedDraw


@pytest.fixture()
def fast_settings() -> ScenarioSettings:
    """Scenario settings running ten times faster than the defaults."""
    return DEFAULT_SETTINGS.scaled(0.1)
