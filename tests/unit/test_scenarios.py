"""Tests for the demonstration scenarios."""

from dataclasses import replace

import pytest

from async_flows.operations import (
    OperationResult,
    RetryConfig,
    SettledOutcome,
    SettledStatus,
    SimulatedOperationError,
)
from async_flows.patterns.combinators import drain_discarded
from async_flows.scenarios import demos
from async_flows.scenarios.demos import (
    CHAIN_FALLBACK,
    CHAIN_RESULT,
    DEFAULT_SETTINGS,
    SEQUENTIAL_FALLBACK,
    SEQUENTIAL_RESULT,
    OperationSpec,
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


class TestScenarioSettings:
    """Tests for scenario configuration."""

    def test_defaults(self):
        """Defaults describe the canonical demonstration."""
        assert [s.duration_ms for s in DEFAULT_SETTINGS.chain] == [300, 250]
        assert DEFAULT_SETTINGS.timeout_operation.duration_ms == 500
        assert DEFAULT_SETTINGS.timeout_ms == 250
        assert DEFAULT_SETTINGS.retry == RetryConfig(max_attempts=4, base_delay_ms=150)
        assert [s.fail_rate for s in DEFAULT_SETTINGS.settle] == [0.0, 0.7, 0.2]

    def test_scaled(self):
        """scaled multiplies durations, timeouts and backoff but keeps fail rates."""
        fast = DEFAULT_SETTINGS.scaled(0.1)
        assert [s.duration_ms for s in fast.chain] == [30, 25]
        assert fast.timeout_ms == 25
        assert fast.retry.base_delay_ms == 15
        assert fast.retry.max_attempts == 4
        assert [s.fail_rate for s in fast.settle] == [0.0, 0.7, 0.2]

    def test_invalid_settings(self):
        """Chains take two steps and timeouts are non-negative."""
        with pytest.raises(ValueError):
            ScenarioSettings(chain=(OperationSpec("only", 1),))
        with pytest.raises(ValueError):
            ScenarioSettings(timeout_ms=-1)


class TestChainScenarios:
    """Tests for the chain and sequential-await scenarios."""

    @pytest.mark.asyncio
    async def test_chain_success(self, fast_settings, capsys):
        """Two succeeding steps return the final chain result."""
        assert await demo_chain(fast_settings) == CHAIN_RESULT
        out = capsys.readouterr().out
        assert out.count("success:") == 2
        assert "finally: always executed" in out

    @pytest.mark.asyncio
    async def test_chain_fallback(self, fast_settings, capsys):
        """A failing step is replaced by the fallback and finally still runs."""
        settings = replace(
            fast_settings,
            chain=(OperationSpec("step-1", 5), OperationSpec("step-2", 5, 1.0)),
        )
        assert await demo_chain(settings) == CHAIN_FALLBACK
        out = capsys.readouterr().out
        assert "error in chain: [step-2] failed (simulated)" in out
        assert "finally: always executed" in out

    @pytest.mark.asyncio
    async def test_sequential_success(self, fast_settings):
        """Sequential awaits return the final result."""
        assert await demo_sequential(fast_settings) == SEQUENTIAL_RESULT

    @pytest.mark.asyncio
    async def test_sequential_fallback(self, fast_settings, capsys):
        """A failure in the first step skips the second."""
        settings = replace(
            fast_settings,
            sequential=(OperationSpec("await-1", 5, 1.0), OperationSpec("await-2", 5)),
        )
        assert await demo_sequential(settings) == SEQUENTIAL_FALLBACK
        out = capsys.readouterr().out
        assert "success:" not in out
        assert "[await-1]" in out


class TestFanOutScenarios:
    """Tests for parallel-all, settle-all and race scenarios."""

    @pytest.mark.asyncio
    async def test_parallel_all(self, fast_settings, capsys):
        """Results are reported in input order."""
        results = await demo_parallel_all(fast_settings)
        assert [r.name for r in results] == ["A", "B", "C"]
        assert "results: ['A', 'B', 'C']" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_parallel_all_failure(self, fast_settings, capsys):
        """One failure fails the scenario as a whole, caught locally."""
        settings = replace(
            fast_settings,
            parallel=(OperationSpec("A", 20), OperationSpec("B", 5, 1.0)),
        )
        assert await demo_parallel_all(settings) is None
        assert "parallel failed: [B] failed (simulated)" in capsys.readouterr().out
        await drain_discarded()

    @pytest.mark.asyncio
    async def test_settle_all(self, fast_settings, capsys):
        """Every operation gets an outcome in input order."""
        settings = replace(
            fast_settings,
            settle=(
                OperationSpec("S1", 20, 0.0),
                OperationSpec("S2", 25, 1.0),
                OperationSpec("S3", 15, 0.0),
            ),
        )
        outcomes = await demo_settle_all(settings)

        assert [o.status for o in outcomes] == [
            SettledStatus.FULFILLED,
            SettledStatus.REJECTED,
            SettledStatus.FULFILLED,
        ]
        out = capsys.readouterr().out.splitlines()
        assert out == [
            "fulfilled: S1",
            "rejected: [S2] failed (simulated)",
            "fulfilled: S3",
        ]

    @pytest.mark.asyncio
    async def test_settle_all_reports_tag_not_value(self, monkeypatch, capsys):
        """A fulfilled outcome is reported as fulfilled even when its value is None."""

        async def fake_settle_all(*aws):
            for aw in aws:
                aw.close()
            return [
                SettledOutcome.fulfilled(None),
                SettledOutcome.rejected(SimulatedOperationError("[S2] failed (simulated)")),
            ]

        monkeypatch.setattr(demos, "settle_all", fake_settle_all)

        await demo_settle_all()

        assert capsys.readouterr().out.splitlines() == [
            "fulfilled: None",
            "rejected: [S2] failed (simulated)",
        ]

    @pytest.mark.asyncio
    async def test_race(self, fast_settings, capsys):
        """The faster operation wins the race."""
        winner = await demo_race(fast_settings)
        assert winner.name == "fast"
        assert "winner: fast" in capsys.readouterr().out
        await drain_discarded()


class TestTimeoutAndRetryScenarios:
    """Tests for the timeout and retry scenarios."""

    @pytest.mark.asyncio
    async def test_timeout_fires(self, fast_settings, capsys):
        """A 50ms operation against a 25ms budget times out."""
        assert await demo_timeout(fast_settings) is None
        assert "timeout/error: timeout after 25ms" in capsys.readouterr().out
        await drain_discarded()

    @pytest.mark.asyncio
    async def test_timeout_not_reached(self, fast_settings):
        """An operation within budget returns its result."""
        settings = replace(fast_settings, timeout_ms=200)
        result = await demo_timeout(settings)
        assert isinstance(result, OperationResult)
        assert result.name == "operation"

    @pytest.mark.asyncio
    async def test_retry_reliable_operation(self, fast_settings, capsys):
        """A 0% failure operation succeeds without any retry line."""
        settings = replace(fast_settings, retry_operation=OperationSpec("unstable", 5, 0.0))
        result = await demo_retry(settings)
        assert result.name == "unstable"
        out = capsys.readouterr().out
        assert "attempt" not in out
        assert "success after retry:" in out

    @pytest.mark.asyncio
    async def test_retry_exhausted(self, fast_settings, capsys):
        """An always-failing operation prints each retry and the final failure."""
        settings = replace(
            fast_settings,
            retry_operation=OperationSpec("unstable", 1, 1.0),
            retry=RetryConfig(max_attempts=3, base_delay_ms=2),
        )
        assert await demo_retry(settings) is None
        out = capsys.readouterr().out.splitlines()
        assert out == [
            "attempt 1 failed: [unstable] failed (simulated) | waiting 2ms",
            "attempt 2 failed: [unstable] failed (simulated) | waiting 4ms",
            "failed after retries: [unstable] failed (simulated)",
        ]


class TestPipelineScenario:
    """Tests for the fetch -> process -> save scenario."""

    @pytest.mark.asyncio
    async def test_pipeline(self, fast_settings, capsys):
        """The pipeline returns fetched, processed and saved results."""
        result = await demo_pipeline(fast_settings)

        assert result["fetched"].name == "fetch-data"
        assert [p.name for p in result["processed"]] == ["process-part-1", "process-part-2"]
        assert result["saved"].name == "save"
        out = capsys.readouterr().out
        assert "processed: process-part-1 process-part-2" in out

    @pytest.mark.asyncio
    async def test_pipeline_failure(self, fast_settings, capsys):
        """A failing stage is caught locally."""
        settings = replace(fast_settings, pipeline_save=OperationSpec("save", 1, 1.0))
        assert await demo_pipeline(settings) is None
        assert "pipeline failed: [save] failed (simulated)" in capsys.readouterr().out
