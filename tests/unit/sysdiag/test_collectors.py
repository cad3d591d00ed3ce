"""Concurrent fan-out: failures and timeouts stay isolated."""

import asyncio

from sysdiag.domain.models import MetricUnavailableError, Unavailable, Value
from sysdiag.services.collectors import FunctionCollector, collect_readings


async def _ok() -> float:
    return 42.0


async def _fails() -> float:
    raise MetricUnavailableError("sensor missing")


async def _hangs() -> float:
    await asyncio.sleep(10)
    return 0.0


class TestFunctionCollector:
    async def test_value_wrapped(self) -> None:
        reading = await FunctionCollector("cpu", _ok).fetch()

        assert reading == Value(value=42.0)
        assert reading.is_available()

    async def test_exception_becomes_unavailable(self) -> None:
        reading = await FunctionCollector("temp", _fails).fetch()

        assert isinstance(reading, Unavailable)
        assert reading.reason == "sensor missing"
        assert reading.unwrap_or("fallback") == "fallback"


class TestCollectReadings:
    async def test_one_failure_does_not_cancel_siblings(self) -> None:
        readings = await collect_readings(
            [FunctionCollector("a", _ok), FunctionCollector("b", _fails), FunctionCollector("c", _ok)],
            timeout=1.0,
        )

        assert list(readings) == ["a", "b", "c"]
        assert readings["a"].unwrap_or(None) == 42.0
        assert not readings["b"].is_available()
        assert readings["c"].unwrap_or(None) == 42.0

    async def test_slow_collector_times_out(self) -> None:
        readings = await collect_readings(
            [FunctionCollector("fast", _ok), FunctionCollector("slow", _hangs)], timeout=0.05
        )

        assert readings["fast"].is_available()
        assert readings["slow"] == Unavailable(reason="timed out after 0.05s")

    async def test_collectors_run_concurrently(self) -> None:
        async def _sleepy() -> int:
            await asyncio.sleep(0.1)
            return 1

        loop = asyncio.get_running_loop()
        started = loop.time()
        await collect_readings([FunctionCollector(str(i), _sleepy) for i in range(5)], timeout=1.0)

        assert loop.time() - started < 0.4
