"""
Collector boundary and concurrent fan-out.

Key patterns:
- Protocol-based dependency injection (``HostPlatform``, ``MetricCollector``)
- Failures converted to ``Unavailable`` at the call site, never propagated
- Structured concurrency with asyncio.TaskGroup and a per-collector timeout
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol

import structlog

from sysdiag.domain.host import (
    BatteryInfo,
    DeviceCounts,
    DiskIO,
    DiskUsage,
    FanReading,
    HostInfo,
    MemoryUsage,
    NetworkInterface,
    ProcessInfo,
    SecurityStatus,
)
from sysdiag.domain.models import Reading, Unavailable, Value

logger = structlog.get_logger(__name__)


class HostPlatform(Protocol):
    """
    Everything the engine can ask of the local host.

    Implementations may be slow and may raise; a method that cannot produce
    data on this host raises ``MetricUnavailableError``.
    """

    def host_info(self) -> HostInfo: ...

    async def cpu_usage_percent(self) -> float: ...

    async def memory_usage(self) -> MemoryUsage: ...

    async def disk_usage(self, path: str) -> DiskUsage: ...

    async def security_status(self) -> SecurityStatus: ...

    async def top_processes(self, limit: int) -> list[ProcessInfo]: ...

    async def disk_io(self) -> DiskIO: ...

    async def battery(self) -> BatteryInfo | None: ...

    async def battery_health_percent(self) -> float: ...

    async def power_plan(self) -> str: ...

    async def cpu_temperature(self) -> float: ...

    async def gpu_temperature(self) -> float: ...

    async def thermal_throttling(self) -> bool: ...

    async def fans(self) -> list[FanReading]: ...

    async def network_interfaces(self) -> list[NetworkInterface]: ...

    async def internet_reachable(self, host: str, port: int, timeout: float) -> bool: ...

    async def connected_devices(self) -> DeviceCounts: ...

    async def pending_updates(self) -> int: ...

    async def system_errors_24h(self) -> int: ...

    async def uptime_seconds(self) -> float: ...

    async def process_count(self) -> int: ...


class MetricCollector(Protocol):
    """A single named metric read: ``fetch()`` never raises."""

    name: str

    async def fetch(self) -> Reading: ...


class FunctionCollector:
    """Adapts any zero-argument coroutine function into a ``MetricCollector``."""

    def __init__(self, name: str, func: Callable[[], Awaitable[Any]]) -> None:
        self.name = name
        self._func = func
        self.logger = logger.bind(collector=name)

    async def fetch(self) -> Reading:
        try:
            value = await self._func()
        except Exception as e:
            self.logger.info("collector_unavailable", error=str(e), error_type=type(e).__name__)
            return Unavailable(reason=str(e) or type(e).__name__)
        return Value(value=value)


async def _bounded_fetch(collector: MetricCollector, timeout: float) -> Reading:
    try:
        return await asyncio.wait_for(collector.fetch(), timeout=timeout)
    except TimeoutError:
        logger.warning("collector_timeout", collector=collector.name, timeout_seconds=timeout)
        return Unavailable(reason=f"timed out after {timeout:g}s")
    except Exception as e:
        # fetch() should not raise; keep siblings alive if a custom collector does
        logger.exception("unexpected_collector_error", collector=collector.name, error=str(e))
        return Unavailable(reason=str(e) or type(e).__name__)


async def collect_readings(
    collectors: Sequence[MetricCollector], timeout: float
) -> dict[str, Reading]:
    """
    Run every collector concurrently and wait for all of them to settle.

    The result preserves the order of ``collectors`` and always has one
    reading per collector name.
    """
    start_time = time.perf_counter()

    async with asyncio.TaskGroup() as task_group:
        tasks = [
            task_group.create_task(_bounded_fetch(collector, timeout), name=collector.name)
            for collector in collectors
        ]

    readings = {collector.name: task.result() for collector, task in zip(collectors, tasks)}

    logger.debug(
        "readings_collected",
        collectors=len(collectors),
        unavailable=[name for name, reading in readings.items() if not reading.is_available()],
        duration_seconds=round(time.perf_counter() - start_time, 3),
    )
    return readings
