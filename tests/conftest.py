"""Shared fixtures: a scriptable fake host, a controllable clock and a toolkit."""

import asyncio
from collections import Counter
from typing import Any

import pytest

from sysdiag.config import AppConfig, CollectionConfig
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
from sysdiag.services.cache import ReportCache
from sysdiag.services.toolkit import DiagnosticsToolkit


def memory(percent: float, total_gb: float = 16.0) -> MemoryUsage:
    used = round(total_gb * percent / 100, 2)
    return MemoryUsage(
        total_gb=total_gb, used_gb=used, free_gb=round(total_gb - used, 2), usage_percent=percent
    )


def disk(free_percent: float, total_gb: float = 500.0) -> DiskUsage:
    free = round(total_gb * free_percent / 100, 2)
    return DiskUsage(
        total_gb=total_gb,
        used_gb=round(total_gb - free, 2),
        free_gb=free,
        usage_percent=round(100 - free_percent, 2),
    )


def healthy_values() -> dict[str, Any]:
    return {
        "cpu_usage_percent": 20.0,
        "memory_usage": memory(30.0),
        "disk_usage": disk(60.0),
        "security_status": SecurityStatus(defender_active=True, firewall_active=True),
        "top_processes": [
            ProcessInfo(name="browser", pid=101, cpu_seconds=420.5, memory_mb=812.3),
            ProcessInfo(name="editor", pid=202, cpu_seconds=120.0, memory_mb=300.0),
            ProcessInfo(name="shell", pid=303, cpu_seconds=3.2, memory_mb=12.0),
        ],
        "disk_io": DiskIO(read_mbps=4.5, write_mbps=1.2),
        "battery": BatteryInfo(charge_percent=80.0, status="Discharging", seconds_left=7200),
        "battery_health_percent": 93.0,
        "power_plan": "Balanced",
        "cpu_temperature": 55.0,
        "gpu_temperature": 48.0,
        "thermal_throttling": False,
        "fans": [FanReading(label="cpu_fan", rpm=1400)],
        "network_interfaces": [
            NetworkInterface(name="eth0", ipv4="192.168.1.20", mac="aa:bb:cc:dd:ee:ff"),
            NetworkInterface(name="wlan0", mac="11:22:33:44:55:66"),
        ],
        "internet_reachable": True,
        "connected_devices": DeviceCounts(usb_devices=3, bluetooth_devices=1, method="sysfs"),
        "pending_updates": 0,
        "system_errors_24h": 0,
        "uptime_seconds": 93784.0,
        "process_count": 212,
    }


class FakeHost:
    """
    In-memory ``HostPlatform``.

    Set ``values[name]`` to change a reading, to an exception instance to make
    that collector fail, and ``delays[name]`` to make it slow.
    """

    def __init__(self, **overrides: Any) -> None:
        self.values = healthy_values()
        self.values.update(overrides)
        self.delays: dict[str, float] = {}
        self.calls: Counter[str] = Counter()
        self.disk_paths: list[str] = []

    async def _read(self, name: str) -> Any:
        self.calls[name] += 1
        if delay := self.delays.get(name):
            await asyncio.sleep(delay)
        value = self.values[name]
        if isinstance(value, Exception):
            raise value
        return value

    def host_info(self) -> HostInfo:
        return HostInfo(hostname="testbox", platform="linux", arch="x86_64", cpu_count=8)

    async def cpu_usage_percent(self) -> float:
        return await self._read("cpu_usage_percent")

    async def memory_usage(self) -> MemoryUsage:
        return await self._read("memory_usage")

    async def disk_usage(self, path: str) -> DiskUsage:
        self.disk_paths.append(path)
        return await self._read("disk_usage")

    async def security_status(self) -> SecurityStatus:
        return await self._read("security_status")

    async def top_processes(self, limit: int) -> list[ProcessInfo]:
        return (await self._read("top_processes"))[:limit]

    async def disk_io(self) -> DiskIO:
        return await self._read("disk_io")

    async def battery(self) -> BatteryInfo | None:
        return await self._read("battery")

    async def battery_health_percent(self) -> float:
        return await self._read("battery_health_percent")

    async def power_plan(self) -> str:
        return await self._read("power_plan")

    async def cpu_temperature(self) -> float:
        return await self._read("cpu_temperature")

    async def gpu_temperature(self) -> float:
        return await self._read("gpu_temperature")

    async def thermal_throttling(self) -> bool:
        return await self._read("thermal_throttling")

    async def fans(self) -> list[FanReading]:
        return await self._read("fans")

    async def network_interfaces(self) -> list[NetworkInterface]:
        return await self._read("network_interfaces")

    async def internet_reachable(self, host: str, port: int, timeout: float) -> bool:
        return await self._read("internet_reachable")

    async def connected_devices(self) -> DeviceCounts:
        return await self._read("connected_devices")

    async def pending_updates(self) -> int:
        return await self._read("pending_updates")

    async def system_errors_24h(self) -> int:
        return await self._read("system_errors_24h")

    async def uptime_seconds(self) -> float:
        return await self._read("uptime_seconds")

    async def process_count(self) -> int:
        return await self._read("process_count")


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(
        collection=CollectionConfig(
            collector_timeout_seconds=0.5, command_timeout_seconds=0.5, disk_path="/"
        )
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ReportCache:
    return ReportCache(clock=clock)


@pytest.fixture
def toolkit(host: FakeHost, config: AppConfig, cache: ReportCache) -> DiagnosticsToolkit:
    return DiagnosticsToolkit(host, config, cache)
