"""
The local machine as a ``HostPlatform``.

psutil covers the cross-platform readings; Windows-specific and
Linux-specific queries are delegated to their own modules. Blocking psutil
calls run in a worker thread so a slow sensor never stalls the event loop.
A reading this host cannot provide raises ``MetricUnavailableError``.
"""

import asyncio
import contextlib
import platform
import socket
import sys
import time

import psutil
import structlog

from sysdiag.config import CollectionConfig
from sysdiag.domain.host import (
    BatteryInfo,
    BatteryState,
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
from sysdiag.domain.models import MetricUnavailableError

from . import linux, windows
from .shell import run_command

logger = structlog.get_logger(__name__)

GB = 1024**3
MB = 1024**2

# Preferred sensor groups for the CPU package temperature, most specific first.
CPU_SENSOR_GROUPS = ("coretemp", "k10temp", "zenpower", "cpu_thermal", "cpu-thermal", "acpitz")


def _is_windows() -> bool:
    return sys.platform == "win32"


def _is_linux() -> bool:
    return sys.platform.startswith("linux")


def battery_state(plugged: bool | None, percent: float) -> BatteryState:
    if plugged is None:
        return "Unknown"
    if not plugged:
        return "Discharging"
    return "Fully Charged" if percent >= 100 else "AC Power"


class LocalHost:
    """psutil-backed host with per-OS extensions."""

    def __init__(self, config: CollectionConfig | None = None) -> None:
        self.config = config or CollectionConfig()
        self.logger = logger.bind(component="local_host", platform=sys.platform)

    @property
    def command_timeout(self) -> float:
        return self.config.command_timeout_seconds

    def host_info(self) -> HostInfo:
        return HostInfo(
            hostname=socket.gethostname(),
            platform=sys.platform,
            arch=platform.machine(),
            cpu_count=psutil.cpu_count() or 0,
        )

    async def cpu_usage_percent(self) -> float:
        return await asyncio.to_thread(psutil.cpu_percent, 0.5)

    async def memory_usage(self) -> MemoryUsage:
        memory = psutil.virtual_memory()
        return MemoryUsage(
            total_gb=round(memory.total / GB, 2),
            used_gb=round((memory.total - memory.available) / GB, 2),
            free_gb=round(memory.available / GB, 2),
            usage_percent=round(memory.percent, 2),
        )

    async def disk_usage(self, path: str) -> DiskUsage:
        try:
            usage = await asyncio.to_thread(psutil.disk_usage, path)
        except OSError as e:
            raise MetricUnavailableError(f"cannot read volume {path}: {e}") from e
        return DiskUsage(
            total_gb=round(usage.total / GB, 2),
            used_gb=round(usage.used / GB, 2),
            free_gb=round(usage.free / GB, 2),
            usage_percent=round(usage.percent, 2),
        )

    async def security_status(self) -> SecurityStatus:
        if _is_windows():
            return await windows.security_status(self.command_timeout)
        # No standard antivirus or firewall query outside Windows: both unknown.
        return SecurityStatus()

    async def top_processes(self, limit: int) -> list[ProcessInfo]:
        def _collect() -> list[ProcessInfo]:
            processes = []
            for proc in psutil.process_iter(["pid", "name", "cpu_times", "memory_info"]):
                info = proc.info
                cpu_times, memory_info = info.get("cpu_times"), info.get("memory_info")
                if cpu_times is None or memory_info is None:
                    continue
                processes.append(
                    ProcessInfo(
                        name=info.get("name") or f"pid {info['pid']}",
                        pid=info["pid"],
                        cpu_seconds=round(cpu_times.user + cpu_times.system, 2),
                        memory_mb=round(memory_info.rss / MB, 2),
                    )
                )
            processes.sort(key=lambda p: p.cpu_seconds, reverse=True)
            return processes[:limit]

        return await asyncio.to_thread(_collect)

    async def disk_io(self) -> DiskIO:
        """Read/write throughput sampled over one second."""
        before = psutil.disk_io_counters()
        if before is None:
            raise MetricUnavailableError("disk I/O counters not available")
        started = time.perf_counter()
        await asyncio.sleep(1.0)
        after = psutil.disk_io_counters()
        elapsed = time.perf_counter() - started
        return DiskIO(
            read_mbps=round(max(0, after.read_bytes - before.read_bytes) / MB / elapsed, 2),
            write_mbps=round(max(0, after.write_bytes - before.write_bytes) / MB / elapsed, 2),
        )

    async def battery(self) -> BatteryInfo | None:
        if not hasattr(psutil, "sensors_battery"):
            raise MetricUnavailableError("battery sensors not supported on this platform")
        battery = await asyncio.to_thread(psutil.sensors_battery)
        if battery is None:
            return None
        seconds_left = None
        if battery.secsleft not in (psutil.POWER_TIME_UNLIMITED, psutil.POWER_TIME_UNKNOWN):
            seconds_left = int(battery.secsleft)
        return BatteryInfo(
            charge_percent=round(battery.percent, 1),
            status=battery_state(battery.power_plugged, battery.percent),
            seconds_left=seconds_left,
        )

    async def battery_health_percent(self) -> float:
        if _is_linux():
            return await asyncio.to_thread(linux.battery_health_percent)
        raise MetricUnavailableError("battery wear level requires elevated access on this platform")

    async def power_plan(self) -> str:
        if _is_windows():
            return await windows.power_plan(self.command_timeout)
        raise MetricUnavailableError("power plans are a Windows feature")

    async def cpu_temperature(self) -> float:
        if _is_windows():
            return await windows.cpu_temperature(self.command_timeout)
        if not hasattr(psutil, "sensors_temperatures"):
            raise MetricUnavailableError("temperature sensors not supported on this platform")
        groups = await asyncio.to_thread(psutil.sensors_temperatures)
        for name in CPU_SENSOR_GROUPS:
            entries = groups.get(name)
            if entries:
                return round(max(entry.current for entry in entries), 1)
        raise MetricUnavailableError("no CPU temperature sensor found")

    async def gpu_temperature(self) -> float:
        output = await run_command(
            "nvidia-smi",
            "--query-gpu=temperature.gpu",
            "--format=csv,noheader,nounits",
            timeout=self.command_timeout,
        )
        try:
            return float(output.splitlines()[0])
        except (ValueError, IndexError) as e:
            raise MetricUnavailableError(f"unexpected nvidia-smi output: {output[:80]!r}") from e

    async def thermal_throttling(self) -> bool:
        if _is_windows():
            return await windows.thermal_throttling(self.command_timeout)
        raise MetricUnavailableError("throttling detection is only implemented for Windows")

    async def fans(self) -> list[FanReading]:
        if not hasattr(psutil, "sensors_fans"):
            raise MetricUnavailableError("fan sensors not supported on this platform")
        groups = await asyncio.to_thread(psutil.sensors_fans)
        return [
            FanReading(label=entry.label or name, rpm=entry.current)
            for name, entries in groups.items()
            for entry in entries
        ]

    async def network_interfaces(self) -> list[NetworkInterface]:
        interfaces = []
        for name, addresses in psutil.net_if_addrs().items():
            ipv4 = ipv6 = mac = None
            for address in addresses:
                if address.family == socket.AF_INET and ipv4 is None:
                    ipv4 = address.address
                elif address.family == socket.AF_INET6 and ipv6 is None:
                    ipv6 = address.address
                elif address.family == psutil.AF_LINK and mac is None:
                    mac = address.address
            if ipv4 and ipv4.startswith("127."):
                continue
            interfaces.append(NetworkInterface(name=name, ipv4=ipv4, ipv6=ipv6, mac=mac))
        return interfaces

    async def internet_reachable(self, host: str, port: int, timeout: float) -> bool:
        """TCP connect to ``host:port``; refusal, unreachability or timeout mean offline."""
        try:
            _, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout)
        except (OSError, TimeoutError) as e:
            self.logger.debug("connectivity_probe_failed", target=f"{host}:{port}", error=str(e))
            return False
        writer.close()
        # The connect already succeeded; a reset while closing does not change that.
        with contextlib.suppress(OSError):
            await writer.wait_closed()
        return True

    async def connected_devices(self) -> DeviceCounts:
        if _is_windows():
            return await windows.connected_devices(self.command_timeout)
        if _is_linux():
            return await asyncio.to_thread(linux.connected_devices)
        raise MetricUnavailableError("device enumeration not supported on this platform")

    async def pending_updates(self) -> int:
        if _is_windows():
            return await windows.pending_updates(self.command_timeout)
        raise MetricUnavailableError("pending update query is only implemented for Windows")

    async def system_errors_24h(self) -> int:
        if _is_windows():
            return await windows.system_errors_24h(self.command_timeout)
        if _is_linux():
            return await linux.system_errors_24h(self.command_timeout)
        raise MetricUnavailableError("system log query not supported on this platform")

    async def uptime_seconds(self) -> float:
        return round(time.time() - psutil.boot_time(), 0)

    async def process_count(self) -> int:
        return len(psutil.pids())
