"""Legacy consolidated snapshot: raw host data without classification."""

import structlog

from sysdiag.config import AppConfig
from sysdiag.domain.models import Unavailable, embed
from sysdiag.domain.reports import FullHealthReport, Uptime
from sysdiag.services.collectors import FunctionCollector, HostPlatform, collect_readings

logger = structlog.get_logger(__name__)


def format_uptime(seconds: float) -> str:
    """3725 -> '0d 1h 2m 5s'."""
    total = int(seconds)
    days, remainder = divmod(total, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{days}d {hours}h {minutes}m {secs}s"


class FullHealthSnapshot:
    def __init__(self, host: HostPlatform, config: AppConfig) -> None:
        self.host = host
        self.config = config
        self.logger = logger.bind(component="full_health_snapshot")

    async def _disk(self):
        return await self.host.disk_usage(self.config.collection.disk_path)

    async def run(self) -> FullHealthReport:
        readings = await collect_readings(
            [
                FunctionCollector("cpu", self.host.cpu_usage_percent),
                FunctionCollector("memory", self.host.memory_usage),
                FunctionCollector("disk", self._disk),
                FunctionCollector("uptime", self.host.uptime_seconds),
                FunctionCollector("processes", self.host.process_count),
            ],
            timeout=self.config.collection.collector_timeout_seconds,
        )

        uptime_reading = readings["uptime"]
        if isinstance(uptime_reading, Unavailable):
            uptime = Uptime(uptime_seconds=uptime_reading, formatted=uptime_reading)
        else:
            uptime = Uptime(
                uptime_seconds=uptime_reading.value,
                formatted=format_uptime(uptime_reading.value),
            )

        self.logger.debug("full_health_snapshot_collected")
        return FullHealthReport(
            system=self.host.host_info(),
            cpu_usage_percent=embed(readings["cpu"]),
            memory=embed(readings["memory"]),
            disk=embed(readings["disk"]),
            uptime=uptime,
            process_count=embed(readings["processes"]),
        )
