"""Performance probe: CPU, memory breakdown, disk I/O and top processes."""

import structlog
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from sysdiag.config import AppConfig
from sysdiag.domain.host import DiskIO, MemoryUsage, ProcessInfo
from sysdiag.domain.models import MetricDomain, Severity, ToolName, embed
from sysdiag.domain.reports import CpuStats, DiskIOStats, PerformanceReport
from sysdiag.domain.thresholds import HIGH_DISK_READ_MBPS, THRESHOLDS
from sysdiag.services.classifier import classify, classify_reading, max_severity
from sysdiag.services.collectors import FunctionCollector, HostPlatform, collect_readings

logger = structlog.get_logger(__name__)

PROCESSES_SKIPPED = "Skipped (set includeProcesses: true to enumerate)"


class PerformanceOptions(BaseModel):
    """Optional knobs accepted by the performance probe."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    include_processes: bool = Field(
        default=True, description="Enumerate top processes (the slowest sub-query)"
    )
    process_limit: int = Field(default=5, ge=1, le=50, description="Number of processes returned")


def _fmt(value: float | None) -> str:
    return "N/A" if value is None else f"{round(value, 2):g}"


class PerformanceProbe:
    def __init__(self, host: HostPlatform, config: AppConfig) -> None:
        self.host = host
        self.config = config
        self.logger = logger.bind(component="performance_probe")

    async def run(self, options: PerformanceOptions | None = None) -> PerformanceReport:
        options = options or PerformanceOptions()

        async def _top_processes() -> list[ProcessInfo]:
            return await self.host.top_processes(options.process_limit)

        collectors = [
            FunctionCollector("cpu", self.host.cpu_usage_percent),
            FunctionCollector("memory", self.host.memory_usage),
            FunctionCollector("disk_io", self.host.disk_io),
        ]
        if options.include_processes:
            collectors.append(FunctionCollector("processes", _top_processes))

        readings = await collect_readings(
            collectors, timeout=self.config.collection.collector_timeout_seconds
        )

        cpu_usage: float | None = readings["cpu"].unwrap_or(None)
        memory: MemoryUsage | None = readings["memory"].unwrap_or(None)
        disk_io: DiskIO | None = readings["disk_io"].unwrap_or(None)
        memory_percent = memory.usage_percent if memory is not None else None

        cpu_severity = classify_reading(
            readings["cpu"], THRESHOLDS[MetricDomain.CPU_USAGE], when_unavailable=Severity.INFO
        )
        memory_severity = (
            classify(memory_percent, THRESHOLDS[MetricDomain.MEMORY_USAGE])
            if memory_percent is not None
            else Severity.INFO
        )
        severity = max_severity([cpu_severity, memory_severity])

        processes: list[ProcessInfo] = []
        if options.include_processes:
            processes = list(readings["processes"].unwrap_or([]))[: options.process_limit]

        recommendations = []
        if cpu_severity is not Severity.INFO:
            recommendations.append("Check top processes for CPU-intensive tasks")
        if memory_severity is not Severity.INFO:
            recommendations.append("Close unused applications to free memory")
        if disk_io is not None and disk_io.read_mbps > HIGH_DISK_READ_MBPS:
            recommendations.append("Disk I/O is high - heavy file operations in progress")

        summary = f"CPU: {_fmt(cpu_usage)}%, Memory: {_fmt(memory_percent)}%"
        if processes:
            top = processes[0]
            summary += (
                f". Top process: {top.name} ({_fmt(top.cpu_seconds)}s CPU, {_fmt(top.memory_mb)}MB)"
            )

        if disk_io is not None:
            disk_io_stats = DiskIOStats(read_mbps=disk_io.read_mbps, write_mbps=disk_io.write_mbps)
        else:
            missing = readings["disk_io"]
            disk_io_stats = DiskIOStats(read_mbps=embed(missing), write_mbps=embed(missing))

        self.logger.info(
            "performance_probe_completed",
            severity=severity.value,
            include_processes=options.include_processes,
        )
        return PerformanceReport(
            severity=severity,
            cpu=CpuStats(
                usage_percent=embed(readings["cpu"]),
                core_count=self.host.host_info().cpu_count,
            ),
            memory=embed(readings["memory"]),
            disk_io=disk_io_stats,
            top_processes=processes if options.include_processes else PROCESSES_SKIPPED,
            actionable_summary=summary,
            recommendations=recommendations,
            next_steps_to_check=[ToolName.THERMAL] if severity is Severity.CRITICAL else [],
        )
