"""Thermal probe: CPU/GPU temperature, throttling and fans, cached for 10s."""

from datetime import UTC, datetime

import structlog

from sysdiag.config import AppConfig
from sysdiag.domain.host import FanReading
from sysdiag.domain.models import CacheInfo, MetricDomain, Severity, ToolName, embed
from sysdiag.domain.reports import FanStatus, Temperature, ThermalReport
from sysdiag.domain.thresholds import THRESHOLDS
from sysdiag.services.cache import ReportCache
from sysdiag.services.classifier import classify
from sysdiag.services.collectors import FunctionCollector, HostPlatform, collect_readings

logger = structlog.get_logger(__name__)

CACHE_KEY = ToolName.THERMAL.value


class ThermalProbe:
    """Temperatures change slowly, so the whole report is cached."""

    def __init__(self, host: HostPlatform, config: AppConfig, cache: ReportCache) -> None:
        self.host = host
        self.config = config
        self.cache = cache
        self.logger = logger.bind(component="thermal_probe")

    async def run(self) -> ThermalReport:
        return await self.cache.get_or_compute(
            CACHE_KEY, self.config.cache.thermal_ttl_seconds, self._compute
        )

    async def _compute(self) -> ThermalReport:
        readings = await collect_readings(
            [
                FunctionCollector("cpu", self.host.cpu_temperature),
                FunctionCollector("gpu", self.host.gpu_temperature),
                FunctionCollector("throttling", self.host.thermal_throttling),
                FunctionCollector("fans", self.host.fans),
            ],
            timeout=self.config.collection.collector_timeout_seconds,
        )
        cpu_temp: float | None = readings["cpu"].unwrap_or(None)
        gpu_temp: float | None = readings["gpu"].unwrap_or(None)
        throttling = readings["throttling"].unwrap_or(None) is True

        cpu_severity = (
            classify(cpu_temp, THRESHOLDS[MetricDomain.CPU_TEMPERATURE])
            if cpu_temp is not None
            else Severity.INFO
        )
        gpu_severity = (
            classify(gpu_temp, THRESHOLDS[MetricDomain.GPU_TEMPERATURE])
            if gpu_temp is not None
            else Severity.INFO
        )

        severity = Severity.INFO
        recommendations: list[str] = []
        next_steps: list[ToolName] = []

        if cpu_severity is Severity.CRITICAL:
            severity = Severity.CRITICAL
            recommendations.append(
                "CPU temperature critical - shut down unnecessary applications immediately"
            )
            recommendations.append("Ensure proper ventilation and check for dust buildup")
            next_steps.append(ToolName.PERFORMANCE)
        elif throttling:
            severity = Severity.CRITICAL
            recommendations.append(
                "Thermal throttling detected - performance is being reduced to prevent overheating"
            )
            recommendations.append("Close resource-intensive applications and improve cooling")
            next_steps.append(ToolName.PERFORMANCE)
        elif cpu_severity is Severity.WARNING:
            severity = Severity.WARNING
            recommendations.append(f"CPU temperature elevated at {cpu_temp:g}°C - monitor closely")
            recommendations.append("Consider improving airflow or reducing workload")
        elif gpu_severity is Severity.WARNING:
            severity = Severity.WARNING
            recommendations.append(f"GPU temperature elevated at {gpu_temp:g}°C")
            recommendations.append("Close GPU-intensive applications if temperature persists")
        elif cpu_temp is not None:
            recommendations.append("Thermal status normal")
        else:
            recommendations.append(
                "Temperature monitoring unavailable - requires hardware sensors or elevated access"
            )

        if cpu_temp is not None:
            summary = f"CPU: {cpu_temp:g}°C"
            if gpu_temp is not None:
                summary += f", GPU: {gpu_temp:g}°C"
            if throttling:
                summary += " THROTTLING"
        else:
            summary = (
                "Temperature data unavailable (requires elevated privileges or hardware sensors)"
            )

        fans: list[FanReading] | None = readings["fans"].unwrap_or(None)
        if fans:
            fan_status = FanStatus(available=True, fans=fans)
        else:
            fan_status = FanStatus(
                available=False, note="Fan speed data not available through standard APIs"
            )

        now = datetime.now(UTC)
        self.logger.info("thermal_probe_computed", severity=severity.value, cpu_temp=cpu_temp)
        return ThermalReport(
            timestamp=now,
            severity=severity,
            cpu=Temperature(
                temperature_celsius=embed(readings["cpu"]),
                unit="°C" if cpu_temp is not None else "N/A",
            ),
            gpu=Temperature(
                temperature_celsius=embed(readings["gpu"]),
                unit="°C" if gpu_temp is not None else "N/A",
            ),
            thermal_throttling=embed(readings["throttling"]),
            fans=fan_status,
            actionable_summary=summary,
            recommendations=recommendations,
            next_steps_to_check=next_steps,
            cache_info=CacheInfo(cached_at=now, ttl_seconds=self.config.cache.thermal_ttl_seconds),
        )
