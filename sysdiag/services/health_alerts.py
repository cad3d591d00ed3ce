"""
Primary triage entrypoint.

Only cheap collectors are consulted here (CPU, memory, one disk volume and a
batched antivirus/firewall read). Thermal, network, battery and process
enumeration are left to the deep probes so that triage itself stays fast;
the report tells the caller which of those probes is worth running next.
"""

from datetime import UTC, datetime

import structlog

from sysdiag.config import AppConfig
from sysdiag.domain.host import SecurityStatus
from sysdiag.domain.models import (
    Alert,
    CacheInfo,
    MetricDomain,
    Reading,
    Severity,
    ToolName,
    Unavailable,
)
from sysdiag.domain.reports import AlertCount, HealthAlertsReport, QuickMetrics
from sysdiag.domain.thresholds import THRESHOLDS
from sysdiag.services.cache import ReportCache
from sysdiag.services.classifier import classify_protection, classify_reading
from sysdiag.services.collectors import FunctionCollector, HostPlatform, collect_readings
from sysdiag.services.recommender import recommend_next_steps
from sysdiag.services.scoring import calculate_health_score

logger = structlog.get_logger(__name__)

CACHE_KEY = ToolName.HEALTH_ALERTS.value

_MESSAGES = {
    MetricDomain.CPU_USAGE: ("CPU critically high: {value}%", "CPU elevated: {value}%"),
    MetricDomain.MEMORY_USAGE: ("Memory critically high: {value}%", "Memory elevated: {value}%"),
    MetricDomain.DISK_FREE: ("Disk space critical: {value}% free", "Low disk space: {value}% free"),
}


def format_number(value: float) -> str:
    """92.0 -> '92', 92.456 -> '92.46'."""
    return f"{round(value, 2):g}"


def _threshold_alert(domain: MetricDomain, reading: Reading) -> Alert | None:
    # Missing data is neutral on the triage path: it never raises an alert.
    severity = classify_reading(reading, THRESHOLDS[domain], when_unavailable=Severity.INFO)
    if severity is Severity.INFO:
        return None
    critical_message, warning_message = _MESSAGES[domain]
    template = critical_message if severity is Severity.CRITICAL else warning_message
    return Alert(
        severity=severity,
        domain=domain,
        message=template.format(value=format_number(float(reading.unwrap_or(0.0)))),
    )


def _protection_alert(domain: MetricDomain, active: bool | None, label: str) -> Alert | None:
    if active is None:
        return None
    if classify_protection(active) is Severity.INFO:
        return None
    return Alert(severity=Severity.CRITICAL, domain=domain, message=f"{label} is disabled")


def _as_metric(reading: Reading) -> float | Unavailable:
    if isinstance(reading, Unavailable):
        return reading
    return round(float(reading.value), 2)


def _as_flag(active: bool | None, reason: str) -> bool | Unavailable:
    return Unavailable(reason=reason) if active is None else active


def build_summary(
    critical: list[Alert], warning: list[Alert], info: list[Alert], score: int, steps: list[ToolName]
) -> str:
    """One-line, human-readable recommendation."""
    run = ", ".join(step.value for step in steps)
    if critical:
        issues = "; ".join(alert.message for alert in critical[:2])
        return f"CRITICAL: {issues}. Run: {run or ToolName.PERFORMANCE.value}"
    if warning:
        issues = "; ".join(alert.message for alert in warning[:2])
        return f"WARNING: {issues}. Run: {run or 'investigate further'}"
    if info:
        return f"INFO: System health good overall. {info[0].message}"
    return f"System healthy (score: {score}/100)"


class HealthAlertsService:
    """
    Orchestrates cheap collectors, classification, scoring and guidance.

    The result is cached for ``cache.alerts_ttl_seconds``; within that window
    every caller receives the very same report object.
    """

    def __init__(self, host: HostPlatform, config: AppConfig, cache: ReportCache) -> None:
        self.host = host
        self.config = config
        self.cache = cache
        self.logger = logger.bind(component="health_alerts")

    async def get_health_alerts(self) -> HealthAlertsReport:
        return await self.cache.get_or_compute(
            CACHE_KEY, self.config.cache.alerts_ttl_seconds, self._compute
        )

    async def _quick_disk_free(self) -> float:
        usage = await self.host.disk_usage(self.config.collection.disk_path)
        return usage.free_percent

    async def _quick_memory(self) -> float:
        return (await self.host.memory_usage()).usage_percent

    async def _compute(self) -> HealthAlertsReport:
        collectors = [
            FunctionCollector(MetricDomain.CPU_USAGE.value, self.host.cpu_usage_percent),
            FunctionCollector(MetricDomain.MEMORY_USAGE.value, self._quick_memory),
            FunctionCollector(MetricDomain.DISK_FREE.value, self._quick_disk_free),
            FunctionCollector("security", self.host.security_status),
        ]
        readings = await collect_readings(
            collectors, timeout=self.config.collection.collector_timeout_seconds
        )

        cpu = readings[MetricDomain.CPU_USAGE.value]
        memory = readings[MetricDomain.MEMORY_USAGE.value]
        disk = readings[MetricDomain.DISK_FREE.value]
        security = readings["security"].unwrap_or(SecurityStatus())
        security_reason = (
            readings["security"].reason
            if isinstance(readings["security"], Unavailable)
            else "status could not be determined"
        )

        # Fixed check order; the severity lists keep it.
        candidates = [
            _threshold_alert(MetricDomain.CPU_USAGE, cpu),
            _threshold_alert(MetricDomain.MEMORY_USAGE, memory),
            _threshold_alert(MetricDomain.DISK_FREE, disk),
            _protection_alert(
                MetricDomain.DEFENDER, security.defender_active, "Antivirus real-time protection"
            ),
            _protection_alert(MetricDomain.FIREWALL, security.firewall_active, "Firewall"),
        ]
        alerts = [alert for alert in candidates if alert is not None]
        critical = [a for a in alerts if a.severity is Severity.CRITICAL]
        warning = [a for a in alerts if a.severity is Severity.WARNING]
        info = [a for a in alerts if a.severity is Severity.INFO]

        health_score = calculate_health_score(len(critical), len(warning))
        next_steps = recommend_next_steps(
            cpu_usage=cpu.unwrap_or(None),
            memory_usage=memory.unwrap_or(None),
            disk_free=disk.unwrap_or(None),
            critical_alerts=critical,
            limit=self.config.triage.max_next_steps,
        )

        now = datetime.now(UTC)
        report = HealthAlertsReport(
            timestamp=now,
            critical=critical,
            warning=warning,
            info=info,
            alert_count=AlertCount(
                critical=len(critical),
                warning=len(warning),
                info=len(info),
                total=len(alerts),
            ),
            system_health_score=health_score,
            next_steps_to_check=next_steps,
            actionable_summary=build_summary(
                critical, warning, info, health_score.score, next_steps
            ),
            metrics=QuickMetrics(
                cpu_usage_percent=_as_metric(cpu),
                memory_usage_percent=_as_metric(memory),
                disk_free_percent=_as_metric(disk),
                defender_active=_as_flag(security.defender_active, security_reason),
                firewall_active=_as_flag(security.firewall_active, security_reason),
            ),
            cache_info=CacheInfo(cached_at=now, ttl_seconds=self.config.cache.alerts_ttl_seconds),
        )

        self.logger.info(
            "health_alerts_computed",
            critical=len(critical),
            warning=len(warning),
            score=health_score.score,
            next_steps=[step.value for step in next_steps],
        )
        return report
