"""System health probe: protection, updates, event-log errors and disk space."""

from dataclasses import dataclass, field
from typing import Any

import structlog

from sysdiag.config import AppConfig
from sysdiag.domain.host import DiskUsage, SecurityStatus
from sysdiag.domain.models import MetricDomain, Reading, Severity, ToolName, Unavailable
from sysdiag.domain.reports import (
    DiskHealth,
    ProtectionStatus,
    SystemHealthReport,
    SystemLogStatus,
    UpdateStatus,
)
from sysdiag.domain.thresholds import THRESHOLDS
from sysdiag.services.classifier import classify
from sysdiag.services.collectors import FunctionCollector, HostPlatform, collect_readings

logger = structlog.get_logger(__name__)


@dataclass
class Findings:
    """Accumulated outcome of the system health checks, in check order."""

    critical: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    next_steps: list[ToolName] = field(default_factory=list)

    @property
    def severity(self) -> Severity:
        if self.critical:
            return Severity.CRITICAL
        if self.warnings:
            return Severity.WARNING
        return Severity.INFO


def evaluate(
    *,
    defender_active: bool | None,
    firewall_active: bool | None,
    disk_free: float | None,
    errors_24h: int | None,
    pending_updates: int | None,
) -> Findings:
    """
    Pure reduction of the collected values into findings.

    None means the value could not be read and produces no finding. Warnings
    are only gathered when no check came out critical.
    """
    findings = Findings()
    disk_severity = (
        classify(disk_free, THRESHOLDS[MetricDomain.DISK_FREE]) if disk_free is not None else None
    )
    errors_severity = (
        classify(errors_24h, THRESHOLDS[MetricDomain.SYSTEM_ERRORS])
        if errors_24h is not None
        else None
    )

    if defender_active is False:
        findings.critical.append("Antivirus real-time protection is disabled")
        findings.recommendations.append("Enable antivirus real-time protection immediately")
    if firewall_active is False:
        findings.critical.append("Firewall is disabled")
        findings.recommendations.append("Enable the firewall for all network profiles")
    if disk_severity is Severity.CRITICAL:
        findings.critical.append(f"Disk space critically low: {disk_free:g}% free")
        findings.recommendations.append("Free up disk space immediately")
    if errors_severity is Severity.CRITICAL:
        findings.critical.append(f"High number of system errors: {errors_24h} in last 24h")
        findings.recommendations.append("Review the system event log for recurring errors")
        findings.next_steps.append(ToolName.PERFORMANCE)

    if findings.critical:
        return findings

    if disk_severity is Severity.WARNING:
        findings.warnings.append(f"Low disk space: {disk_free:g}% free")
        findings.recommendations.append("Consider cleaning up temporary files")
    if errors_severity is Severity.WARNING:
        findings.warnings.append(f"Elevated system errors: {errors_24h} in last 24h")
    if pending_updates:
        findings.warnings.append(f"{pending_updates} updates pending")
        findings.recommendations.append("Install pending updates")

    return findings


def _summary(findings: Findings) -> str:
    if findings.critical:
        return f"CRITICAL: {'; '.join(findings.critical)}"
    if findings.warnings:
        return f"{len(findings.warnings)} warning(s): {'; '.join(findings.warnings)}"
    return "System healthy (no critical issues or warnings)"


def _field(reading: Reading, value: Any) -> Any:
    return reading if isinstance(reading, Unavailable) else value


class SystemHealthProbe:
    def __init__(self, host: HostPlatform, config: AppConfig) -> None:
        self.host = host
        self.config = config
        self.logger = logger.bind(component="system_health_probe")

    async def _disk(self) -> DiskUsage:
        return await self.host.disk_usage(self.config.collection.disk_path)

    async def run(self) -> SystemHealthReport:
        readings = await collect_readings(
            [
                FunctionCollector("security", self.host.security_status),
                FunctionCollector("updates", self.host.pending_updates),
                FunctionCollector("errors", self.host.system_errors_24h),
                FunctionCollector("disk", self._disk),
            ],
            timeout=self.config.collection.collector_timeout_seconds,
        )

        security: SecurityStatus = readings["security"].unwrap_or(SecurityStatus())
        pending: int | None = readings["updates"].unwrap_or(None)
        errors: int | None = readings["errors"].unwrap_or(None)
        disk: DiskUsage | None = readings["disk"].unwrap_or(None)
        disk_free = disk.free_percent if disk is not None else None

        findings = evaluate(
            defender_active=security.defender_active,
            firewall_active=security.firewall_active,
            disk_free=disk_free,
            errors_24h=errors,
            pending_updates=pending,
        )
        if not findings.recommendations:
            findings.recommendations.append("System health normal")

        def _protection(name: str, active: bool | None) -> ProtectionStatus:
            if active is None:
                reason = (
                    readings["security"].reason
                    if isinstance(readings["security"], Unavailable)
                    else "status could not be determined"
                )
                return ProtectionStatus(name=name, active=Unavailable(reason=reason))
            return ProtectionStatus(name=name, active=active)

        disk_threshold = THRESHOLDS[MetricDomain.DISK_FREE]
        errors_threshold = THRESHOLDS[MetricDomain.SYSTEM_ERRORS]

        self.logger.info(
            "system_health_probe_completed",
            severity=findings.severity.value,
            critical=len(findings.critical),
            warnings=len(findings.warnings),
        )
        return SystemHealthReport(
            severity=findings.severity,
            antivirus=_protection("Antivirus", security.defender_active),
            firewall=_protection("Firewall", security.firewall_active),
            updates=UpdateStatus(
                pending=_field(readings["updates"], bool(pending)),
                count=_field(readings["updates"], pending),
            ),
            system_logs=SystemLogStatus(
                errors_24h=_field(readings["errors"], errors),
                critical=_field(
                    readings["errors"],
                    errors is not None and errors_threshold.crosses_critical(errors),
                ),
            ),
            disk=DiskHealth(
                percent_free=_field(readings["disk"], disk_free),
                warning=disk_free is not None and disk_threshold.crosses_warning(disk_free),
                critical=disk_free is not None and disk_threshold.crosses_critical(disk_free),
            ),
            critical_issues=findings.critical,
            warnings=findings.warnings,
            actionable_summary=_summary(findings),
            recommendations=findings.recommendations,
            next_steps_to_check=findings.next_steps,
        )
