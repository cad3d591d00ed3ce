"""
Report shapes returned by the primary entrypoint and the deep probes.

Every report is immutable once built; a newer computation supersedes it.
Sub-metrics that could not be collected are embedded as ``Unavailable``
values carrying the reason, never dropped or replaced by zero.
"""

from datetime import UTC, datetime

from pydantic import Field

from sysdiag.domain.host import (
    BatteryState,
    DiskUsage,
    FanReading,
    HostInfo,
    MemoryUsage,
    NetworkInterface,
    ProcessInfo,
)
from sysdiag.domain.models import (
    Alert,
    CacheInfo,
    HealthScore,
    ReportModel,
    Severity,
    ToolName,
    Unavailable,
)


def utc_now() -> datetime:
    return datetime.now(UTC)


class AlertCount(ReportModel):
    critical: int = Field(ge=0)
    warning: int = Field(ge=0)
    info: int = Field(ge=0)
    total: int = Field(ge=0)


class QuickMetrics(ReportModel):
    """The cheap readings the primary entrypoint examined."""

    cpu_usage_percent: float | Unavailable
    memory_usage_percent: float | Unavailable
    disk_free_percent: float | Unavailable
    defender_active: bool | Unavailable
    firewall_active: bool | Unavailable


class HealthAlertsReport(ReportModel):
    timestamp: datetime = Field(default_factory=utc_now)
    critical: tuple[Alert, ...] = ()
    warning: tuple[Alert, ...] = ()
    info: tuple[Alert, ...] = ()
    alert_count: AlertCount
    system_health_score: HealthScore
    next_steps_to_check: tuple[ToolName, ...] = ()
    actionable_summary: str
    metrics: QuickMetrics
    cache_info: CacheInfo


class ProbeReport(ReportModel):
    """Shape shared by all deep probes."""

    timestamp: datetime = Field(default_factory=utc_now)
    severity: Severity = Severity.INFO
    actionable_summary: str
    recommendations: tuple[str, ...] = ()
    next_steps_to_check: tuple[ToolName, ...] = ()
    cache_info: CacheInfo | None = None


class CpuStats(ReportModel):
    usage_percent: float | Unavailable
    core_count: int = Field(ge=0)


class DiskIOStats(ReportModel):
    read_mbps: float | Unavailable
    write_mbps: float | Unavailable


class PerformanceReport(ProbeReport):
    cpu: CpuStats
    memory: MemoryUsage | Unavailable
    disk_io: DiskIOStats
    top_processes: tuple[ProcessInfo, ...] | str


class BatteryReport(ProbeReport):
    has_battery: bool
    charge_percent: float | Unavailable
    status: BatteryState | str
    health_percent: float | Unavailable
    power_plan: str | Unavailable
    seconds_left: int | Unavailable
    note: str | None = None


class Temperature(ReportModel):
    temperature_celsius: float | Unavailable
    unit: str = "°C"


class FanStatus(ReportModel):
    available: bool
    fans: tuple[FanReading, ...] = ()
    note: str | None = None


class ThermalReport(ProbeReport):
    cpu: Temperature
    gpu: Temperature
    thermal_throttling: bool | Unavailable
    fans: FanStatus


class Connectivity(ReportModel):
    connected: bool
    checked_server: str
    from_cache: bool = False
    error: str | None = None


class ConnectedDevices(ReportModel):
    usb_devices: int | Unavailable
    bluetooth_devices: int | Unavailable
    total_connected_devices: int | Unavailable
    method: str
    note: str | None = None


class NetworkReport(ProbeReport):
    interfaces: tuple[NetworkInterface, ...] | Unavailable
    internet_connectivity: Connectivity
    connected_devices: ConnectedDevices


class ProtectionStatus(ReportModel):
    name: str
    active: bool | Unavailable


class UpdateStatus(ReportModel):
    pending: bool | Unavailable
    count: int | Unavailable


class SystemLogStatus(ReportModel):
    errors_24h: int | Unavailable
    critical: bool | Unavailable


class DiskHealth(ReportModel):
    percent_free: float | Unavailable
    warning: bool
    critical: bool


class SystemHealthReport(ProbeReport):
    antivirus: ProtectionStatus
    firewall: ProtectionStatus
    updates: UpdateStatus
    system_logs: SystemLogStatus
    disk: DiskHealth
    critical_issues: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


class Uptime(ReportModel):
    uptime_seconds: float | Unavailable
    formatted: str | Unavailable


class FullHealthReport(ReportModel):
    """Legacy consolidated snapshot: raw data, no classification."""

    timestamp: datetime = Field(default_factory=utc_now)
    system: HostInfo
    cpu_usage_percent: float | Unavailable
    memory: MemoryUsage | Unavailable
    disk: DiskUsage | Unavailable
    uptime: Uptime
    process_count: int | Unavailable


class ToolError(ReportModel):
    """Structured error document returned instead of a report."""

    error: str
    tool: str
