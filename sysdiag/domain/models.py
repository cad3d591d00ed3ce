"""
Domain models for host health triage.

These models represent the core concepts shared by the aggregator and the
deep probes. Readings are a tagged union so that "no data" is never confused
with a number; everything that leaves the process is camelCase JSON.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ReportModel(BaseModel):
    """Base for anything serialised at the transport boundary."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Severity(str, Enum):
    """Alert severity levels, totally ordered info < warning < critical."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.CRITICAL: 2}


class MetricDomain(str, Enum):
    """Domains a reading or alert can belong to."""

    CPU_USAGE = "cpu_usage"
    MEMORY_USAGE = "memory_usage"
    DISK_FREE = "disk_free_percent"
    DEFENDER = "defender_active"
    FIREWALL = "firewall_active"
    BATTERY_CHARGE = "battery_charge"
    BATTERY_HEALTH = "battery_health"
    CPU_TEMPERATURE = "cpu_temperature"
    GPU_TEMPERATURE = "gpu_temperature"
    THERMAL_THROTTLING = "thermal_throttling"
    CONNECTIVITY = "connectivity"
    CONNECTED_DEVICES = "connected_devices"
    SYSTEM_ERRORS = "system_errors"
    PENDING_UPDATES = "pending_updates"


SECURITY_DOMAINS = frozenset({MetricDomain.DEFENDER, MetricDomain.FIREWALL})


class ToolName(str, Enum):
    """Operations exposed to the client."""

    HEALTH_ALERTS = "get_health_alerts"
    PERFORMANCE = "get_performance_stats"
    BATTERY = "get_battery_status"
    THERMAL = "get_thermal_status"
    NETWORK = "get_network_status"
    SYSTEM_HEALTH = "get_system_health"
    FULL_REPORT = "get_full_health_report"


class Value(BaseModel):
    """A successfully collected reading."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["value"] = "value"
    value: Any

    def is_available(self) -> bool:
        return True

    def unwrap_or(self, default: Any) -> Any:
        return self.value


class Unavailable(BaseModel):
    """Explicit marker for a reading that could not be collected."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unavailable"] = "unavailable"
    reason: str = Field(default="unavailable", description="Why the data is missing")

    def is_available(self) -> bool:
        return False

    def unwrap_or(self, default: Any) -> Any:
        return default


Reading = Annotated[Value | Unavailable, Field(discriminator="kind")]


class MetricUnavailableError(RuntimeError):
    """Raised by host adapters when a metric cannot be read on this host."""


class Alert(ReportModel):
    """One classified finding."""

    severity: Severity
    domain: MetricDomain
    message: str


class HealthStatus(str, Enum):
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"
    CRITICAL = "Critical"


class HealthScore(ReportModel):
    score: int = Field(ge=0, le=100)
    status: HealthStatus


class CacheInfo(ReportModel):
    """When a cached report was computed and how long it stays valid."""

    cached_at: datetime = Field(description="UTC timestamp of computation")
    ttl_seconds: float = Field(gt=0.0)


def embed(reading: Reading) -> Any:
    """Unwrap a reading for a report field: the value itself, or the ``Unavailable`` marker."""
    return reading.value if isinstance(reading, Value) else reading
