"""Structured values returned by host collectors."""

from typing import Literal

from pydantic import Field

from sysdiag.domain.models import ReportModel


class MemoryUsage(ReportModel):
    total_gb: float = Field(ge=0.0)
    used_gb: float = Field(ge=0.0)
    free_gb: float = Field(ge=0.0)
    usage_percent: float = Field(ge=0.0, le=100.0)


class DiskUsage(ReportModel):
    total_gb: float = Field(ge=0.0)
    used_gb: float = Field(ge=0.0)
    free_gb: float = Field(ge=0.0)
    usage_percent: float = Field(ge=0.0, le=100.0)

    @property
    def free_percent(self) -> float:
        return round(100.0 - self.usage_percent, 2)


class DiskIO(ReportModel):
    read_mbps: float = Field(ge=0.0)
    write_mbps: float = Field(ge=0.0)


class ProcessInfo(ReportModel):
    name: str
    pid: int
    cpu_seconds: float = Field(ge=0.0, description="Accumulated CPU time")
    memory_mb: float = Field(ge=0.0)


class SecurityStatus(ReportModel):
    """Batched antivirus/firewall quick-read; None means it could not be determined."""

    defender_active: bool | None = None
    firewall_active: bool | None = None


BatteryState = Literal["Discharging", "AC Power", "Fully Charged", "Unknown"]


class BatteryInfo(ReportModel):
    charge_percent: float = Field(ge=0.0, le=100.0)
    status: BatteryState
    seconds_left: int | None = None


class FanReading(ReportModel):
    label: str
    rpm: float = Field(ge=0.0)


class NetworkInterface(ReportModel):
    name: str
    ipv4: str | None = None
    ipv6: str | None = None
    mac: str | None = None


class DeviceCounts(ReportModel):
    """Connected peripheral counts; None where the host could not enumerate them."""

    usb_devices: int | None = None
    bluetooth_devices: int | None = None
    method: str = "unknown"

    @property
    def total(self) -> int | None:
        if self.usb_devices is None and self.bluetooth_devices is None:
            return None
        return (self.usb_devices or 0) + (self.bluetooth_devices or 0)


class HostInfo(ReportModel):
    hostname: str
    platform: str
    arch: str
    cpu_count: int = Field(ge=0)
