"""
Windows-only queries that psutil does not cover.

Every query runs through PowerShell with low-privilege cmdlets and returns a
parsed Python value. Output that cannot be parsed raises
``MetricUnavailableError`` so the caller records the metric as unavailable.
"""

import asyncio

import structlog

from sysdiag.domain.host import DeviceCounts, SecurityStatus
from sysdiag.domain.models import MetricUnavailableError

from .shell import CommandError, run_powershell

logger = structlog.get_logger(__name__)

DEFENDER_DISABLED = (
    "Get-MpPreference | Select-Object -ExpandProperty DisableRealtimeMonitoring"
)
FIREWALL_ENABLED_PROFILES = (
    "Get-NetFirewallProfile | Where-Object {$_.Enabled -eq $true} "
    "| Measure-Object | Select-Object -ExpandProperty Count"
)
PENDING_UPDATES = (
    "Get-CimInstance -Namespace root\\ccm\\clientSDK -ClassName CCM_SoftwareUpdate "
    "-Filter 'ComplianceState=0' | Measure-Object | Select-Object -ExpandProperty Count"
)
SYSTEM_ERRORS_24H = (
    "Get-WinEvent -FilterHashtable @{LogName='System'; Level=2; "
    "StartTime=(Get-Date).AddHours(-24)} -ErrorAction SilentlyContinue "
    "| Measure-Object | Select-Object -ExpandProperty Count"
)
THROTTLING = (
    "Get-CimInstance Win32_Processor | Select-Object -First 1 "
    "@{Name='Throttling';Expression={$_.CurrentClockSpeed -lt $_.MaxClockSpeed}} "
    "| Select-Object -ExpandProperty Throttling"
)
ACTIVE_POWER_PLAN = (
    "Get-CimInstance -Namespace root\\cimv2\\power -ClassName Win32_PowerPlan "
    "-Filter 'IsActive=true' | Select-Object -ExpandProperty ElementName"
)
CPU_TEMPERATURE = (
    "Get-CimInstance MSAcpi_ThermalZoneTemperature -Namespace root/wmi "
    "| Select-Object -First 1 -ExpandProperty CurrentTemperature"
)
PNP_DEVICE_COUNT = (
    "Get-PnpDevice -PresentOnly | Where-Object {{$_.Class -eq '{device_class}'}} "
    "| Measure-Object | Select-Object -ExpandProperty Count"
)


def parse_int(output: str, what: str) -> int:
    try:
        return int(output.strip().splitlines()[0])
    except (ValueError, IndexError) as e:
        raise MetricUnavailableError(f"unexpected {what} output: {output[:80]!r}") from e


def parse_bool(output: str, what: str) -> bool:
    value = output.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    raise MetricUnavailableError(f"unexpected {what} output: {output[:80]!r}")


async def _defender_active(timeout: float) -> bool | None:
    try:
        disabled = parse_bool(await run_powershell(DEFENDER_DISABLED, timeout), "defender")
    except (CommandError, MetricUnavailableError) as e:
        logger.debug("defender_status_unknown", error=str(e))
        return None
    return not disabled


async def _firewall_active(timeout: float) -> bool | None:
    try:
        profiles = parse_int(await run_powershell(FIREWALL_ENABLED_PROFILES, timeout), "firewall")
    except (CommandError, MetricUnavailableError) as e:
        logger.debug("firewall_status_unknown", error=str(e))
        return None
    return profiles > 0


async def security_status(timeout: float) -> SecurityStatus:
    """Antivirus and firewall state queried together; a failed query leaves its field unknown."""
    defender_active, firewall_active = await asyncio.gather(
        _defender_active(timeout), _firewall_active(timeout)
    )
    return SecurityStatus(defender_active=defender_active, firewall_active=firewall_active)


async def pending_updates(timeout: float) -> int:
    return parse_int(await run_powershell(PENDING_UPDATES, timeout), "pending updates")


async def system_errors_24h(timeout: float) -> int:
    output = await run_powershell(SYSTEM_ERRORS_24H, timeout)
    # Get-WinEvent prints nothing at all when no event matches.
    return parse_int(output or "0", "event log")


async def thermal_throttling(timeout: float) -> bool:
    return parse_bool(await run_powershell(THROTTLING, timeout), "throttling")


async def power_plan(timeout: float) -> str:
    plan = await run_powershell(ACTIVE_POWER_PLAN, timeout)
    if not plan:
        raise MetricUnavailableError("no active power plan reported")
    return plan


async def cpu_temperature(timeout: float) -> float:
    """ACPI thermal zone temperature; WMI reports tenths of a kelvin."""
    raw = parse_int(await run_powershell(CPU_TEMPERATURE, timeout), "thermal zone")
    return round((raw - 2732) / 10, 1)


async def connected_devices(timeout: float) -> DeviceCounts:
    counts: dict[str, int | None] = {}
    for device_class in ("USB", "Bluetooth"):
        script = PNP_DEVICE_COUNT.format(device_class=device_class)
        try:
            counts[device_class] = parse_int(await run_powershell(script, timeout), device_class)
        except (CommandError, MetricUnavailableError) as e:
            logger.debug("device_count_unavailable", device_class=device_class, error=str(e))
            counts[device_class] = None
    return DeviceCounts(
        usb_devices=counts["USB"],
        bluetooth_devices=counts["Bluetooth"],
        method="Get-PnpDevice",
    )
