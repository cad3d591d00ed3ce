"""Linux-only readings from sysfs and the systemd journal."""

from pathlib import Path

from sysdiag.domain.host import DeviceCounts
from sysdiag.domain.models import MetricUnavailableError

from .shell import run_command

POWER_SUPPLY = Path("/sys/class/power_supply")
USB_DEVICES = Path("/sys/bus/usb/devices")
BLUETOOTH = Path("/sys/class/bluetooth")


def _read_number(path: Path) -> float:
    return float(path.read_text().strip())


def battery_health_percent(root: Path = POWER_SUPPLY) -> float:
    """Full-charge capacity as a percentage of design capacity."""
    for supply in sorted(root.glob("BAT*")):
        for full, design in (
            ("energy_full", "energy_full_design"),
            ("charge_full", "charge_full_design"),
        ):
            full_path, design_path = supply / full, supply / design
            if full_path.exists() and design_path.exists():
                design_value = _read_number(design_path)
                if design_value <= 0:
                    continue
                return round(min(100.0, _read_number(full_path) / design_value * 100), 1)
    raise MetricUnavailableError("battery design capacity not exposed by sysfs")


def connected_devices(usb_root: Path = USB_DEVICES, bt_root: Path = BLUETOOTH) -> DeviceCounts:
    """
    Count USB peripherals and Bluetooth controllers.

    Root hubs (``usbN``) and interface nodes (``1-1:1.0``) are not devices.
    """
    usb: int | None = None
    if usb_root.is_dir():
        usb = sum(
            1
            for entry in usb_root.iterdir()
            if not entry.name.startswith("usb") and ":" not in entry.name
        )
    bluetooth: int | None = None
    if bt_root.is_dir():
        bluetooth = sum(1 for entry in bt_root.iterdir() if ":" not in entry.name)
    return DeviceCounts(usb_devices=usb, bluetooth_devices=bluetooth, method="sysfs")


async def system_errors_24h(timeout: float) -> int:
    output = await run_command(
        "journalctl", "-p", "err", "--since", "24 hours ago", "-q", "--no-pager", "-o", "cat",
        timeout=timeout,
    )
    return sum(1 for line in output.splitlines() if line.strip())
