"""Network probe: interfaces, internet reachability and attached devices."""

import structlog

from sysdiag.config import AppConfig
from sysdiag.domain.host import DeviceCounts, NetworkInterface
from sysdiag.domain.models import Reading, Severity, Unavailable, embed
from sysdiag.domain.reports import ConnectedDevices, Connectivity, NetworkReport
from sysdiag.services.cache import ReportCache
from sysdiag.services.collectors import FunctionCollector, HostPlatform, collect_readings

logger = structlog.get_logger(__name__)

CONNECTIVITY_CACHE_KEY = "get_network_status.connectivity"
ELEVATION_NOTE = "Device enumeration requires elevated permissions."


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _device_summary(reading: Reading) -> ConnectedDevices:
    counts: DeviceCounts | None = reading.unwrap_or(None)
    if counts is None:
        missing = (
            reading if isinstance(reading, Unavailable) else Unavailable(reason="no device data")
        )
        return ConnectedDevices(
            usb_devices=missing,
            bluetooth_devices=missing,
            total_connected_devices=missing,
            method="none",
            note=ELEVATION_NOTE,
        )

    def _count(value: int | None, what: str) -> int | Unavailable:
        return value if value is not None else Unavailable(reason=f"{what} count not available")

    partial = counts.usb_devices is None or counts.bluetooth_devices is None
    total = counts.total
    return ConnectedDevices(
        usb_devices=_count(counts.usb_devices, "USB"),
        bluetooth_devices=_count(counts.bluetooth_devices, "Bluetooth"),
        total_connected_devices=total if total is not None else Unavailable(reason="no counts"),
        method=counts.method,
        note=ELEVATION_NOTE if partial else None,
    )


class NetworkProbe:
    """
    Reachability is the expensive part, so only that check is cached (30s by
    default); interfaces and devices are read fresh on every call.
    """

    def __init__(self, host: HostPlatform, config: AppConfig, cache: ReportCache) -> None:
        self.host = host
        self.config = config
        self.cache = cache
        self.logger = logger.bind(component="network_probe")

    @property
    def checked_server(self) -> str:
        collection = self.config.collection
        return f"{collection.connectivity_host}:{collection.connectivity_port}"

    async def _check_connectivity(self) -> Connectivity:
        collection = self.config.collection
        try:
            connected = await self.host.internet_reachable(
                collection.connectivity_host,
                collection.connectivity_port,
                collection.connectivity_timeout_seconds,
            )
        except Exception as e:
            # Failed checks are cached too, to avoid hammering a dead network.
            self.logger.info("connectivity_check_failed", error=str(e))
            return Connectivity(
                connected=False,
                checked_server=self.checked_server,
                error="Unable to verify connectivity",
            )
        return Connectivity(connected=connected, checked_server=self.checked_server)

    async def connectivity(self) -> Connectivity:
        computed = False

        async def _compute() -> Connectivity:
            nonlocal computed
            computed = True
            return await self._check_connectivity()

        result = await self.cache.get_or_compute(
            CONNECTIVITY_CACHE_KEY, self.config.cache.connectivity_ttl_seconds, _compute
        )
        if not computed:
            return result.model_copy(update={"from_cache": True})
        return result

    async def run(self) -> NetworkReport:
        readings = await collect_readings(
            [
                FunctionCollector("interfaces", self.host.network_interfaces),
                FunctionCollector("connectivity", self.connectivity),
                FunctionCollector("devices", self.host.connected_devices),
            ],
            timeout=self.config.collection.collector_timeout_seconds,
        )

        interfaces: list[NetworkInterface] = readings["interfaces"].unwrap_or([])
        connectivity: Connectivity = readings["connectivity"].unwrap_or(
            Connectivity(
                connected=False,
                checked_server=self.checked_server,
                error="Unable to verify connectivity",
            )
        )
        devices = _device_summary(readings["devices"])
        devices_incomplete = isinstance(devices.usb_devices, Unavailable) or isinstance(
            devices.bluetooth_devices, Unavailable
        )

        recommendations: list[str] = []
        if not connectivity.connected:
            severity = Severity.CRITICAL
            recommendations.append("No internet connectivity detected")
            recommendations.append("Check network cables, Wi-Fi connection, or router status")
        elif devices_incomplete:
            severity = Severity.WARNING
            recommendations.append("Device enumeration incomplete - requires elevated permissions")
        else:
            severity = Severity.INFO
            recommendations.append("Network status normal")
            if isinstance(devices.total_connected_devices, int) and devices.total_connected_devices:
                recommendations.append(
                    f"Connected devices: {devices.total_connected_devices} "
                    f"({devices.usb_devices} USB, {devices.bluetooth_devices} Bluetooth)"
                )

        active = [i for i in interfaces if i.ipv4 or i.ipv6]
        if connectivity.connected:
            summary = f"Internet connected ({_plural(len(active), 'active interface')})"
            if isinstance(devices.total_connected_devices, int):
                summary += f". {_plural(devices.total_connected_devices, 'device')}"
        else:
            summary = (
                f"No internet connectivity - {_plural(len(active), 'interface')} "
                "detected but unreachable"
            )

        self.logger.info(
            "network_probe_completed",
            severity=severity.value,
            connected=connectivity.connected,
            from_cache=connectivity.from_cache,
        )
        return NetworkReport(
            severity=severity,
            interfaces=embed(readings["interfaces"]),
            internet_connectivity=connectivity,
            connected_devices=devices,
            actionable_summary=summary,
            recommendations=recommendations,
        )
