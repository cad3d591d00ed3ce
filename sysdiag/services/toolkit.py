"""
Tool dispatch: the single entrypoint transports call into.

The toolkit owns the process-wide report cache and one instance of every
component, maps tool names onto them and converts any failure into a
structured ``ToolError`` so that one bad call never takes the process down.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError

from sysdiag.config import AppConfig, get_config
from sysdiag.domain.models import ToolName
from sysdiag.domain.reports import ToolError
from sysdiag.services.cache import ReportCache
from sysdiag.services.collectors import HostPlatform
from sysdiag.services.health_alerts import HealthAlertsService
from sysdiag.services.probes import (
    BatteryProbe,
    FullHealthSnapshot,
    NetworkProbe,
    PerformanceOptions,
    PerformanceProbe,
    SystemHealthProbe,
    ThermalProbe,
)

logger = structlog.get_logger(__name__)

NO_ARGUMENTS: dict[str, Any] = {"type": "object", "properties": {}}


@dataclass(frozen=True)
class ToolSpec:
    name: ToolName
    description: str
    input_schema: dict[str, Any]


def _performance_schema() -> dict[str, Any]:
    schema = PerformanceOptions.model_json_schema(by_alias=True)
    schema.pop("title", None)
    for prop in schema.get("properties", {}).values():
        prop.pop("title", None)
    return schema


TOOL_SPECS: tuple[ToolSpec, ...] = (
    ToolSpec(
        ToolName.HEALTH_ALERTS,
        "START HERE. Fast triage of CPU, memory, disk space and security protection. "
        "Returns categorized alerts, a 0-100 health score and which deeper tools to "
        "call next. Cached for a few seconds.",
        NO_ARGUMENTS,
    ),
    ToolSpec(
        ToolName.PERFORMANCE,
        "Detailed CPU, memory, disk I/O and top processes. Use when triage reports "
        "high CPU or memory usage.",
        _performance_schema(),
    ),
    ToolSpec(
        ToolName.BATTERY,
        "Battery charge, power source, battery wear and active power plan.",
        NO_ARGUMENTS,
    ),
    ToolSpec(
        ToolName.THERMAL,
        "CPU/GPU temperatures, thermal throttling and fan status. Use when the "
        "system feels slow or hot.",
        NO_ARGUMENTS,
    ),
    ToolSpec(
        ToolName.NETWORK,
        "Network interfaces, internet connectivity and connected USB/Bluetooth devices.",
        NO_ARGUMENTS,
    ),
    ToolSpec(
        ToolName.SYSTEM_HEALTH,
        "Antivirus, firewall, pending updates, system log errors and disk space. "
        "Use when triage reports security or disk issues.",
        NO_ARGUMENTS,
    ),
    ToolSpec(
        ToolName.FULL_REPORT,
        "Legacy raw snapshot: host info, CPU, memory, disk, uptime and process count. "
        "Prefer get_health_alerts.",
        NO_ARGUMENTS,
    ),
)


@dataclass(frozen=True)
class ToolOutcome:
    """A report (or ``ToolError``) and whether it represents a failure."""

    payload: BaseModel
    is_error: bool = False

    def to_json(self) -> str:
        return self.payload.model_dump_json(by_alias=True, indent=2)

    def to_dict(self) -> dict[str, Any]:
        return self.payload.model_dump(mode="json", by_alias=True)


class UnknownToolError(LookupError):
    """Raised for a tool name the toolkit does not expose."""


class DiagnosticsToolkit:
    """
    Process-scoped composition root.

    A cache can be injected (tests pass one with a fake clock); otherwise the
    toolkit creates its own, shared by every component it builds.
    """

    def __init__(
        self,
        host: HostPlatform,
        config: AppConfig | None = None,
        cache: ReportCache | None = None,
    ) -> None:
        self.config = config or get_config()
        self.cache = cache or ReportCache()
        self.host = host
        self.logger = logger.bind(component="diagnostics_toolkit")

        self.health_alerts = HealthAlertsService(host, self.config, self.cache)
        self.performance = PerformanceProbe(host, self.config)
        self.battery = BatteryProbe(host, self.config)
        self.thermal = ThermalProbe(host, self.config, self.cache)
        self.network = NetworkProbe(host, self.config, self.cache)
        self.system_health = SystemHealthProbe(host, self.config)
        self.snapshot = FullHealthSnapshot(host, self.config)

        self._handlers: dict[ToolName, Callable[[dict[str, Any]], Awaitable[BaseModel]]] = {
            ToolName.HEALTH_ALERTS: lambda _: self.health_alerts.get_health_alerts(),
            ToolName.PERFORMANCE: self._run_performance,
            ToolName.BATTERY: lambda _: self.battery.run(),
            ToolName.THERMAL: lambda _: self.thermal.run(),
            ToolName.NETWORK: lambda _: self.network.run(),
            ToolName.SYSTEM_HEALTH: lambda _: self.system_health.run(),
            ToolName.FULL_REPORT: lambda _: self.snapshot.run(),
        }

    @staticmethod
    def tool_specs() -> tuple[ToolSpec, ...]:
        return TOOL_SPECS

    @staticmethod
    def _resolve(name: str) -> ToolName:
        try:
            return ToolName(name)
        except ValueError as e:
            raise UnknownToolError(f"Unknown tool: {name}") from e

    async def _run_performance(self, arguments: dict[str, Any]) -> BaseModel:
        options = PerformanceOptions.model_validate(arguments)
        return await self.performance.run(options)

    async def invoke(self, name: str, arguments: dict[str, Any] | None = None) -> ToolOutcome:
        """Run one tool by name. Never raises for tool-level failures."""
        try:
            report = await self._handlers[self._resolve(name)](arguments or {})
        except UnknownToolError as e:
            self.logger.warning("unknown_tool", tool=name)
            return ToolOutcome(payload=ToolError(error=str(e), tool=name), is_error=True)
        except ValidationError as e:
            self.logger.warning("tool_arguments_invalid", tool=name, errors=e.error_count())
            return ToolOutcome(
                payload=ToolError(error=f"Invalid arguments: {e}", tool=name), is_error=True
            )
        except Exception as e:
            self.logger.exception("tool_invocation_failed", tool=name, error=str(e))
            return ToolOutcome(payload=ToolError(error=str(e), tool=name), is_error=True)

        self.logger.debug("tool_invoked", tool=name)
        return ToolOutcome(payload=report)
