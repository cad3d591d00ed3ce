"""Battery probe: charge, power source, wear and power plan."""

import structlog

from sysdiag.config import AppConfig
from sysdiag.domain.host import BatteryInfo
from sysdiag.domain.models import MetricDomain, Severity, Unavailable, embed
from sysdiag.domain.reports import BatteryReport
from sysdiag.domain.thresholds import THRESHOLDS
from sysdiag.services.classifier import classify, max_severity
from sysdiag.services.collectors import FunctionCollector, HostPlatform, collect_readings

logger = structlog.get_logger(__name__)

NO_BATTERY = Unavailable(reason="no battery detected")


class BatteryProbe:
    """
    Reports battery state with low-privilege queries only.

    Charge is only classified while discharging: a laptop at 15% on AC power
    is charging, not in trouble. Desktops without a battery are reported as
    such with info severity.
    """

    def __init__(self, host: HostPlatform, config: AppConfig) -> None:
        self.host = host
        self.config = config
        self.logger = logger.bind(component="battery_probe")

    async def run(self) -> BatteryReport:
        readings = await collect_readings(
            [
                FunctionCollector("battery", self.host.battery),
                FunctionCollector("health", self.host.battery_health_percent),
                FunctionCollector("power_plan", self.host.power_plan),
            ],
            timeout=self.config.collection.collector_timeout_seconds,
        )
        power_plan = embed(readings["power_plan"])
        plan_text = power_plan if isinstance(power_plan, str) else "Unknown"

        battery_reading = readings["battery"]
        if isinstance(battery_reading, Unavailable):
            self.logger.info("battery_data_unavailable", reason=battery_reading.reason)
            return BatteryReport(
                has_battery=False,
                charge_percent=battery_reading,
                status="Unknown",
                health_percent=battery_reading,
                power_plan=power_plan,
                seconds_left=battery_reading,
                note="Limited battery data available. The system may restrict battery telemetry.",
                actionable_summary=f"Power plan: {plan_text}. Full battery data unavailable.",
                recommendations=["Run with elevated privileges for detailed battery information"],
            )

        battery: BatteryInfo | None = battery_reading.value
        if battery is None:
            return BatteryReport(
                has_battery=False,
                charge_percent=NO_BATTERY,
                status="Desktop System",
                health_percent=NO_BATTERY,
                power_plan=power_plan,
                seconds_left=NO_BATTERY,
                note="No battery detected. Desktop system or battery unavailable.",
                actionable_summary="Desktop system without battery. This is normal.",
                recommendations=[
                    "No action needed - battery data not applicable to desktop systems"
                ],
            )

        severities = []
        recommendations = []
        if battery.status == "Discharging":
            charge_severity = classify(
                battery.charge_percent, THRESHOLDS[MetricDomain.BATTERY_CHARGE]
            )
            severities.append(charge_severity)
            if charge_severity is Severity.CRITICAL:
                recommendations.append("Battery critically low - connect to power now")
            elif charge_severity is Severity.WARNING:
                recommendations.append("Consider connecting to power soon")

        health: float | None = readings["health"].unwrap_or(None)
        if health is not None:
            health_severity = classify(health, THRESHOLDS[MetricDomain.BATTERY_HEALTH])
            severities.append(health_severity)
            if health_severity is not Severity.INFO:
                recommendations.append(
                    f"Battery health degraded to {health:g}% of design capacity - "
                    "consider a replacement"
                )

        severity = max_severity(severities)
        if not recommendations:
            recommendations.append("Battery status normal")

        summary = f"Battery: {battery.charge_percent:g}% ({battery.status})"
        if health is not None:
            summary += f", health {health:g}%"

        self.logger.info(
            "battery_probe_completed", severity=severity.value, charge=battery.charge_percent
        )
        return BatteryReport(
            severity=severity,
            has_battery=True,
            charge_percent=battery.charge_percent,
            status=battery.status,
            health_percent=embed(readings["health"]),
            power_plan=power_plan,
            seconds_left=(
                battery.seconds_left
                if battery.seconds_left is not None
                else Unavailable(reason="time remaining not reported")
            ),
            actionable_summary=summary,
            recommendations=recommendations,
        )
