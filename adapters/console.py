"""
Terminal triage: renders the health alerts report with rich.

    sysdiag                      # triage panel
    sysdiag --tool get_thermal_status
"""

import argparse
import asyncio
import json

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from adapters.system import LocalHost
from sysdiag.config import get_config
from sysdiag.domain.models import Severity, ToolName
from sysdiag.domain.reports import HealthAlertsReport
from sysdiag.services.toolkit import DiagnosticsToolkit
from sysdiag.telemetry import configure_logging

SEVERITY_STYLES = {
    Severity.CRITICAL: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


def render_health_alerts(report: HealthAlertsReport, console: Console) -> None:
    score = report.system_health_score
    if report.critical:
        border = "red"
    elif report.warning:
        border = "yellow"
    else:
        border = "green"

    console.print(
        Panel(
            report.actionable_summary,
            title=f"Health score {score.score}/100 ({score.status.value})",
            border_style=border,
        )
    )

    alerts = [*report.critical, *report.warning, *report.info]
    if alerts:
        table = Table(title="Alerts")
        table.add_column("Severity")
        table.add_column("Domain")
        table.add_column("Message")
        for alert in alerts:
            table.add_row(
                f"[{SEVERITY_STYLES[alert.severity]}]{alert.severity.value}[/]",
                alert.domain.value,
                alert.message,
            )
        console.print(table)

    if report.next_steps_to_check:
        steps = ", ".join(step.value for step in report.next_steps_to_check)
        console.print(f"Next steps: [bold]{steps}[/]")


async def run(tool: str, console: Console) -> int:
    config = get_config()
    toolkit = DiagnosticsToolkit(LocalHost(config.collection), config)
    outcome = await toolkit.invoke(tool)
    if isinstance(outcome.payload, HealthAlertsReport):
        render_health_alerts(outcome.payload, console)
    else:
        console.print_json(json.dumps(outcome.to_dict()))
    return 1 if outcome.is_error else 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Local host health triage")
    parser.add_argument(
        "--tool",
        default=ToolName.HEALTH_ALERTS.value,
        choices=[tool.value for tool in ToolName],
        help="tool to run (default: triage)",
    )
    args = parser.parse_args()

    configure_logging(get_config().logging)
    raise SystemExit(asyncio.run(run(args.tool, Console())))


if __name__ == "__main__":
    main()
