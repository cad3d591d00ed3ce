"""
Next-step guidance: which deep probe the client should call after triage.

Rules run in a fixed order so ties are deterministic; each probe appears at
most once and the list is truncated to ``limit`` (two by default), which
bounds the fan-out a single triage call can cause.
"""

from collections.abc import Iterable

from sysdiag.domain.models import SECURITY_DOMAINS, Alert, MetricDomain, Severity, ToolName
from sysdiag.domain.thresholds import THRESHOLDS

DEFAULT_MAX_NEXT_STEPS = 2


def _crosses_warning(value: float | None, domain: MetricDomain) -> bool:
    return value is not None and THRESHOLDS[domain].crosses_warning(value)


def recommend_next_steps(
    *,
    cpu_usage: float | None,
    memory_usage: float | None,
    disk_free: float | None,
    critical_alerts: Iterable[Alert],
    limit: int = DEFAULT_MAX_NEXT_STEPS,
) -> list[ToolName]:
    """
    Build the ordered, deduplicated recommendation set.

    ``None`` stands for an unavailable reading and never triggers a rule.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")

    steps: list[ToolName] = []

    def _add(tool: ToolName) -> None:
        if tool not in steps:
            steps.append(tool)

    if _crosses_warning(cpu_usage, MetricDomain.CPU_USAGE) or _crosses_warning(
        memory_usage, MetricDomain.MEMORY_USAGE
    ):
        _add(ToolName.PERFORMANCE)

    if _crosses_warning(disk_free, MetricDomain.DISK_FREE):
        _add(ToolName.SYSTEM_HEALTH)

    if any(
        alert.severity is Severity.CRITICAL and alert.domain in SECURITY_DOMAINS
        for alert in critical_alerts
    ):
        _add(ToolName.SYSTEM_HEALTH)

    return steps[:limit]
