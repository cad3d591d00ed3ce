"""
Core services for host health triage.

This package contains the collector fan-out, the pure decision logic
(classification, scoring and next-step guidance), the report cache, the
primary triage entrypoint and the deep probes.
"""

from .cache import ReportCache
from .collectors import FunctionCollector, HostPlatform, MetricCollector, collect_readings
from .health_alerts import HealthAlertsService
from .toolkit import DiagnosticsToolkit, ToolOutcome

__all__ = [
    "DiagnosticsToolkit",
    "FunctionCollector",
    "HealthAlertsService",
    "HostPlatform",
    "MetricCollector",
    "ReportCache",
    "ToolOutcome",
    "collect_readings",
]
