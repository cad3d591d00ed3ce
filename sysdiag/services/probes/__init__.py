"""
Deep probes: domain-scoped, slower inspections the triage report points to.

Each probe fetches its own richer metrics concurrently, classifies them with
the shared classifier and returns a report with recommendations and the
next probes worth calling.
"""

from .battery import BatteryProbe
from .network import NetworkProbe
from .performance import PerformanceOptions, PerformanceProbe
from .snapshot import FullHealthSnapshot
from .system_health import SystemHealthProbe
from .thermal import ThermalProbe

__all__ = [
    "BatteryProbe",
    "FullHealthSnapshot",
    "NetworkProbe",
    "PerformanceOptions",
    "PerformanceProbe",
    "SystemHealthProbe",
    "ThermalProbe",
]
