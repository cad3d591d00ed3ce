"""
Per-domain severity thresholds.

Comparisons are strict unless a bound is marked inclusive: a CPU reading of
exactly 90% is a warning, not critical. The system error count is the one
mixed case: five errors already warn, but only more than ten is critical.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from sysdiag.domain.models import MetricDomain

Direction = Literal["above", "below"]


class Threshold(BaseModel):
    """Warning/critical bounds for one domain and the direction they apply in."""

    model_config = ConfigDict(frozen=True)

    warning: float
    critical: float | None = Field(default=None, description="None means warning-only")
    direction: Direction
    inclusive_warning: bool = False
    inclusive_critical: bool = False

    @model_validator(mode="after")
    def critical_beyond_warning(self) -> "Threshold":
        """The critical bound must be at least as extreme as the warning bound."""
        if self.critical is None:
            return self
        if self.direction == "above" and self.critical < self.warning:
            raise ValueError("critical bound must not be below warning for 'above' thresholds")
        if self.direction == "below" and self.critical > self.warning:
            raise ValueError("critical bound must not be above warning for 'below' thresholds")
        return self

    def crosses(self, value: float, bound: float, inclusive: bool) -> bool:
        if self.direction == "above":
            return value >= bound if inclusive else value > bound
        return value <= bound if inclusive else value < bound

    def crosses_warning(self, value: float) -> bool:
        return self.crosses(value, self.warning, self.inclusive_warning)

    def crosses_critical(self, value: float) -> bool:
        if self.critical is None:
            return False
        return self.crosses(value, self.critical, self.inclusive_critical)


THRESHOLDS: dict[MetricDomain, Threshold] = {
    MetricDomain.CPU_USAGE: Threshold(warning=80, critical=90, direction="above"),
    MetricDomain.MEMORY_USAGE: Threshold(warning=85, critical=90, direction="above"),
    MetricDomain.DISK_FREE: Threshold(warning=20, critical=5, direction="below"),
    MetricDomain.BATTERY_CHARGE: Threshold(warning=25, critical=10, direction="below"),
    MetricDomain.BATTERY_HEALTH: Threshold(warning=80, direction="below"),
    MetricDomain.CPU_TEMPERATURE: Threshold(warning=85, critical=95, direction="above"),
    MetricDomain.GPU_TEMPERATURE: Threshold(warning=85, direction="above"),
    MetricDomain.SYSTEM_ERRORS: Threshold(
        warning=5, critical=10, direction="above", inclusive_warning=True
    ),
}

# Disk read rate above which the performance probe calls out heavy I/O.
HIGH_DISK_READ_MBPS = 100.0
