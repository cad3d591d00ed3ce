"""
Severity classification.

Pure, stateless functions: the same reading and threshold always give the
same severity. There is no hysteresis, so a value oscillating around a bound
produces correspondingly oscillating severities.
"""

from collections.abc import Iterable

from sysdiag.domain.models import Reading, Severity
from sysdiag.domain.thresholds import Threshold


def classify(value: float, threshold: Threshold) -> Severity:
    """Map one numeric reading onto a severity level."""
    if threshold.crosses_critical(value):
        return Severity.CRITICAL
    if threshold.crosses_warning(value):
        return Severity.WARNING
    return Severity.INFO


def classify_reading(
    reading: Reading, threshold: Threshold, *, when_unavailable: Severity
) -> Severity:
    """
    Classify a reading that may be unavailable.

    The caller owns the policy for missing data through ``when_unavailable``;
    an unavailable reading is never fed through the numeric bounds.
    """
    if not reading.is_available():
        return when_unavailable
    return classify(float(reading.unwrap_or(0.0)), threshold)


def classify_protection(active: bool) -> Severity:
    """A disabled antivirus or firewall is always critical."""
    return Severity.INFO if active else Severity.CRITICAL


def max_severity(severities: Iterable[Severity]) -> Severity:
    """Reduce a set of severities to the most severe one (info when empty)."""
    return max(severities, key=lambda s: s.rank, default=Severity.INFO)
