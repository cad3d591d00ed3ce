"""Derived health score: only the alert counts matter, never their order."""

from collections.abc import Iterable

from sysdiag.domain.models import Alert, HealthScore, HealthStatus, Severity

CRITICAL_PENALTY = 15
WARNING_PENALTY = 5


def calculate_health_score(critical_count: int, warning_count: int) -> HealthScore:
    """score = clamp(100 - 15*critical - 5*warning, 0, 100), banded at 80/60/40."""
    if critical_count < 0 or warning_count < 0:
        raise ValueError("alert counts cannot be negative")

    score = 100 - CRITICAL_PENALTY * critical_count - WARNING_PENALTY * warning_count
    score = max(0, min(100, score))

    if score >= 80:
        status = HealthStatus.GOOD
    elif score >= 60:
        status = HealthStatus.FAIR
    elif score >= 40:
        status = HealthStatus.POOR
    else:
        status = HealthStatus.CRITICAL

    return HealthScore(score=score, status=status)


def score_alerts(alerts: Iterable[Alert]) -> HealthScore:
    critical = warning = 0
    for alert in alerts:
        if alert.severity is Severity.CRITICAL:
            critical += 1
        elif alert.severity is Severity.WARNING:
            warning += 1
    return calculate_health_score(critical, warning)
