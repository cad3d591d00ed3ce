"""Severity classification against the threshold table."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from sysdiag.domain.models import MetricDomain, Severity, Unavailable, Value
from sysdiag.domain.thresholds import THRESHOLDS, Threshold
from sysdiag.services.classifier import (
    classify,
    classify_protection,
    classify_reading,
    max_severity,
)


class TestThresholdBoundaries:
    @pytest.mark.parametrize(
        ("domain", "value", "expected"),
        [
            (MetricDomain.CPU_USAGE, 80.0, Severity.INFO),
            (MetricDomain.CPU_USAGE, 80.1, Severity.WARNING),
            (MetricDomain.CPU_USAGE, 90.0, Severity.WARNING),
            (MetricDomain.CPU_USAGE, 90.5, Severity.CRITICAL),
            (MetricDomain.MEMORY_USAGE, 85.0, Severity.INFO),
            (MetricDomain.MEMORY_USAGE, 88.0, Severity.WARNING),
            (MetricDomain.MEMORY_USAGE, 91.0, Severity.CRITICAL),
            (MetricDomain.DISK_FREE, 20.0, Severity.INFO),
            (MetricDomain.DISK_FREE, 19.9, Severity.WARNING),
            (MetricDomain.DISK_FREE, 5.0, Severity.WARNING),
            (MetricDomain.DISK_FREE, 4.9, Severity.CRITICAL),
            (MetricDomain.BATTERY_CHARGE, 24.0, Severity.WARNING),
            (MetricDomain.BATTERY_CHARGE, 9.0, Severity.CRITICAL),
            (MetricDomain.BATTERY_HEALTH, 79.0, Severity.WARNING),
            (MetricDomain.BATTERY_HEALTH, 10.0, Severity.WARNING),
            (MetricDomain.CPU_TEMPERATURE, 86.0, Severity.WARNING),
            (MetricDomain.CPU_TEMPERATURE, 96.0, Severity.CRITICAL),
            (MetricDomain.GPU_TEMPERATURE, 120.0, Severity.WARNING),
            (MetricDomain.SYSTEM_ERRORS, 4, Severity.INFO),
            (MetricDomain.SYSTEM_ERRORS, 5, Severity.WARNING),
            (MetricDomain.SYSTEM_ERRORS, 10, Severity.WARNING),
            (MetricDomain.SYSTEM_ERRORS, 11, Severity.CRITICAL),
        ],
    )
    def test_classification(self, domain: MetricDomain, value: float, expected: Severity) -> None:
        assert classify(value, THRESHOLDS[domain]) is expected

    def test_critical_bound_must_be_beyond_warning(self) -> None:
        with pytest.raises(ValueError):
            Threshold(warning=90, critical=80, direction="above")
        with pytest.raises(ValueError):
            Threshold(warning=5, critical=20, direction="below")


class TestStatelessness:
    @given(
        domain=st.sampled_from(list(THRESHOLDS)),
        value=st.floats(min_value=0, max_value=200, allow_nan=False),
    )
    def test_same_input_same_severity(self, domain: MetricDomain, value: float) -> None:
        threshold = THRESHOLDS[domain]

        assert classify(value, threshold) is classify(value, threshold)

    def test_oscillating_value_oscillates_severity(self) -> None:
        threshold = THRESHOLDS[MetricDomain.CPU_USAGE]
        values = [79.0, 81.0, 79.0, 81.0]

        assert [classify(v, threshold) for v in values] == [
            Severity.INFO,
            Severity.WARNING,
            Severity.INFO,
            Severity.WARNING,
        ]


class TestReadings:
    def test_available_reading_is_classified(self) -> None:
        severity = classify_reading(
            Value(value=95.0),
            THRESHOLDS[MetricDomain.CPU_USAGE],
            when_unavailable=Severity.WARNING,
        )

        assert severity is Severity.CRITICAL

    def test_unavailable_reading_uses_caller_policy(self) -> None:
        reading = Unavailable(reason="sensor missing")
        threshold = THRESHOLDS[MetricDomain.DISK_FREE]

        assert classify_reading(reading, threshold, when_unavailable=Severity.INFO) is Severity.INFO
        assert (
            classify_reading(reading, threshold, when_unavailable=Severity.WARNING)
            is Severity.WARNING
        )

    def test_protection(self) -> None:
        assert classify_protection(True) is Severity.INFO
        assert classify_protection(False) is Severity.CRITICAL


class TestMaxSeverity:
    def test_empty_is_info(self) -> None:
        assert max_severity([]) is Severity.INFO

    @given(st.lists(st.sampled_from(list(Severity)), min_size=1))
    def test_critical_wins(self, levels: list[Severity]) -> None:
        result = max_severity(levels)

        assert all(result.rank >= level.rank for level in levels)
        assert result in levels
