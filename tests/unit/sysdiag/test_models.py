"""Domain models: readings, immutability and wire format."""

import pytest
from pydantic import TypeAdapter

from sysdiag.domain.models import (
    Alert,
    CacheInfo,
    MetricDomain,
    Reading,
    Severity,
    Unavailable,
    Value,
    embed,
)
from sysdiag.domain.reports import Connectivity, ToolError


class TestReadings:
    def test_discriminated_on_kind(self) -> None:
        adapter = TypeAdapter(Reading)

        assert adapter.validate_python({"kind": "value", "value": 12.5}) == Value(value=12.5)
        assert adapter.validate_python({"kind": "unavailable", "reason": "x"}) == Unavailable(
            reason="x"
        )

    def test_embed(self) -> None:
        missing = Unavailable(reason="no sensor")

        assert embed(Value(value=3)) == 3
        assert embed(missing) is missing

    def test_unavailable_serialises_with_reason(self) -> None:
        assert Unavailable(reason="timed out after 5s").model_dump() == {
            "kind": "unavailable",
            "reason": "timed out after 5s",
        }


class TestSeverity:
    def test_total_order(self) -> None:
        assert Severity.INFO.rank < Severity.WARNING.rank < Severity.CRITICAL.rank


class TestWireFormat:
    def test_alert_is_frozen(self) -> None:
        alert = Alert(severity=Severity.WARNING, domain=MetricDomain.CPU_USAGE, message="x")

        with pytest.raises(ValueError, match="frozen"):
            alert.message = "y"  # type: ignore[misc]

    def test_camel_case_aliases(self) -> None:
        dumped = Connectivity(connected=True, checked_server="8.8.8.8:53").model_dump(
            mode="json", by_alias=True
        )

        assert dumped == {
            "connected": True,
            "checkedServer": "8.8.8.8:53",
            "fromCache": False,
            "error": None,
        }

    def test_populate_by_field_name_or_alias(self) -> None:
        info = CacheInfo.model_validate({"cachedAt": "2026-01-01T00:00:00Z", "ttlSeconds": 3})

        assert info.ttl_seconds == 3.0

    def test_tool_error(self) -> None:
        error = ToolError(error="Unknown tool: nope", tool="nope")

        assert error.model_dump(by_alias=True) == {"error": "Unknown tool: nope", "tool": "nope"}
