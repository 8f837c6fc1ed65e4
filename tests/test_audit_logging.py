"""Unit tests for decision audit logging and the JSONL logging stack.

Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from __future__ import annotations

import io
import json
import logging
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from sentinel_pdp.context import DecisionRequest
from sentinel_pdp.pdp import Policy, PolicyEngine
from sentinel_pdp.pdp.protocol import DecisionAuditor
from sentinel_pdp.telemetry.audit import DecisionEventLogger, create_decision_logger
from sentinel_pdp.telemetry.models.decision import DecisionEvent
from sentinel_pdp.telemetry.system.system_logger import ConsoleFormatter
from sentinel_pdp.utils.logging.iso_formatter import ISO8601Formatter, utc_timestamp
from sentinel_pdp.utils.logging.logger_setup import setup_stream_jsonl_logger
from sentinel_pdp.utils.logging.logging_helpers import sanitize_for_logging, serialize_audit_event


@pytest.fixture
def allow_event() -> DecisionEvent:
    return DecisionEvent(
        timestamp="2025-03-01T12:30:45.123Z",
        user="s1",
        action="padron:edit",
        resource_type="padron",
        allow=True,
        policy_id="p1",
        reason="UA members can edit padron",
    )


@pytest.fixture
def deny_event() -> DecisionEvent:
    return DecisionEvent(
        timestamp="2025-03-01T12:30:45.123Z",
        user="s1",
        action="padron:edit",
        resource_type="padron",
        allow=False,
        reason="No matching policy",
    )


def _read_jsonl(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


class TestDecisionEventModel:
    """Tests for the DecisionEvent wire shape."""

    def test_serializes_camel_case_without_nulls(self, deny_event: DecisionEvent) -> None:
        # Act
        data = serialize_audit_event(deny_event)

        # Assert
        assert data == {
            "event": "authorization.decision",
            "timestamp": "2025-03-01T12:30:45.123Z",
            "user": "s1",
            "action": "padron:edit",
            "resourceType": "padron",
            "allow": False,
            "reason": "No matching policy",
        }

    def test_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValueError):
            DecisionEvent.model_validate(
                {
                    "timestamp": "t",
                    "user": "u",
                    "action": "a",
                    "resourceType": "r",
                    "allow": True,
                    "reason": "x",
                    "extra": 1,
                }
            )

    def test_serialization_sanitizes_strings(self) -> None:
        # Arrange
        event = DecisionEvent(
            timestamp="t", user="evil\nFAKE ENTRY", action="a", resource_type="r", allow=False, reason="x"
        )

        # Act
        data = serialize_audit_event(event)

        # Assert
        assert data["user"] == "evil\\nFAKE ENTRY"


class TestDecisionEventLogger:
    """Tests for DecisionEventLogger."""

    def test_satisfies_auditor_protocol(self) -> None:
        assert isinstance(DecisionEventLogger(MagicMock()), DecisionAuditor)

    def test_allow_logged_at_info(self, allow_event: DecisionEvent) -> None:
        # Arrange
        logger = MagicMock()

        # Act
        DecisionEventLogger(logger).log(allow_event)

        # Assert
        logger.info.assert_called_once()
        logger.warning.assert_not_called()
        assert logger.info.call_args[0][0]["policyId"] == "p1"

    def test_deny_logged_at_warning(self, deny_event: DecisionEvent) -> None:
        logger = MagicMock()

        DecisionEventLogger(logger).log(deny_event)

        logger.warning.assert_called_once()
        logger.info.assert_not_called()

    def test_writes_jsonl_file(self, tmp_path: Path, allow_event: DecisionEvent) -> None:
        # Arrange
        log_path = tmp_path / "audit" / "decisions.jsonl"
        auditor = DecisionEventLogger(create_decision_logger(log_path))

        # Act
        auditor.log(allow_event)

        # Assert
        (entry,) = _read_jsonl(log_path)
        assert entry["event"] == "authorization.decision"
        assert entry["policyId"] == "p1"
        assert entry["time"].endswith("Z")

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_log_file_is_owner_only(self, tmp_path: Path) -> None:
        log_path = tmp_path / "audit" / "decisions.jsonl"

        create_decision_logger(log_path)

        assert log_path.stat().st_mode & 0o777 == 0o600

    def test_write_failure_is_reported_not_raised(self, allow_event: DecisionEvent) -> None:
        # Arrange
        logger = MagicMock()
        logger.info.side_effect = OSError("disk full")
        system_logger = MagicMock()

        # Act
        DecisionEventLogger(logger, system_logger=system_logger).log(allow_event)

        # Assert
        system_logger.error.assert_called_once()
        assert system_logger.error.call_args[0][0]["event"] == "audit_emit_failed"

    def test_engine_writes_one_line_per_decision(self, tmp_path: Path) -> None:
        # Arrange
        log_path = tmp_path / "decisions.jsonl"
        engine = PolicyEngine(auditor=DecisionEventLogger(create_decision_logger(log_path)))
        request = DecisionRequest.model_validate(
            {"subject": {"sub": "u1"}, "action": "doc:read", "resource": {"type": "doc"}}
        )

        # Act
        engine.evaluate(request, [Policy(id="p", description="readers", actions=["doc:read"])])
        engine.evaluate(request, [])

        # Assert
        entries = _read_jsonl(log_path)
        assert [e["allow"] for e in entries] == [True, False]
        assert entries[0]["reason"] == "readers"
        assert "policyId" not in entries[1]


class TestJsonlFormatting:
    """Tests for the ISO 8601 JSONL formatter and stream logger."""

    def test_utc_timestamp_format(self) -> None:
        from datetime import datetime, timedelta, timezone

        moment = datetime(2025, 1, 2, 5, 4, 3, 7000, tzinfo=timezone(timedelta(hours=2)))

        assert utc_timestamp(moment) == "2025-01-02T03:04:03.007Z"

    def test_formats_dict_message(self) -> None:
        # Arrange
        record = logging.LogRecord("x", logging.INFO, __file__, 1, {"event": "e", "n": 1}, None, None)

        # Act
        line = ISO8601Formatter().format(record)

        # Assert
        data = json.loads(line)
        assert list(data)[0] == "time"
        assert data["event"] == "e"
        assert data["n"] == 1

    def test_formats_plain_message(self) -> None:
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello %s", ("world",), None)

        assert json.loads(ISO8601Formatter().format(record))["message"] == "hello world"

    def test_stream_logger_writes_jsonl(self) -> None:
        # Arrange
        stream = io.StringIO()
        logger = setup_stream_jsonl_logger("sentinel-pdp.test.stream", stream)

        # Act
        logger.info({"event": "ping"})

        # Assert
        assert json.loads(stream.getvalue())["event"] == "ping"

    def test_stream_logger_setup_is_idempotent(self) -> None:
        stream = io.StringIO()
        setup_stream_jsonl_logger("sentinel-pdp.test.idem", stream)
        logger = setup_stream_jsonl_logger("sentinel-pdp.test.idem", stream)

        logger.info({"event": "once"})

        assert len(stream.getvalue().splitlines()) == 1

    def test_console_formatter_uses_message(self) -> None:
        record = logging.LogRecord(
            "x", logging.WARNING, __file__, 1, {"event": "e", "message": "readable"}, None, None
        )

        assert ConsoleFormatter().format(record) == "WARNING: readable"

    def test_sanitize_escapes_control_characters(self) -> None:
        assert sanitize_for_logging("a\r\nb\tc") == "a\\r\\nb\\tc"
