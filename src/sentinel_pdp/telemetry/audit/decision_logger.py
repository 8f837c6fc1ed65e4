"""Decision logging for policy evaluation.

This module provides logging for authorization decisions (allow/deny).
Logs are written to <log_dir>/audit/decisions.jsonl, or to stderr when no
log directory is configured.

Decision logs are ALWAYS enabled (not controlled by log_level). Allows are
logged at INFO, denies at WARNING.

A failure to write the audit entry never changes the decision: it is
reported on the system logger and dropped.
"""

from __future__ import annotations

__all__ = [
    "DECISION_LOGGER_NAME",
    "DecisionEventLogger",
    "create_decision_logger",
]

import logging
from pathlib import Path

from sentinel_pdp.constants import APP_NAME
from sentinel_pdp.telemetry.models.decision import DecisionEvent
from sentinel_pdp.telemetry.system.system_logger import get_system_logger
from sentinel_pdp.utils.logging.logger_setup import setup_jsonl_logger, setup_stream_jsonl_logger
from sentinel_pdp.utils.logging.logging_helpers import serialize_audit_event

DECISION_LOGGER_NAME = f"{APP_NAME}.audit.decisions"


def create_decision_logger(log_path: Path | None = None) -> logging.Logger:
    """Create logger for decision events.

    Args:
        log_path: Path to decisions.jsonl. If None, entries go to stderr.

    Returns:
        Configured logger instance.
    """
    if log_path is None:
        return setup_stream_jsonl_logger(DECISION_LOGGER_NAME, log_level=logging.INFO)
    return setup_jsonl_logger(DECISION_LOGGER_NAME, log_path, log_level=logging.INFO)


class DecisionEventLogger:
    """Writes one DecisionEvent per evaluation to the audit logger.

    Satisfies the DecisionAuditor protocol used by PolicyEngine.
    """

    def __init__(
        self,
        logger: logging.Logger | None = None,
        *,
        system_logger: logging.Logger | None = None,
    ) -> None:
        """Initialize decision event logger.

        Args:
            logger: Audit logger. Defaults to create_decision_logger() (stderr).
            system_logger: Where emission failures are reported.
        """
        self._logger = logger if logger is not None else create_decision_logger()
        self._system_logger = system_logger if system_logger is not None else get_system_logger()

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def log(self, event: DecisionEvent) -> None:
        """Log a decision event. Never raises.

        Args:
            event: The decision event to record.
        """
        try:
            event_data = serialize_audit_event(event)
            if event.allow:
                self._logger.info(event_data)
            else:
                self._logger.warning(event_data)
        except Exception as e:
            self._report_failure(event, e)

    def _report_failure(self, event: DecisionEvent, error: Exception) -> None:
        try:
            self._system_logger.error(
                {
                    "event": "audit_emit_failed",
                    "message": f"Failed to write decision audit event: {type(error).__name__}: {error}",
                    "user": event.user,
                    "action": event.action,
                    "allow": event.allow,
                }
            )
        except Exception:
            pass  # Nowhere left to report; the decision still stands
