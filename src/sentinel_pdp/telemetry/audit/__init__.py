"""Audit logging for authorization decisions."""

from sentinel_pdp.telemetry.audit.decision_logger import (
    DecisionEventLogger,
    create_decision_logger,
)

__all__ = [
    "DecisionEventLogger",
    "create_decision_logger",
]
