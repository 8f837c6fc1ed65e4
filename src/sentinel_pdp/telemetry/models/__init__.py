"""Pydantic models for telemetry logs."""

from sentinel_pdp.telemetry.models.decision import DecisionEvent

__all__ = [
    "DecisionEvent",
]
