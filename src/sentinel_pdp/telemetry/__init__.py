"""Telemetry domain: decision audit logging and system events.

Structure:
    audit/          Decision audit trail (decisions.jsonl)
                    - DecisionEventLogger: writes one event per evaluation
    models/         Pydantic models for log event types
    system/         Operational logs (stderr, optional system.jsonl)
"""

__all__: list[str] = []
