"""Logging helper utilities.

Provides generic utilities for telemetry logging:
- Event serialization (audit event model_dump with consistent options)
- Sanitization (log injection prevention)
"""

from __future__ import annotations

__all__ = [
    "sanitize_for_logging",
    "serialize_audit_event",
]

from typing import Any

from pydantic import BaseModel


def serialize_audit_event(event: BaseModel) -> dict[str, Any]:
    """Serialize a Pydantic event model for audit logging.

    Provides consistent serialization for all audit events:
    - Uses field aliases (camelCase wire names)
    - Excludes None values for cleaner logs
    - Sanitizes string values against log injection

    Args:
        event: Pydantic model instance (e.g., DecisionEvent).

    Returns:
        dict: Serialized event data ready for logging.

    Example:
        >>> serialize_audit_event(DecisionEvent(user="s1", allow=False, ...))
        {"event": "authorization.decision", "user": "s1", "allow": False, ...}
    """
    data = event.model_dump(mode="json", by_alias=True, exclude_none=True)
    return {k: sanitize_for_logging(v) if isinstance(v, str) else v for k, v in data.items()}


def sanitize_for_logging(value: str) -> str:
    """Sanitize string values for safe logging.

    Prevents log injection by escaping newlines and control characters.
    Subject ids and actions come from callers; a crafted value must not be
    able to break the line-oriented format or forge console entries.

    Args:
        value: String value to sanitize.

    Returns:
        str: Sanitized string.

    Example:
        >>> sanitize_for_logging("user\\nfake entry")
        'user\\\\nfake entry'
    """
    if not isinstance(value, str):
        return str(value)

    sanitized = value.replace("\n", "\\n").replace("\r", "\\r")
    sanitized = sanitized.replace("\t", "\\t")
    return sanitized
