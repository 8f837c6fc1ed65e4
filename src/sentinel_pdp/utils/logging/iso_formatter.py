"""Log formatting utilities for JSONL output.

Provides ISO 8601 timestamp formatting for JSONL logs.
"""

from __future__ import annotations

__all__ = ["ISO8601Formatter", "utc_timestamp"]

import json
import logging
from datetime import datetime, timezone


def utc_timestamp(moment: datetime | None = None) -> str:
    """Format a datetime as YYYY-MM-DDTHH:MM:SS.sssZ (UTC).

    Args:
        moment: Time to format. Naive datetimes are taken as UTC.
            Defaults to now.

    Returns:
        ISO 8601 string with millisecond precision and a "Z" suffix.
    """
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ISO8601Formatter(logging.Formatter):
    """Custom formatter with ISO 8601 timestamps (UTC) for JSONL output.

    Format: YYYY-MM-DDTHH:MM:SS.sssZ
    Example: 2025-12-04T10:48:37.123Z
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSONL with ISO 8601 timestamp.

        Args:
            record: The log record to format

        Returns:
            str: JSON-formatted log entry with timestamp
        """
        timestamp = utc_timestamp(datetime.fromtimestamp(record.created, tz=timezone.utc))

        # Handle dict messages (structured logging)
        if isinstance(record.msg, dict):
            log_data = record.msg
        # Handle JSON string messages
        elif isinstance(record.msg, str) and record.msg.startswith("{"):
            try:
                log_data = json.loads(record.msg)
            except json.JSONDecodeError:
                log_data = {"message": record.getMessage()}
        # Handle plain string/other messages
        else:
            log_data = {"message": record.getMessage()}

        # Add timestamp as first field
        log_entry = {"time": timestamp, **log_data}
        return json.dumps(log_entry, default=str)
