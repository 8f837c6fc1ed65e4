"""Logger setup utilities for creating JSONL loggers.

This module provides generic setup functions for creating loggers that write
JSONL with ISO 8601 timestamps either to a file or to a stream:
- setup_jsonl_logger: File-backed logger (audit trail, system.jsonl)
- setup_stream_jsonl_logger: Stream-backed logger (stderr when no log_dir)

Both replace any handlers previously attached to the same logger name, so
calling them twice does not duplicate output.
"""

from __future__ import annotations

__all__ = [
    "setup_jsonl_logger",
    "setup_stream_jsonl_logger",
]

import logging
import sys
from pathlib import Path
from typing import TextIO

from sentinel_pdp.utils.logging.iso_formatter import ISO8601Formatter


def _ensure_secure_log_directory(log_file: Path) -> None:
    """Create log directory with secure permissions.

    Args:
        log_file: Path to the log file (parent directory will be created).

    Raises:
        PermissionError: If unable to create log directory due to permissions.
        OSError: If directory creation fails for other reasons.
    """
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        # Set owner-only permissions (0o700) - skip on Windows
        if sys.platform != "win32":
            try:
                log_file.parent.chmod(0o700)
            except OSError:
                pass  # Permission changes might fail on some systems
    except PermissionError as e:
        raise PermissionError(f"Cannot create log directory {log_file.parent}: {e}") from e
    except OSError as e:
        raise OSError(f"Failed to create log directory {log_file.parent}: {e}") from e


def _reset_logger(logger_name: str, log_level: int) -> logging.Logger:
    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)
    logger.propagate = False  # Don't propagate to root logger

    # Close and remove any existing handlers to avoid duplicates and resource leaks
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    return logger


def setup_jsonl_logger(
    logger_name: str,
    log_file: Path,
    log_level: int = logging.INFO,
) -> logging.Logger:
    """Set up a logger that writes JSONL with ISO 8601 timestamps.

    Creates log directory if it doesn't exist with secure permissions (owner-only: 700).

    Args:
        logger_name: Name for the logger (e.g., "sentinel-pdp.audit.decisions")
        log_file: Path to the log file
        log_level: Logging level (default: INFO)

    Returns:
        logging.Logger: Configured logger instance

    Raises:
        PermissionError: If unable to create log directory due to permissions
        OSError: If directory creation fails for other reasons
    """
    _ensure_secure_log_directory(log_file)

    logger = _reset_logger(logger_name, log_level)

    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    file_handler.setLevel(log_level)
    file_handler.setFormatter(ISO8601Formatter())
    logger.addHandler(file_handler)

    # Owner read/write only; audit entries carry subject identifiers
    if sys.platform != "win32":
        try:
            log_file.chmod(0o600)
        except OSError:
            pass

    return logger


def setup_stream_jsonl_logger(
    logger_name: str,
    stream: TextIO | None = None,
    log_level: int = logging.INFO,
) -> logging.Logger:
    """Set up a logger that writes JSONL lines to a stream.

    Args:
        logger_name: Name for the logger.
        stream: Output stream (default: sys.stderr at emit time).
        log_level: Logging level (default: INFO)

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = _reset_logger(logger_name, log_level)

    stream_handler = logging.StreamHandler(stream)
    stream_handler.setLevel(log_level)
    stream_handler.setFormatter(ISO8601Formatter())
    logger.addHandler(stream_handler)

    return logger
