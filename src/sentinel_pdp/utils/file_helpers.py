"""Shared file utilities for sentinel-pdp.

Provides common utilities used by config, policy files and repositories:
- get_app_dir: OS-appropriate application directory
- compute_file_checksum: SHA256 checksum for file integrity
- set_secure_permissions: Secure file/directory permissions
- require_file_exists: FileNotFoundError with an init hint
- read_json_file: Read and decode a JSON file with consistent errors
- load_validated_json: Read a JSON file and validate against a Pydantic model
- atomic_write_json: Write JSON via temp file + rename
"""

from __future__ import annotations

import hashlib
import json
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, TypeVar

import click
from pydantic import BaseModel, ValidationError

from sentinel_pdp.constants import APP_NAME

# Type variable for Pydantic models
T = TypeVar("T", bound=BaseModel)

__all__ = [
    # App directory
    "get_app_dir",
    # File operations
    "atomic_write_json",
    "compute_file_checksum",
    "load_validated_json",
    "read_json_file",
    "require_file_exists",
    "set_secure_permissions",
]


def get_app_dir() -> Path:
    """Get the OS-appropriate application directory.

    Uses click.get_app_dir() which returns:
    - macOS: ~/Library/Application Support/sentinel-pdp
    - Linux: ~/.config/sentinel-pdp (XDG compliant)
    - Windows: C:\\Users\\<user>\\AppData\\Roaming\\sentinel-pdp

    Returns:
        Path to the application directory.
    """
    return Path(click.get_app_dir(APP_NAME))


def compute_file_checksum(file_path: Path) -> str:
    """Compute SHA256 checksum of file content.

    Args:
        file_path: Path to the file.

    Returns:
        str: Checksum in format "sha256:<hex_digest>".

    Raises:
        FileNotFoundError: If file doesn't exist.
        OSError: If file cannot be read.
    """
    with open(file_path, "rb") as f:
        content = f.read()
    digest = hashlib.sha256(content).hexdigest()
    return f"sha256:{digest}"


def set_secure_permissions(path: Path, *, is_directory: bool = False) -> None:
    """Set secure permissions on file or directory.

    Sets permissions to restrict access to owner only:
    - Directory: 0o700 (rwx------)
    - File: 0o600 (rw-------)

    Does nothing on Windows. Silently ignores permission errors.

    Args:
        path: Path to file or directory.
        is_directory: If True, use directory permissions (0o700).
    """
    if sys.platform == "win32":
        return

    try:
        mode = 0o700 if is_directory else 0o600
        path.chmod(mode)
    except OSError:
        pass  # Permission changes might fail on some systems


def require_file_exists(
    file_path: Path,
    file_type: str = "file",
    init_hint: str | None = None,
) -> None:
    """Raise FileNotFoundError with helpful message if file doesn't exist.

    Args:
        file_path: Path to check.
        file_type: Description for error message (e.g., "configuration", "policy").
        init_hint: Command to suggest (e.g., "sentinel-pdp policy init").

    Raises:
        FileNotFoundError: If file doesn't exist.
    """
    if file_path.exists():
        return

    hint = f"\nRun '{init_hint}' to create a {file_type} file." if init_hint else ""
    raise FileNotFoundError(f"{file_type.capitalize()} file not found at {file_path}.{hint}")


def read_json_file(file_path: Path, file_type: str = "file") -> Any:
    """Read and decode a JSON file.

    Args:
        file_path: Path to JSON file.
        file_type: Description for error messages.

    Returns:
        The decoded JSON value.

    Raises:
        ValueError: If the file cannot be read or is not valid JSON.
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {file_type} file {file_path}: {e}") from e
    except OSError as e:
        raise ValueError(f"Could not read {file_type} file {file_path}: {e}") from e


def load_validated_json(
    file_path: Path,
    model_class: type[T],
    file_type: str = "file",
    recovery_hint: str | None = None,
) -> T:
    """Load JSON file and validate against Pydantic model.

    Args:
        file_path: Path to JSON file.
        model_class: Pydantic model class to validate against.
        file_type: Description for error messages (e.g., "config").
        recovery_hint: Optional hint appended to validation errors.

    Returns:
        Validated Pydantic model instance.

    Raises:
        ValueError: If JSON is invalid or validation fails.
    """
    data = read_json_file(file_path, file_type)

    try:
        return model_class.model_validate(data)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            errors.append(f"  - {loc}: {error['msg']}")

        hint = f"\n\n{recovery_hint}" if recovery_hint else ""
        raise ValueError(
            f"Invalid {file_type} configuration in {file_path}:\n" + "\n".join(errors) + hint
        ) from e


def atomic_write_json(data: Any, file_path: Path, *, prefix: str = ".sentinel_") -> None:
    """Write JSON to file atomically.

    Uses atomic write pattern: write to temp file, then rename. A reader
    never sees a half-written file.

    Creates parent directories if they don't exist.
    Sets secure permissions (0o700 on directory, 0o600 on file).

    Args:
        data: JSON-serializable value.
        file_path: Destination path.
        prefix: Temp file prefix.
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)
    set_secure_permissions(file_path.parent, is_directory=True)

    content = json.dumps(data, indent=2) + "\n"  # Trailing newline

    # Same directory ensures rename is atomic (same filesystem)
    fd, temp_path = tempfile.mkstemp(dir=file_path.parent, prefix=prefix, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        if sys.platform != "win32":
            os.chmod(temp_path, 0o600)

        os.replace(temp_path, file_path)

    except Exception:
        # Clean up temp file on failure
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise
