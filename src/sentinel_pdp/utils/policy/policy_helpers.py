"""Policy loader - load and save the ordered policy list.

The persisted representation is a JSON array of policy objects. Array
order is priority order and is preserved on every read and write.

Features:
- Whole-list validation with every error reported at once
- Atomic writes with secure file permissions (0o700 dir, 0o600 file)
- SHA256 checksum for change detection
"""

from __future__ import annotations

__all__ = [
    "compute_policy_checksum",
    "create_default_policy_file",
    "get_policy_dir",
    "get_policy_path",
    "load_policies",
    "policy_exists",
    "save_policies",
]

from collections.abc import Iterable
from pathlib import Path

from sentinel_pdp.constants import POLICY_FILENAME
from sentinel_pdp.pdp.policy import Policy, validate_policies
from sentinel_pdp.utils.file_helpers import (
    atomic_write_json,
    compute_file_checksum,
    get_app_dir,
    read_json_file,
    require_file_exists,
)

POLICY_INIT_COMMAND = "sentinel-pdp policy init"


def get_policy_dir() -> Path:
    """Get the OS-appropriate directory holding the policy file.

    Returns:
        Path to the application directory.
    """
    return get_app_dir()


def get_policy_path() -> Path:
    """Get the full path to the default policy file.

    Returns:
        Path to policies.json in the application directory.
    """
    return get_policy_dir() / POLICY_FILENAME


def compute_policy_checksum(policy_path: Path) -> str:
    """Compute SHA256 checksum of policy file content.

    Args:
        policy_path: Path to the policy file.

    Returns:
        str: Checksum in format "sha256:<hex_digest>".

    Raises:
        FileNotFoundError: If policy file doesn't exist.
    """
    return compute_file_checksum(policy_path)


def load_policies(path: Path | None = None) -> list[Policy]:
    """Load and validate the policy list from file.

    Args:
        path: Path to policies.json. If None, uses default location.

    Returns:
        Validated policies in file order.

    Raises:
        FileNotFoundError: If policy file does not exist.
        ValueError: If the file is not valid JSON.
        PolicyValidationError: If any policy is invalid or ids repeat.
    """
    policy_path = path or get_policy_path()
    require_file_exists(policy_path, file_type="policy", init_hint=POLICY_INIT_COMMAND)

    raw = read_json_file(policy_path, file_type="policy")
    return validate_policies(raw, source=str(policy_path))


def save_policies(policies: Iterable[Policy], path: Path | None = None) -> None:
    """Save the policy list to file atomically.

    The list is validated before anything is written, so an invalid list
    (e.g. duplicate ids) never replaces a good file.

    Args:
        policies: Policies in priority order.
        path: Path to save to. If None, uses default location.

    Raises:
        PolicyValidationError: If the list is invalid.
    """
    policy_path = path or get_policy_path()
    validated = validate_policies(list(policies), source=str(policy_path))
    atomic_write_json([p.to_wire() for p in validated], policy_path, prefix=".policies_")


def policy_exists(path: Path | None = None) -> bool:
    """Check if policy file exists.

    Args:
        path: Path to check. If None, uses default location.

    Returns:
        True if policy file exists.
    """
    policy_path = path or get_policy_path()
    return policy_path.exists()


def create_default_policy_file(path: Path | None = None) -> Path:
    """Create an empty policy file (deny everything) if it doesn't exist.

    Args:
        path: Path to create. If None, uses default location.

    Returns:
        The path that was written.

    Raises:
        FileExistsError: If policy file already exists.
    """
    policy_path = path or get_policy_path()

    if policy_path.exists():
        raise FileExistsError(f"Policy file already exists: {policy_path}")

    save_policies([], policy_path)
    return policy_path
