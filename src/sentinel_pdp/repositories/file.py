"""JSON file policy repository.

Stores the ordered policy list as a JSON array on disk.

Reads validate the whole file and fail loudly on any invalid record. The
validated list is cached and reused until the file's mtime or size
changes, so repeated decisions do not re-parse an unchanged file.

Writes go through save_policies (temp file + os.replace, 0o600), so a
concurrent reader sees either the old or the new list, never a partial one.
"""

from __future__ import annotations

__all__ = [
    "FilePolicyRepository",
]

import logging
import os
import threading
from pathlib import Path

from sentinel_pdp.exceptions import PolicyAlreadyExistsError, PolicyNotFoundError
from sentinel_pdp.pdp.policy import Policy
from sentinel_pdp.telemetry.system.system_logger import get_system_logger
from sentinel_pdp.utils.policy.policy_helpers import load_policies, save_policies


class FilePolicyRepository:
    """Policy repository backed by a JSON file.

    Thread-safety:
    - A lock serializes read-modify-write cycles within this process.
      Separate processes writing the same file are not coordinated.
    """

    def __init__(self, path: Path, *, system_logger: logging.Logger | None = None) -> None:
        """Initialize the repository.

        The file is not read until first use.

        Args:
            path: Path to the policy JSON file.
            system_logger: Logger for mutation events.
        """
        self._path = Path(path)
        self._lock = threading.RLock()
        self._cache: list[Policy] | None = None
        self._cache_key: tuple[int, int] | None = None
        self._system_logger = system_logger or get_system_logger()

    @property
    def path(self) -> Path:
        return self._path

    def get_all(self) -> list[Policy]:
        """Return every policy in file order.

        Raises:
            FileNotFoundError: If the policy file does not exist.
            ValueError: If the file is not valid JSON.
            PolicyValidationError: If any record is invalid.
        """
        with self._lock:
            return list(self._read())

    def get_by_id(self, policy_id: str) -> Policy | None:
        with self._lock:
            return next((p for p in self._read() if p.id == policy_id), None)

    def create(self, policy: Policy) -> None:
        with self._lock:
            policies = list(self._read())
            if any(p.id == policy.id for p in policies):
                raise PolicyAlreadyExistsError(policy.id)
            policies.append(policy)
            self._write(policies)
        self._log_mutation("policy_created", policy.id, len(policies))

    def update(self, policy: Policy) -> None:
        with self._lock:
            policies = list(self._read())
            index = _index_of(policies, policy.id)
            policies[index] = policy
            self._write(policies)
        self._log_mutation("policy_updated", policy.id, len(policies))

    def delete(self, policy_id: str) -> None:
        with self._lock:
            policies = list(self._read())
            index = _index_of(policies, policy_id)
            del policies[index]
            self._write(policies)
        self._log_mutation("policy_deleted", policy_id, len(policies))

    # -------------------------------------------------------------------------
    # Internals (caller holds the lock)
    # -------------------------------------------------------------------------

    def _stat_key(self) -> tuple[int, int] | None:
        try:
            stat = os.stat(self._path)
        except FileNotFoundError:
            return None
        return (stat.st_mtime_ns, stat.st_size)

    def _read(self) -> list[Policy]:
        key = self._stat_key()
        if self._cache is not None and key is not None and key == self._cache_key:
            return self._cache

        policies = load_policies(self._path)
        self._cache = policies
        self._cache_key = key
        return policies

    def _write(self, policies: list[Policy]) -> None:
        save_policies(policies, self._path)
        self._cache = list(policies)
        self._cache_key = self._stat_key()

    def _log_mutation(self, event: str, policy_id: str, count: int) -> None:
        self._system_logger.info(
            {
                "event": event,
                "message": f"{event.replace('_', ' ').capitalize()}: {policy_id}",
                "policy_id": policy_id,
                "policy_count": count,
                "path": str(self._path),
            }
        )


def _index_of(policies: list[Policy], policy_id: str) -> int:
    for index, policy in enumerate(policies):
        if policy.id == policy_id:
            return index
    raise PolicyNotFoundError(policy_id)
