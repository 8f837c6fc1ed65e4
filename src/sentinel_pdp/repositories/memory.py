"""In-memory policy repository.

Used by tests and embedders that manage policies programmatically.
"""

from __future__ import annotations

__all__ = [
    "InMemoryPolicyRepository",
]

import threading
from collections.abc import Iterable

from sentinel_pdp.exceptions import PolicyAlreadyExistsError, PolicyNotFoundError
from sentinel_pdp.pdp.policy import Policy, validate_policies


class InMemoryPolicyRepository:
    """Insertion-ordered policy list guarded by a lock.

    Policies are immutable models, so snapshots can share instances.
    """

    def __init__(self, policies: Iterable[Policy] | None = None) -> None:
        """Initialize the repository.

        Args:
            policies: Initial policies in priority order.

        Raises:
            PolicyValidationError: If the initial list is invalid or ids repeat.
        """
        self._policies: list[Policy] = validate_policies(list(policies or []))
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._policies)

    def get_all(self) -> list[Policy]:
        with self._lock:
            return list(self._policies)

    def get_by_id(self, policy_id: str) -> Policy | None:
        with self._lock:
            return next((p for p in self._policies if p.id == policy_id), None)

    def create(self, policy: Policy) -> None:
        with self._lock:
            if any(p.id == policy.id for p in self._policies):
                raise PolicyAlreadyExistsError(policy.id)
            self._policies.append(policy)

    def update(self, policy: Policy) -> None:
        with self._lock:
            index = self._index_of(policy.id)
            self._policies[index] = policy

    def delete(self, policy_id: str) -> None:
        with self._lock:
            index = self._index_of(policy_id)
            del self._policies[index]

    def _index_of(self, policy_id: str) -> int:
        # Caller holds the lock
        for index, policy in enumerate(self._policies):
            if policy.id == policy_id:
                return index
        raise PolicyNotFoundError(policy_id)
