"""Policy repository protocol.

A repository owns the ordered policy list. Order is priority: create()
appends, update() replaces in place, delete() removes without reordering
the rest.
"""

from __future__ import annotations

__all__ = [
    "PolicyRepository",
]

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sentinel_pdp.pdp.policy import Policy


@runtime_checkable
class PolicyRepository(Protocol):
    """Storage backend for the ordered policy list.

    Thread-safety:
    - Implementations must make each method atomic with respect to the others
    - get_all() returns a snapshot; later mutations do not affect it
    """

    def get_all(self) -> list[Policy]:
        """Return every policy in priority order."""
        ...

    def get_by_id(self, policy_id: str) -> Policy | None:
        """Return the policy with this id, or None."""
        ...

    def create(self, policy: Policy) -> None:
        """Append a policy.

        Raises:
            PolicyAlreadyExistsError: If the id is already present.
        """
        ...

    def update(self, policy: Policy) -> None:
        """Replace the policy with the same id, keeping its position.

        Raises:
            PolicyNotFoundError: If the id is not present.
        """
        ...

    def delete(self, policy_id: str) -> None:
        """Remove a policy.

        Raises:
            PolicyNotFoundError: If the id is not present.
        """
        ...
