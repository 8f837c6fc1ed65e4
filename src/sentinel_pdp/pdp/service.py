"""Decision point host binding a policy engine to a policy repository.

The repository and engine are injected; swapping the storage backend (tests,
file store, another backend) means passing a different repository, never
patching a module global.
"""

from __future__ import annotations

__all__ = [
    "PolicyDecisionPoint",
]

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from sentinel_pdp.pdp.engine import PolicyEngine

if TYPE_CHECKING:
    from sentinel_pdp.context import DecisionRequest
    from sentinel_pdp.pdp.decision import DecisionResponse
    from sentinel_pdp.pdp.engine import MatchedPolicy
    from sentinel_pdp.pdp.protocol import PolicyEngineProtocol
    from sentinel_pdp.repositories.base import PolicyRepository


class PolicyDecisionPoint:
    """Answers decision requests using the repository's current policy list.

    Thread-safety:
    - decide() fetches a fresh snapshot from the repository on each call, so
      concurrent mutations are seen by the next decision, never mid-evaluation.
    """

    def __init__(
        self,
        repository: PolicyRepository,
        engine: PolicyEngineProtocol | None = None,
    ) -> None:
        """Initialize the decision point.

        Args:
            repository: Source of the ordered policy list.
            engine: Policy engine. Defaults to PolicyEngine() auditing to stderr.
        """
        self._repository = repository
        self._engine = engine if engine is not None else PolicyEngine()

    @property
    def repository(self) -> PolicyRepository:
        return self._repository

    @property
    def engine(self) -> PolicyEngineProtocol:
        return self._engine

    def decide(self, request: DecisionRequest | Mapping[str, Any]) -> DecisionResponse:
        """Evaluate a request against the repository's policies.

        Args:
            request: DecisionRequest, or a mapping in its wire shape.

        Returns:
            DecisionResponse from the engine.

        Raises:
            PolicyValidationError: If the stored policies are invalid.
            InvalidRequestError: If the request violates the call contract.
        """
        policies = self._repository.get_all()
        return self._engine.evaluate(request, policies)

    def explain(self, request: DecisionRequest | Mapping[str, Any]) -> list[MatchedPolicy]:
        """List every stored policy that matches the request, in priority order.

        Requires the engine to be a PolicyEngine (or provide
        get_matching_policies).

        Raises:
            TypeError: If the engine cannot report matching policies.
        """
        get_matching = getattr(self._engine, "get_matching_policies", None)
        if get_matching is None:
            raise TypeError(f"{type(self._engine).__name__} does not support get_matching_policies()")
        return get_matching(request, self._repository.get_all())
