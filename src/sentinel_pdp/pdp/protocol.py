"""Protocol definitions for the decision point's collaborators.

Defines structural interfaces so alternative implementations can be plugged
in without inheriting from our code:

- PolicyEngineProtocol: anything that turns (request, policies) into a decision
- DecisionAuditor: sink receiving one DecisionEvent per evaluation

Example alternative auditor:

    class KafkaDecisionAuditor:
        def log(self, event: DecisionEvent) -> None:
            self._producer.send("decisions", event.model_dump(by_alias=True))
"""

from __future__ import annotations

__all__ = [
    "DecisionAuditor",
    "PolicyEngineProtocol",
]

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from sentinel_pdp.context import DecisionRequest
    from sentinel_pdp.pdp.decision import DecisionResponse
    from sentinel_pdp.pdp.policy import Policy
    from sentinel_pdp.telemetry.models.decision import DecisionEvent


@runtime_checkable
class DecisionAuditor(Protocol):
    """Receives the audit record of every decision.

    Implementations must not raise; the engine guards against it anyway,
    but a raising auditor turns every decision into a logged failure.
    """

    def log(self, event: "DecisionEvent") -> None:
        """Record a decision event."""
        ...


@runtime_checkable
class PolicyEngineProtocol(Protocol):
    """Protocol for pluggable policy engines.

    Thread-safety:
    - evaluate() must be safe for concurrent calls with any policy lists
    """

    def evaluate(
        self,
        request: "DecisionRequest",
        policies: Iterable["Policy | Mapping[str, Any]"],
    ) -> "DecisionResponse":
        """Evaluate a request against an ordered policy list.

        Args:
            request: The decision request.
            policies: Policies in priority order.

        Returns:
            DecisionResponse (deny when nothing matches).
        """
        ...
