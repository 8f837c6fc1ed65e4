"""Policy engine - evaluate a DecisionRequest against an ordered policy list.

This module provides the PolicyEngine class that produces allow/deny
decisions.

Evaluation flow, per policy in list order:
1. Action filter: policy lists "*" or the request action verbatim
2. RBAC filter: subject holds any of rbac.anyRole (and all of rbac.allRoles)
3. ABAC filter: rbac.abac condition holds against the whole request
4. First policy passing all three wins -> ALLOW
5. No match -> DENY ("No matching policy")

Design principles:
1. First match wins; list order is the priority order. There is no
   specificity ranking and no deny-overrides combining.
2. Absent rbac/abac clauses pass vacuously.
3. Default to DENY if no policy matches (zero trust).
4. Stateless: each call depends only on its own arguments. The engine holds
   configuration only, so one instance may serve concurrent requests.
5. Exactly one audit event per evaluate() call. Audit failures never alter
   or abort the decision.

Invalid entries: policies loaded through utils.policy or a repository are
validated up front and loading fails loudly. Raw mappings handed directly to
evaluate() are validated on the fly; one that fails validation is skipped
(it can never match) and reported on the system logger.
"""

from __future__ import annotations

__all__ = [
    "MatchedPolicy",
    "PolicyEngine",
]

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from sentinel_pdp.constants import DEFAULT_MAX_CONDITION_DEPTH, MAX_CONDITION_DEPTH_LIMIT, NO_MATCH_REASON
from sentinel_pdp.context import DecisionRequest
from sentinel_pdp.exceptions import InvalidRequestError
from sentinel_pdp.pdp.conditions import evaluate_condition
from sentinel_pdp.pdp.decision import DecisionResponse
from sentinel_pdp.pdp.policy import Policy
from sentinel_pdp.pdp.protocol import DecisionAuditor
from sentinel_pdp.telemetry.audit.decision_logger import DecisionEventLogger
from sentinel_pdp.telemetry.models.decision import DecisionEvent
from sentinel_pdp.telemetry.system.system_logger import get_system_logger
from sentinel_pdp.utils.logging.iso_formatter import utc_timestamp


@dataclass(frozen=True, slots=True)
class MatchedPolicy:
    """A policy that passed all filters for a request.

    Attributes:
        id: Policy id.
        description: Policy description.
        position: Zero-based index in the evaluated list (its priority).
    """

    id: str
    description: str
    position: int


class PolicyEngine:
    """Policy evaluation engine.

    Uses first-match-wins over the supplied list:
    - The first policy whose action, RBAC and ABAC filters pass → ALLOW
    - Else → DENY

    Attributes:
        max_condition_depth: Maximum ABAC nesting evaluated before a
            condition is treated as false.
    """

    def __init__(
        self,
        *,
        auditor: DecisionAuditor | None = None,
        max_condition_depth: int = DEFAULT_MAX_CONDITION_DEPTH,
        clock: Callable[[], datetime] | None = None,
        system_logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the policy engine.

        Args:
            auditor: Receives one DecisionEvent per evaluation.
                Defaults to a DecisionEventLogger writing JSONL to stderr.
            max_condition_depth: Bound on ABAC nesting (1..256).
            clock: Returns the current time for audit timestamps.
            system_logger: Logger for operational warnings.

        Raises:
            ValueError: If max_condition_depth is out of range.
        """
        if not 1 <= max_condition_depth <= MAX_CONDITION_DEPTH_LIMIT:
            raise ValueError(
                f"max_condition_depth must be between 1 and {MAX_CONDITION_DEPTH_LIMIT}, "
                f"got {max_condition_depth}"
            )
        self.max_condition_depth = max_condition_depth
        self._auditor = auditor if auditor is not None else DecisionEventLogger()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._system_logger = system_logger or get_system_logger()

    @property
    def auditor(self) -> DecisionAuditor:
        return self._auditor

    def evaluate(
        self,
        request: DecisionRequest | Mapping[str, Any],
        policies: Iterable[Policy | Mapping[str, Any]],
    ) -> DecisionResponse:
        """Evaluate a request against an ordered policy list.

        Args:
            request: DecisionRequest, or a mapping in its wire shape.
            policies: Policies in priority order. Policy instances or raw
                mappings in the persisted shape.

        Returns:
            DecisionResponse: allow with matched policy id, or deny.

        Raises:
            InvalidRequestError: If request or policies violate the call
                contract (None, wrong type, not iterable).
        """
        decision_request = self._coerce_request(request)
        entries = self._require_policy_iterable(policies)
        timestamp = utc_timestamp(self._clock())

        matched: Policy | None = None
        tree = decision_request.to_context_tree()
        for _, policy in self._iter_valid(entries):
            if self._policy_matches(policy, decision_request, tree):
                matched = policy
                break

        if matched is not None:
            response = DecisionResponse.matched(matched.id, matched.description)
        else:
            response = DecisionResponse.no_match()

        self._emit(decision_request, matched, timestamp)
        return response

    def get_matching_policies(
        self,
        request: DecisionRequest | Mapping[str, Any],
        policies: Iterable[Policy | Mapping[str, Any]],
    ) -> list[MatchedPolicy]:
        """Get every policy that matches the request, in list order.

        Diagnostic helper: evaluate() stops at the first entry of this list.
        Later entries are shadowed for this request. No audit event is
        emitted.

        Args:
            request: DecisionRequest, or a mapping in its wire shape.
            policies: Policies in priority order.

        Returns:
            List of MatchedPolicy (empty if nothing matches).
        """
        decision_request = self._coerce_request(request)
        entries = self._require_policy_iterable(policies)
        tree = decision_request.to_context_tree()

        return [
            MatchedPolicy(id=policy.id, description=policy.description, position=position)
            for position, policy in self._iter_valid(entries)
            if self._policy_matches(policy, decision_request, tree)
        ]

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------

    def _policy_matches(self, policy: Policy, request: DecisionRequest, tree: Mapping[str, Any]) -> bool:
        """Apply action, RBAC and ABAC filters (all must pass)."""
        if not policy.covers_action(request.action):
            return False

        rbac = policy.rbac
        if rbac is not None:
            if rbac.any_role and not request.subject.has_any_role(rbac.any_role):
                return False
            if rbac.all_roles and not request.subject.has_all_roles(rbac.all_roles):
                return False

        if policy.abac is not None:
            if not evaluate_condition(policy.abac, tree, max_depth=self.max_condition_depth):
                return False

        return True

    # -------------------------------------------------------------------------
    # Input handling
    # -------------------------------------------------------------------------

    @staticmethod
    def _coerce_request(request: DecisionRequest | Mapping[str, Any]) -> DecisionRequest:
        if isinstance(request, DecisionRequest):
            return request
        if isinstance(request, Mapping):
            try:
                return DecisionRequest.model_validate(request)
            except ValidationError as e:
                raise InvalidRequestError(f"Invalid decision request: {e}") from e
        raise InvalidRequestError(f"request must be a DecisionRequest, got {type(request).__name__}")

    @staticmethod
    def _require_policy_iterable(policies: Any) -> Iterable[Any]:
        # A mapping or string is iterable but is never a policy list
        if policies is None or isinstance(policies, (str, bytes, Mapping)):
            raise InvalidRequestError(f"policies must be a list of policies, got {type(policies).__name__}")
        if not isinstance(policies, Iterable):
            raise InvalidRequestError(f"policies must be iterable, got {type(policies).__name__}")
        return policies

    def _iter_valid(self, entries: Iterable[Any]) -> Iterator[tuple[int, Policy]]:
        """Yield (position, policy), skipping entries that fail validation."""
        for position, entry in enumerate(entries):
            if isinstance(entry, Policy):
                yield position, entry
                continue

            if isinstance(entry, Mapping):
                try:
                    policy = Policy.model_validate(dict(entry))
                except ValidationError as e:
                    problem = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
                else:
                    yield position, policy
                    continue
            else:
                problem = f"expected a policy object, got {type(entry).__name__}"

            policy_id = entry.get("id") if isinstance(entry, Mapping) else None
            self._system_logger.warning(
                {
                    "event": "policy_skipped_invalid",
                    "message": f"Skipping invalid policy at position {position}: {problem}",
                    "position": position,
                    "policy_id": policy_id if isinstance(policy_id, str) else None,
                }
            )

    # -------------------------------------------------------------------------
    # Audit
    # -------------------------------------------------------------------------

    def _emit(self, request: DecisionRequest, matched: Policy | None, timestamp: str) -> None:
        """Send exactly one audit event; swallow and report any failure."""
        try:
            event = DecisionEvent(
                timestamp=timestamp,
                user=request.subject.sub,
                action=request.action,
                resource_type=request.resource.type,
                allow=matched is not None,
                policy_id=matched.id if matched is not None else None,
                reason=matched.description if matched is not None else NO_MATCH_REASON,
            )
            self._auditor.log(event)
        except Exception as e:
            try:
                self._system_logger.error(
                    {
                        "event": "audit_emit_failed",
                        "message": f"Decision audit failed: {type(e).__name__}: {e}",
                        "user": request.subject.sub,
                        "action": request.action,
                    }
                )
            except Exception:
                pass  # Audit sink availability must not affect decisions
