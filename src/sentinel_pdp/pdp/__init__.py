"""Policy Decision Point (PDP) for RBAC + ABAC authorization.

This package provides:
- Policy models (Policy, RBACClause)
- Condition evaluation (evaluate_condition, JSON Logic compilation)
- Policy engine (PolicyEngine)
- Decision point host (PolicyDecisionPoint)
- Protocols for pluggable engines and audit sinks
"""

from sentinel_pdp.pdp.conditions import (
    MISSING,
    condition_problems,
    evaluate_condition,
    resolve_path,
    strict_equals,
)
from sentinel_pdp.pdp.decision import Decision, DecisionResponse
from sentinel_pdp.pdp.engine import MatchedPolicy, PolicyEngine
from sentinel_pdp.pdp.jsonlogic import JsonLogicError, evaluate_json_logic, is_json_logic, to_canonical
from sentinel_pdp.pdp.policy import Policy, RBACClause, validate_policies
from sentinel_pdp.pdp.protocol import DecisionAuditor, PolicyEngineProtocol
from sentinel_pdp.pdp.service import PolicyDecisionPoint

__all__ = [
    # Conditions
    "MISSING",
    "condition_problems",
    "evaluate_condition",
    "resolve_path",
    "strict_equals",
    # JSON Logic
    "JsonLogicError",
    "evaluate_json_logic",
    "is_json_logic",
    "to_canonical",
    # Models
    "Decision",
    "DecisionResponse",
    "Policy",
    "RBACClause",
    "validate_policies",
    # Engine
    "MatchedPolicy",
    "PolicyEngine",
    "PolicyDecisionPoint",
    # Protocols
    "DecisionAuditor",
    "PolicyEngineProtocol",
]
