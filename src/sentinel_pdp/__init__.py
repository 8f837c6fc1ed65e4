"""sentinel-pdp: Policy Decision Point combining RBAC and ABAC.

Evaluates a DecisionRequest (subject, action, resource, context) against an
ordered list of policies. The first policy whose action scope, role clause
and attribute condition all pass wins; no match means deny.

Typical usage:
    from sentinel_pdp import DecisionRequest, PolicyEngine
    from sentinel_pdp.utils.policy import load_policies

    engine = PolicyEngine()
    response = engine.evaluate(request, load_policies(path))
"""

__version__ = "0.4.0"

from sentinel_pdp.context import DecisionRequest, Resource, Subject
from sentinel_pdp.pdp import (
    DecisionResponse,
    Policy,
    PolicyDecisionPoint,
    PolicyEngine,
    RBACClause,
)

__all__ = [
    "__version__",
    "DecisionRequest",
    "DecisionResponse",
    "Policy",
    "PolicyDecisionPoint",
    "PolicyEngine",
    "RBACClause",
    "Resource",
    "Subject",
]
