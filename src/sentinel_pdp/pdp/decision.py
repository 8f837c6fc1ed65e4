"""Decision outcome models.

DecisionResponse is what the engine returns for every request. A deny is a
normal response, never an exception.
"""

from __future__ import annotations

__all__ = [
    "Decision",
    "DecisionResponse",
]

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from sentinel_pdp.constants import MATCH_REASON_PREFIX, NO_MATCH_REASON


class Decision(str, Enum):
    """Policy decision outcome.

    Inherits from str for easy serialization and comparison.

    Attributes:
        ALLOW: A policy matched; the enforcement point lets the request through.
        DENY: No policy matched; the enforcement point rejects the request.
    """

    ALLOW = "allow"
    DENY = "deny"


class DecisionResponse(BaseModel):
    """Immutable evaluation result.

    Attributes:
        allow: True if access is granted.
        reason: Always populated. "Matched <description>" or "No matching policy".
        matched_policy_id: Id of the policy that granted access; None on deny.
    """

    allow: bool
    reason: str
    matched_policy_id: str | None = Field(default=None, alias="matchedPolicyId")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @classmethod
    def matched(cls, policy_id: str, description: str) -> DecisionResponse:
        return cls(allow=True, reason=f"{MATCH_REASON_PREFIX}{description}", matched_policy_id=policy_id)

    @classmethod
    def no_match(cls) -> DecisionResponse:
        return cls(allow=False, reason=NO_MATCH_REASON)

    @property
    def decision(self) -> Decision:
        return Decision.ALLOW if self.allow else Decision.DENY

    def to_wire(self) -> dict[str, Any]:
        """Serialize to {allow, reason, matchedPolicyId?}."""
        return self.model_dump(by_alias=True, exclude_none=True)
