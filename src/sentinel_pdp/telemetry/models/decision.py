"""Pydantic model for authorization decision audit events.

One DecisionEvent is emitted for every PolicyEngine.evaluate() call,
whatever the outcome. Field names on the wire are camelCase:

    {"event": "authorization.decision", "timestamp": "...Z", "user": "s1",
     "action": "padron:edit", "resourceType": "padron", "allow": true,
     "policyId": "p1", "reason": "UA members can edit padron"}

Note: 'timestamp' is the evaluation time taken by the engine. The JSONL
formatter additionally prefixes each line with the write 'time'.
"""

from __future__ import annotations

__all__ = ["DecisionEvent"]

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from sentinel_pdp.constants import DECISION_EVENT_NAME


class DecisionEvent(BaseModel):
    """One authorization decision log entry (audit/decisions.jsonl).

    Attributes:
        timestamp: ISO 8601 UTC time the decision was made.
        user: Subject identifier (subject.sub).
        action: Requested action.
        resource_type: resource.type of the request.
        allow: Final decision.
        policy_id: Matched policy id (allow only).
        reason: Matched policy description on allow, "No matching policy" on deny.
    """

    event: Literal["authorization.decision"] = DECISION_EVENT_NAME
    timestamp: str
    user: str
    action: str
    resource_type: str = Field(alias="resourceType")
    allow: bool
    policy_id: str | None = Field(default=None, alias="policyId")
    reason: str

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)
