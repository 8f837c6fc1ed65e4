"""DecisionRequest - the unit of evaluation.

One request produces exactly one decision. The request is also the root of
path resolution for ABAC conditions: `${subject.sub}`, `${resource.ownerId}`,
`${action}` and `${context.app}` all resolve against to_context_tree().
"""

from __future__ import annotations

__all__ = [
    "Context",
    "DecisionRequest",
]

from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict

from sentinel_pdp.context.resource import Resource
from sentinel_pdp.context.subject import Subject

# Request-scoped facts not intrinsic to subject or resource
Context: TypeAlias = dict[str, Any]


class DecisionRequest(BaseModel):
    """Immutable decision request.

    Attributes:
        subject: The actor attempting the action.
        action: Free-form action, conventionally "resource-type:verb"
            (e.g. "document:read"). Matched by exact string equality.
        resource: The target resource.
        context: Optional situational facts (app id, computed flags, ...).
    """

    subject: Subject
    action: str
    resource: Resource
    context: Context | None = None

    model_config = ConfigDict(frozen=True)

    def to_context_tree(self) -> dict[str, Any]:
        """Build the JSON-shaped root used for path resolution.

        The "context" key is omitted when no context was supplied, so
        `${context.x}` resolves to a missing value rather than to null.

        Returns:
            Plain dict of JSON-compatible values.
        """
        tree: dict[str, Any] = {
            "subject": self.subject.model_dump(mode="json"),
            "action": self.action,
            "resource": self.resource.model_dump(mode="json"),
        }
        if self.context is not None:
            tree["context"] = self.model_dump(mode="json", include={"context"})["context"]
        return tree
