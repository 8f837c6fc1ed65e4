"""Decision request model.

Describes the three input facets of a decision plus the action:

- subject.py  - Subject (actor: sub, roles, extra claims)
- resource.py - Resource (target: type, extra attributes)
- request.py  - DecisionRequest (subject, action, resource, context)

These models are constructed per request by the enforcement point and are
never persisted by the decision point.
"""

from sentinel_pdp.context.request import Context, DecisionRequest
from sentinel_pdp.context.resource import Resource
from sentinel_pdp.context.subject import Subject

__all__ = [
    "Context",
    "DecisionRequest",
    "Resource",
    "Subject",
]
