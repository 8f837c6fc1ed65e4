"""Subject model - WHO is making the request.

The Subject is built per request by the enforcement point from verified
token claims. Beyond `sub` and `roles` it carries any domain claims the
application wants policies to see (tenant id, department ids, ...). Those
extra claims are kept verbatim and are addressable from conditions as
`${subject.<claim>}`.
"""

from __future__ import annotations

__all__ = ["Subject"]

from typing import Any

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator


class Subject(BaseModel):
    """Identity of the requester (ABAC Subject).

    Attributes:
        sub: Unique subject identifier (OIDC 'sub' claim or username).
        roles: Role names. Membership-only semantics; duplicates collapse.
        **attributes: Any additional claims (model extras).
    """

    sub: str
    roles: frozenset[str] = frozenset()

    model_config = ConfigDict(frozen=True, extra="allow")

    @field_validator("roles", mode="before")
    @classmethod
    def coerce_roles(cls, v: Any) -> Any:
        """Accept None as "no roles"; a bare string is one role."""
        if v is None:
            return frozenset()
        if isinstance(v, str):
            return frozenset([v])
        return v

    @field_serializer("roles")
    def serialize_roles(self, roles: frozenset[str]) -> list[str]:
        # Sorted so the context tree (and anything logged) is deterministic
        return sorted(roles)

    @property
    def attributes(self) -> dict[str, Any]:
        """Additional claims beyond sub and roles."""
        return dict(self.model_extra or {})

    def has_any_role(self, roles: frozenset[str]) -> bool:
        return not self.roles.isdisjoint(roles)

    def has_all_roles(self, roles: frozenset[str]) -> bool:
        return roles <= self.roles
