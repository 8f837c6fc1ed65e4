"""Policy models for RBAC + ABAC evaluation.

This module defines the policy schema consumed by the policy engine. The
persisted representation is an ordered JSON array; order is priority.

Policy structure:
    Policy
    ├── id: Unique, stable identifier
    ├── description: Human-readable; echoed in the decision reason
    ├── actions: Exact action strings, or ["*"] for every action
    ├── rbac: RBACClause (optional)
    │   ├── anyRole: subject needs at least one of these
    │   └── allRoles: subject needs every one of these
    └── abac: Condition tree (optional, compact or JSON Logic form)

Design principles:
1. First full match wins - list order IS the priority order
2. Absent rbac/abac clauses pass vacuously
3. Default to DENY if no policy matches (zero trust)
4. Invalid records are rejected when loaded, not silently ignored
"""

from __future__ import annotations

__all__ = [
    "Policy",
    "RBACClause",
    "policy_list_adapter",
    "validate_policies",
]

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_serializer,
    field_validator,
)

from sentinel_pdp.constants import MAX_CONDITION_DEPTH_LIMIT, WILDCARD_ACTION
from sentinel_pdp.exceptions import PolicyValidationError
from sentinel_pdp.pdp.conditions import condition_problems
from sentinel_pdp.pdp.jsonlogic import JsonLogicError, is_json_logic, to_canonical


class RBACClause(BaseModel):
    """Role restriction for a policy.

    Attributes:
        any_role: Subject must hold at least one of these roles.
            Empty means no restriction.
        all_roles: Subject must hold every one of these roles.
            Empty or absent means no restriction.
    """

    any_role: frozenset[str] = Field(default_factory=frozenset, alias="anyRole")
    all_roles: frozenset[str] | None = Field(default=None, alias="allRoles")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    @field_serializer("any_role", "all_roles")
    def serialize_roles(self, roles: frozenset[str] | None) -> list[str] | None:
        return sorted(roles) if roles is not None else None

    @property
    def is_restrictive(self) -> bool:
        """True if the clause actually restricts anything."""
        return bool(self.any_role) or bool(self.all_roles)


class Policy(BaseModel):
    """A single declarative authorization rule.

    Policies are read-only during evaluation. Extra keys added by storage
    backends (e.g. "pk", "updatedAt") are ignored.

    Attributes:
        id: Unique, stable identifier reported as matchedPolicyId.
        description: Human-readable description for reasons and audit.
        actions: Actions covered, matched by exact string equality.
            "*" covers every action.
        rbac: Optional role clause.
        abac: Optional condition tree evaluated against the full request.
    """

    id: str = Field(min_length=1)
    description: str = ""
    actions: list[str] = Field(min_length=1)
    rbac: RBACClause | None = None
    abac: dict[str, Any] | None = None

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @field_validator("id")
    @classmethod
    def reject_blank_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Policy id cannot be whitespace-only")
        return v

    @field_validator("actions")
    @classmethod
    def reject_blank_actions(cls, v: list[str]) -> list[str]:
        """Blank action strings would silently never match."""
        for action in v:
            if not action.strip():
                raise ValueError("Actions cannot contain empty or whitespace-only strings")
        return v

    @field_validator("abac", mode="before")
    @classmethod
    def compile_json_logic(cls, v: Any) -> Any:
        """Accept JSON Logic and store it in the canonical condition form."""
        if isinstance(v, Mapping) and is_json_logic(v):
            try:
                return to_canonical(v, max_depth=MAX_CONDITION_DEPTH_LIMIT)
            except JsonLogicError as e:
                raise ValueError(f"Unsupported JSON Logic expression: {e}") from e
        return v

    @field_validator("abac")
    @classmethod
    def validate_condition_shape(cls, v: dict[str, Any] | None) -> dict[str, Any] | None:
        if v is None:
            return v
        problems = condition_problems(v, max_depth=MAX_CONDITION_DEPTH_LIMIT, location="abac")
        if problems:
            raise ValueError("; ".join(problems))
        return v

    @property
    def is_wildcard(self) -> bool:
        return WILDCARD_ACTION in self.actions

    def covers_action(self, action: str) -> bool:
        """Action filter: wildcard or exact (case-sensitive) match."""
        return self.is_wildcard or action in self.actions

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape (camelCase, no nulls)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# Shared adapter for validating a whole policy list in one pass
policy_list_adapter: TypeAdapter[list[Policy]] = TypeAdapter(list[Policy])


def validate_policies(raw: Any, *, source: str | None = None) -> list[Policy]:
    """Validate an ordered list of policy records.

    Every error is collected rather than stopping at the first one. Ids must
    be unique across the list.

    Args:
        raw: Decoded JSON value (expected: list of objects or Policy instances).
        source: Label for error messages (e.g. the file path).

    Returns:
        Validated policies in their original order.

    Raises:
        PolicyValidationError: If the value is not a list, any record is
            invalid, or ids are duplicated.
    """
    where = f" in {source}" if source else ""

    if isinstance(raw, (str, bytes, Mapping)) or not isinstance(raw, Iterable):
        raise PolicyValidationError(
            f"Invalid policy list{where}: expected a JSON array of policies",
            errors=[f"got {type(raw).__name__}"],
            source=source,
        )

    records = list(raw)
    try:
        policies = policy_list_adapter.validate_python(records)
    except ValidationError as e:
        raise PolicyValidationError(
            f"Invalid policy configuration{where}",
            errors=_format_validation_errors(e, records),
            source=source,
        ) from e

    seen: set[str] = set()
    duplicates: list[str] = []
    for policy in policies:
        if policy.id in seen and policy.id not in duplicates:
            duplicates.append(policy.id)
        seen.add(policy.id)
    if duplicates:
        raise PolicyValidationError(
            f"Duplicate policy ids{where}",
            errors=[f"id '{d}' is used more than once" for d in duplicates],
            source=source,
        )

    return policies


def _format_validation_errors(error: ValidationError, records: list[Any]) -> list[str]:
    """Render pydantic errors with the offending policy's id for context."""
    lines: list[str] = []
    for item in error.errors():
        loc = list(item["loc"])
        prefix = ""
        if loc and isinstance(loc[0], int):
            index = loc.pop(0)
            record = records[index] if 0 <= index < len(records) else None
            policy_id = record.get("id") if isinstance(record, Mapping) else getattr(record, "id", None)
            prefix = f"[{index}] (policy id: {policy_id})" if policy_id else f"[{index}]"
        field = ".".join(str(x) for x in loc)
        location = f"{prefix}.{field}" if prefix and field else prefix or field
        lines.append(f"{location}: {item['msg']}")
    return lines
