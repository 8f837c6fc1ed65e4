"""Condition evaluator for ABAC clauses.

A condition is a single-key mapping in one of six forms:

    {"eq":       [a, b]}          strict equality
    {"ne":       [a, b]}          strict inequality
    {"includes": [array, value]}  array contains value
    {"in":       [value, array]}  value is contained in array
    {"all":      [cond, ...]}     AND (empty -> True)
    {"any":      [cond, ...]}     OR  (empty -> False)

A node may also carry both aggregate keys, as in {"all": [...], "any": [...]};
both parts must hold.

Operands are literals or path references. A path reference is a string
wrapped in "${" and "}" whose body is a dot-separated walk through the
context tree, e.g. "${resource.ownerId}". Walking only descends into
mappings; a missing key, a list or scalar in the middle of the path, or an
empty path yields MISSING.

Evaluation never raises. Anything structurally wrong (unknown operator,
wrong operand count, non-list aggregate, nesting deeper than max_depth)
evaluates to False so that corrupted policy payloads cannot grant access.

condition_problems() performs the same structural walk but reports what is
wrong instead of returning False; policy loading uses it to fail loudly.
"""

from __future__ import annotations

__all__ = [
    "AGGREGATE_OPERATORS",
    "COMPARISON_OPERATORS",
    "CONDITION_OPERATORS",
    "MISSING",
    "condition_problems",
    "evaluate_condition",
    "is_path_reference",
    "resolve_operand",
    "resolve_path",
    "strict_equals",
]

from collections.abc import Mapping, Sequence
from typing import Any, Final

from sentinel_pdp.constants import (
    DEFAULT_MAX_CONDITION_DEPTH,
    PATH_REFERENCE_PREFIX,
    PATH_REFERENCE_SUFFIX,
    PATH_SEPARATOR,
)

COMPARISON_OPERATORS: Final = frozenset({"eq", "ne", "includes", "in"})
AGGREGATE_OPERATORS: Final = frozenset({"all", "any"})
CONDITION_OPERATORS: Final = COMPARISON_OPERATORS | AGGREGATE_OPERATORS


class _Missing:
    """Sentinel for a path that did not resolve.

    Distinct from None: a JSON null in the context is a concrete value,
    a missing attribute is not.
    """

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Final = _Missing()


# =============================================================================
# Path resolution
# =============================================================================


def is_path_reference(operand: Any) -> bool:
    """Check if an operand is a "${...}" path reference."""
    return (
        isinstance(operand, str)
        and len(operand) >= len(PATH_REFERENCE_PREFIX) + len(PATH_REFERENCE_SUFFIX)
        and operand.startswith(PATH_REFERENCE_PREFIX)
        and operand.endswith(PATH_REFERENCE_SUFFIX)
    )


def resolve_path(path: str, context: Mapping[str, Any]) -> Any:
    """Walk a dot-separated path through nested mappings.

    Args:
        path: Path body without markers, e.g. "resource.ownerId".
        context: Root of the walk (normally DecisionRequest.to_context_tree()).

    Returns:
        The value at the path, or MISSING if any segment does not resolve.
    """
    if not path:
        return MISSING

    current: Any = context
    for segment in path.split(PATH_SEPARATOR):
        if not isinstance(current, Mapping) or segment not in current:
            return MISSING
        current = current[segment]
    return current


def resolve_operand(operand: Any, context: Mapping[str, Any]) -> Any:
    """Resolve a path reference; return any other operand unchanged."""
    if is_path_reference(operand):
        body = operand[len(PATH_REFERENCE_PREFIX) : -len(PATH_REFERENCE_SUFFIX)]
        return resolve_path(body, context)
    return operand


# =============================================================================
# Strict equality
# =============================================================================


def strict_equals(left: Any, right: Any) -> bool:
    """Type-strict equality for resolved operand values.

    Unlike ==, booleans never equal numbers (True != 1), MISSING only equals
    MISSING and None only equals None. Numbers compare by value regardless
    of int/float. Lists and mappings compare element-wise with the same rules.
    """
    if left is MISSING or right is MISSING:
        return left is right
    if left is None or right is None:
        return left is right
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, (int, float)) and isinstance(right, (int, float)):
        return left == right
    if isinstance(left, str) or isinstance(right, str):
        return isinstance(left, str) and isinstance(right, str) and left == right
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if left.keys() != right.keys():
            return False
        return all(strict_equals(left[k], right[k]) for k in left)
    if _is_array(left) and _is_array(right):
        if len(left) != len(right):
            return False
        return all(strict_equals(a, b) for a, b in zip(left, right))
    return False


def _is_array(value: Any) -> bool:
    # Strings are sequences too, but never arrays here
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _contains(array: Any, value: Any) -> bool:
    if not _is_array(array):
        return False
    return any(strict_equals(item, value) for item in array)


# =============================================================================
# Evaluation
# =============================================================================


def _combined_aggregates(condition: Any) -> list[dict[str, Any]] | None:
    """Split an {"all": ..., "any": ...} node into its single-key parts."""
    if not isinstance(condition, Mapping) or len(condition) < 2:
        return None
    if not all(key in AGGREGATE_OPERATORS for key in condition):
        return None
    return [{operator: argument} for operator, argument in condition.items()]


def _split_node(condition: Any) -> tuple[str, Any] | None:
    """Return (operator, argument) for a well-shaped single-key node."""
    if not isinstance(condition, Mapping) or len(condition) != 1:
        return None
    ((operator, argument),) = condition.items()
    if operator not in CONDITION_OPERATORS:
        return None
    return operator, argument


def _operand_pair(argument: Any) -> tuple[Any, Any] | None:
    if not _is_array(argument) or len(argument) != 2:
        return None
    return argument[0], argument[1]


def evaluate_condition(
    condition: Any,
    context: Mapping[str, Any],
    *,
    max_depth: int = DEFAULT_MAX_CONDITION_DEPTH,
) -> bool:
    """Decide whether a condition holds against a context tree.

    Args:
        condition: Condition node (see module docstring).
        context: Root for path resolution.
        max_depth: Maximum nesting of aggregates; deeper trees are False.

    Returns:
        True if the condition holds. False if it does not hold or is malformed.
    """
    return _evaluate(condition, context, depth=1, max_depth=max_depth)


def _evaluate(condition: Any, context: Mapping[str, Any], *, depth: int, max_depth: int) -> bool:
    if depth > max_depth:
        return False

    parts = _combined_aggregates(condition)
    if parts is not None:
        return all(_evaluate(part, context, depth=depth, max_depth=max_depth) for part in parts)

    node = _split_node(condition)
    if node is None:
        return False
    operator, argument = node

    if operator in AGGREGATE_OPERATORS:
        if not _is_array(argument):
            return False
        results = (_evaluate(sub, context, depth=depth + 1, max_depth=max_depth) for sub in argument)
        return all(results) if operator == "all" else any(results)

    pair = _operand_pair(argument)
    if pair is None:
        return False
    left = resolve_operand(pair[0], context)
    right = resolve_operand(pair[1], context)

    if operator == "eq":
        return strict_equals(left, right)
    if operator == "ne":
        return not strict_equals(left, right)
    if operator == "includes":
        return _contains(left, right)
    # "in"
    return _contains(right, left)


# =============================================================================
# Structural validation
# =============================================================================


def condition_problems(
    condition: Any,
    *,
    max_depth: int = DEFAULT_MAX_CONDITION_DEPTH,
    location: str = "condition",
) -> list[str]:
    """List structural problems in a condition tree.

    Mirrors the shape checks evaluate_condition() applies silently.

    Args:
        condition: Condition node to check.
        max_depth: Maximum nesting of aggregates.
        location: Label for the root node in messages.

    Returns:
        Problems as "<location>: <message>" strings. Empty if well-formed.
    """
    problems: list[str] = []
    _collect_problems(condition, location, 1, max_depth, problems)
    return problems


def _collect_problems(condition: Any, location: str, depth: int, max_depth: int, problems: list[str]) -> None:
    if depth > max_depth:
        problems.append(f"{location}: nesting exceeds maximum depth of {max_depth}")
        return

    if not isinstance(condition, Mapping):
        problems.append(f"{location}: condition must be an object, got {type(condition).__name__}")
        return
    parts = _combined_aggregates(condition)
    if parts is not None:
        for part in parts:
            _collect_problems(part, location, depth, max_depth, problems)
        return
    if len(condition) != 1:
        keys = ", ".join(sorted(str(k) for k in condition)) or "none"
        problems.append(f"{location}: condition must have exactly one operator (found: {keys})")
        return

    ((operator, argument),) = condition.items()
    here = f"{location}.{operator}"
    if operator not in CONDITION_OPERATORS:
        allowed = ", ".join(sorted(CONDITION_OPERATORS))
        problems.append(f"{location}: unknown operator '{operator}' (expected one of: {allowed})")
        return

    if operator in AGGREGATE_OPERATORS:
        if not _is_array(argument):
            problems.append(f"{here}: expected a list of conditions")
            return
        for index, sub in enumerate(argument):
            _collect_problems(sub, f"{here}[{index}]", depth + 1, max_depth, problems)
        return

    if _operand_pair(argument) is None:
        problems.append(f"{here}: expected exactly two operands")
