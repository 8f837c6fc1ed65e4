"""JSON Logic front-end for ABAC conditions.

Policies may express their ABAC clause as a JSON Logic expression
(https://jsonlogic.com) instead of the compact condition form:

    {"and": [
        {"==": [{"var": "context.app"}, "core"]},
        {"==": [{"var": "resource.ownerId"}, {"var": "subject.sub"}]}
    ]}

Rather than running a second evaluator, expressions are compiled into the
canonical form handled by conditions.py:

    and -> all        == / === -> eq      in -> in
    or  -> any        != / !== -> ne      {"var": "a.b"} -> "${a.b}"

Only the subset that maps onto the canonical operators is supported.
Unsupported operators, var defaults and non-string var paths raise
JsonLogicError; evaluate_json_logic() turns that into False.
"""

from __future__ import annotations

__all__ = [
    "JsonLogicError",
    "evaluate_json_logic",
    "is_json_logic",
    "to_canonical",
]

from collections.abc import Mapping, Sequence
from typing import Any

from sentinel_pdp.constants import DEFAULT_MAX_CONDITION_DEPTH, PATH_REFERENCE_PREFIX, PATH_REFERENCE_SUFFIX
from sentinel_pdp.pdp.conditions import AGGREGATE_OPERATORS, CONDITION_OPERATORS, evaluate_condition

_AGGREGATES = {"and": "all", "or": "any"}
_COMPARISONS = {"==": "eq", "===": "eq", "!=": "ne", "!==": "ne"}

# Operators that only exist in JSON Logic ("in" is shared with the canonical form)
_JSON_LOGIC_ONLY = frozenset(_AGGREGATES) | frozenset(_COMPARISONS) | {"var"}


class JsonLogicError(ValueError):
    """JSON Logic expression uses a construct that cannot be compiled."""


def is_json_logic(expr: Any) -> bool:
    """Check if a condition tree contains any JSON Logic-only construct."""
    if isinstance(expr, Mapping):
        if any(key in _JSON_LOGIC_ONLY for key in expr):
            return True
        return any(is_json_logic(v) for v in expr.values())
    if isinstance(expr, Sequence) and not isinstance(expr, str):
        return any(is_json_logic(item) for item in expr)
    return False


def to_canonical(expr: Any, *, max_depth: int = DEFAULT_MAX_CONDITION_DEPTH) -> dict[str, Any]:
    """Compile a JSON Logic (or mixed) expression into the canonical form.

    Canonical nodes pass through with their operands converted, so an
    already-canonical tree is returned unchanged.

    Args:
        expr: JSON Logic expression tree.
        max_depth: Maximum nesting accepted.

    Returns:
        Canonical condition mapping.

    Raises:
        JsonLogicError: If the expression cannot be compiled.
    """
    return _compile(expr, depth=1, max_depth=max_depth)


def _compile(expr: Any, *, depth: int, max_depth: int) -> dict[str, Any]:
    if depth > max_depth:
        raise JsonLogicError(f"expression nesting exceeds maximum depth of {max_depth}")
    if isinstance(expr, Mapping) and len(expr) > 1 and all(key in AGGREGATE_OPERATORS for key in expr):
        # Canonical {"all": [...], "any": [...]} node: compile each part in place
        compiled: dict[str, Any] = {}
        for operator, argument in expr.items():
            compiled.update(_compile({operator: argument}, depth=depth, max_depth=max_depth))
        return compiled
    if not isinstance(expr, Mapping) or len(expr) != 1:
        raise JsonLogicError("each expression must be an object with exactly one operator")

    ((operator, argument),) = expr.items()

    if operator in _AGGREGATES or operator in AGGREGATE_OPERATORS:
        target = _AGGREGATES.get(operator, operator)
        if not isinstance(argument, Sequence) or isinstance(argument, str):
            raise JsonLogicError(f"'{operator}' expects a list of expressions")
        return {target: [_compile(sub, depth=depth + 1, max_depth=max_depth) for sub in argument]}

    if operator in _COMPARISONS or operator in CONDITION_OPERATORS:
        target = _COMPARISONS.get(operator, operator)
        if not isinstance(argument, Sequence) or isinstance(argument, str) or len(argument) != 2:
            raise JsonLogicError(f"'{operator}' expects exactly two operands")
        return {target: [_compile_operand(argument[0]), _compile_operand(argument[1])]}

    raise JsonLogicError(f"unsupported operator '{operator}'")


def _compile_operand(operand: Any) -> Any:
    if isinstance(operand, Mapping):
        if set(operand) != {"var"}:
            raise JsonLogicError("only {'var': path} is supported as a computed operand")
        path = operand["var"]
        # {"var": ["a.b"]} is the list spelling of {"var": "a.b"}; defaults are not supported
        if isinstance(path, Sequence) and not isinstance(path, str):
            if len(path) != 1:
                raise JsonLogicError("'var' defaults are not supported")
            path = path[0]
        if not isinstance(path, str) or not path:
            raise JsonLogicError("'var' path must be a non-empty string")
        return f"{PATH_REFERENCE_PREFIX}{path}{PATH_REFERENCE_SUFFIX}"
    if isinstance(operand, Sequence) and not isinstance(operand, str):
        # Literal lists are not resolved element by element
        if any(isinstance(item, Mapping) for item in operand):
            raise JsonLogicError("computed values inside literal lists are not supported")
        return list(operand)
    return operand


def evaluate_json_logic(
    expr: Any,
    context: Mapping[str, Any],
    *,
    max_depth: int = DEFAULT_MAX_CONDITION_DEPTH,
) -> bool:
    """Evaluate a JSON Logic expression with canonical path semantics.

    Returns:
        The condition result, or False if the expression cannot be compiled.
    """
    try:
        canonical = to_canonical(expr, max_depth=max_depth)
    except JsonLogicError:
        return False
    return evaluate_condition(canonical, context, max_depth=max_depth)
