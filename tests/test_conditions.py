"""Unit tests for the ABAC condition evaluator.

Tests path resolution, strict equality, the six operators and the
malformed-input behavior (always False, never raises).
Tests use the AAA pattern (Arrange-Act-Assert) for clarity.
"""

from __future__ import annotations

import pytest

from sentinel_pdp.pdp.conditions import (
    MISSING,
    condition_problems,
    evaluate_condition,
    is_path_reference,
    resolve_operand,
    resolve_path,
    strict_equals,
)


@pytest.fixture
def tree() -> dict:
    """Context tree shaped like DecisionRequest.to_context_tree()."""
    return {
        "subject": {"sub": "u1", "roles": ["editor", "ua"], "uaIds": ["ua-1", "ua-2"], "manager": None},
        "action": "padron:edit",
        "resource": {"type": "padron", "status": "OPEN", "uaId": "ua-2", "ownerId": "u1", "count": 3},
        "context": {"app": "core", "flags": {"beta": True}},
    }


# ============================================================================
# Path references
# ============================================================================


class TestPathReference:
    """Tests for "${...}" detection and resolution."""

    @pytest.mark.parametrize(
        "operand",
        ["${subject.sub}", "${a}", "${}"],
    )
    def test_marked_strings_are_references(self, operand: str) -> None:
        assert is_path_reference(operand) is True

    @pytest.mark.parametrize(
        "operand",
        ["subject.sub", "$subject.sub", "{subject.sub}", "${subject.sub", "x${a}", 42, None, ["${a}"]],
    )
    def test_other_values_are_literals(self, operand: object) -> None:
        assert is_path_reference(operand) is False

    def test_resolves_nested_value(self, tree: dict) -> None:
        # Act
        value = resolve_path("context.flags.beta", tree)

        # Assert
        assert value is True

    def test_missing_key_is_missing(self, tree: dict) -> None:
        assert resolve_path("resource.nope", tree) is MISSING

    def test_missing_is_not_none(self, tree: dict) -> None:
        """A JSON null attribute resolves to None, not MISSING."""
        assert resolve_path("subject.manager", tree) is None

    def test_empty_path_is_missing(self, tree: dict) -> None:
        assert resolve_path("", tree) is MISSING
        assert resolve_operand("${}", tree) is MISSING

    def test_does_not_walk_into_lists(self, tree: dict) -> None:
        """Numeric segments are not list indices."""
        assert resolve_path("subject.uaIds.0", tree) is MISSING

    def test_does_not_walk_through_scalars(self, tree: dict) -> None:
        assert resolve_path("resource.status.length", tree) is MISSING

    def test_literal_operand_returned_unchanged(self, tree: dict) -> None:
        assert resolve_operand("OPEN", tree) == "OPEN"
        assert resolve_operand(["a"], tree) == ["a"]


# ============================================================================
# Strict equality
# ============================================================================


class TestStrictEquals:
    """Tests for type-strict equality."""

    def test_booleans_never_equal_numbers(self) -> None:
        assert strict_equals(True, 1) is False
        assert strict_equals(0, False) is False

    def test_int_and_float_compare_by_value(self) -> None:
        assert strict_equals(1, 1.0) is True

    def test_string_never_equals_number(self) -> None:
        assert strict_equals("1", 1) is False

    def test_none_only_equals_none(self) -> None:
        assert strict_equals(None, None) is True
        assert strict_equals(None, MISSING) is False
        assert strict_equals(None, "") is False

    def test_missing_only_equals_missing(self) -> None:
        assert strict_equals(MISSING, MISSING) is True
        assert strict_equals(MISSING, None) is False

    def test_lists_compare_structurally(self) -> None:
        assert strict_equals([1, "a"], [1, "a"]) is True
        assert strict_equals([1, "a"], ["a", 1]) is False
        assert strict_equals([True], [1]) is False

    def test_mappings_compare_structurally(self) -> None:
        assert strict_equals({"a": [1]}, {"a": [1]}) is True
        assert strict_equals({"a": 1}, {"a": 1, "b": 2}) is False


# ============================================================================
# Operators
# ============================================================================


class TestComparisonOperators:
    """Tests for eq, ne, includes and in."""

    def test_eq_path_and_literal(self, tree: dict) -> None:
        assert evaluate_condition({"eq": ["${resource.status}", "OPEN"]}, tree) is True
        assert evaluate_condition({"eq": ["${resource.status}", "CLOSED"]}, tree) is False

    def test_eq_two_paths(self, tree: dict) -> None:
        assert evaluate_condition({"eq": ["${resource.ownerId}", "${subject.sub}"]}, tree) is True

    def test_eq_two_missing_paths_is_true(self, tree: dict) -> None:
        """Both sides missing compare equal."""
        assert evaluate_condition({"eq": ["${resource.a}", "${resource.b}"]}, tree) is True

    def test_eq_missing_against_null_is_false(self, tree: dict) -> None:
        assert evaluate_condition({"eq": ["${resource.nope}", None]}, tree) is False

    def test_ne_missing_path_is_true(self, tree: dict) -> None:
        assert evaluate_condition({"ne": ["${resource.nope}", "x"]}, tree) is True

    def test_ne_equal_values_is_false(self, tree: dict) -> None:
        assert evaluate_condition({"ne": ["${context.app}", "core"]}, tree) is False

    def test_includes_array_contains_value(self, tree: dict) -> None:
        assert evaluate_condition({"includes": ["${subject.uaIds}", "${resource.uaId}"]}, tree) is True
        assert evaluate_condition({"includes": ["${subject.uaIds}", "ua-9"]}, tree) is False

    def test_includes_non_array_is_false(self, tree: dict) -> None:
        """A string first operand is not treated as an array (no substring match)."""
        assert evaluate_condition({"includes": ["${resource.status}", "OP"]}, tree) is False

    def test_includes_missing_array_is_false(self, tree: dict) -> None:
        assert evaluate_condition({"includes": ["${subject.nope}", "x"]}, tree) is False

    def test_includes_uses_strict_equality(self, tree: dict) -> None:
        assert evaluate_condition({"includes": [[1, 2, 3], True]}, tree) is False

    def test_in_value_in_array(self, tree: dict) -> None:
        assert evaluate_condition({"in": ["${context.app}", ["core", "admin"]]}, tree) is True
        assert evaluate_condition({"in": ["${context.app}", ["admin"]]}, tree) is False

    def test_in_with_array_path(self, tree: dict) -> None:
        assert evaluate_condition({"in": ["editor", "${subject.roles}"]}, tree) is True

    def test_action_is_addressable(self, tree: dict) -> None:
        assert evaluate_condition({"eq": ["${action}", "padron:edit"]}, tree) is True


class TestAggregateOperators:
    """Tests for all/any."""

    def test_all_requires_every_child(self, tree: dict) -> None:
        condition = {
            "all": [
                {"eq": ["${resource.status}", "OPEN"]},
                {"includes": ["${subject.uaIds}", "${resource.uaId}"]},
            ]
        }
        assert evaluate_condition(condition, tree) is True

    def test_all_fails_on_one_false_child(self, tree: dict) -> None:
        condition = {"all": [{"eq": ["${resource.status}", "OPEN"]}, {"eq": ["${context.app}", "x"]}]}
        assert evaluate_condition(condition, tree) is False

    def test_any_needs_one_child(self, tree: dict) -> None:
        condition = {"any": [{"eq": ["${context.app}", "x"]}, {"eq": ["${resource.count}", 3]}]}
        assert evaluate_condition(condition, tree) is True

    def test_empty_all_is_true(self, tree: dict) -> None:
        assert evaluate_condition({"all": []}, tree) is True

    def test_empty_any_is_false(self, tree: dict) -> None:
        assert evaluate_condition({"any": []}, tree) is False

    def test_nested_aggregates(self, tree: dict) -> None:
        condition = {
            "any": [
                {"all": [{"eq": ["${context.app}", "core"]}, {"eq": ["${resource.status}", "CLOSED"]}]},
                {"all": [{"eq": ["${context.flags.beta}", True]}]},
            ]
        }
        assert evaluate_condition(condition, tree) is True

    def test_combined_all_and_any_require_both(self, tree: dict) -> None:
        # Arrange
        condition = {
            "all": [{"eq": ["${resource.status}", "OPEN"]}],
            "any": [{"includes": ["${subject.uaIds}", "${resource.uaId}"]}],
        }
        closed = {**tree, "resource": {**tree["resource"], "status": "CLOSED"}}
        foreign = {**tree, "resource": {**tree["resource"], "uaId": "ua-9"}}

        # Act / Assert
        assert evaluate_condition(condition, tree) is True
        assert evaluate_condition(condition, closed) is False
        assert evaluate_condition(condition, foreign) is False

    def test_combined_node_with_empty_any_is_false(self, tree: dict) -> None:
        assert evaluate_condition({"all": [], "any": []}, tree) is False


# ============================================================================
# Malformed conditions
# ============================================================================


class TestMalformedConditions:
    """Malformed input evaluates to False and never raises."""

    @pytest.mark.parametrize(
        "condition",
        [
            None,
            "eq",
            [],
            {},
            {"gt": [1, 0]},
            {"eq": [1]},
            {"eq": [1, 1, 1]},
            {"eq": "x"},
            {"all": {"eq": [1, 1]}},
            {"eq": [1, 1], "ne": [1, 2]},
            {"all": [{"eq": [1, 1]}], "eq": [1, 1]},
            {"all": [{"eq": [1, 1]}], "any": {"eq": [1, 1]}},
            {"all": [{"eq": [1, 1]}, "junk"]},
        ],
    )
    def test_malformed_is_false(self, tree: dict, condition: object) -> None:
        assert evaluate_condition(condition, tree) is False

    def test_depth_limit_makes_condition_false(self, tree: dict) -> None:
        # Arrange
        condition: dict = {"eq": [1, 1]}
        for _ in range(5):
            condition = {"all": [condition]}

        # Act / Assert
        assert evaluate_condition(condition, tree, max_depth=6) is True
        assert evaluate_condition(condition, tree, max_depth=5) is False


class TestConditionProblems:
    """Tests for structural problem reporting."""

    def test_well_formed_has_no_problems(self) -> None:
        assert condition_problems({"all": [{"eq": ["${a}", 1]}, {"any": []}]}) == []

    def test_reports_location_of_bad_operand_count(self) -> None:
        # Act
        problems = condition_problems({"all": [{"eq": [1, 1]}, {"eq": [1]}]}, location="abac")

        # Assert
        assert problems == ["abac.all[1].eq: expected exactly two operands"]

    def test_reports_unknown_operator(self) -> None:
        problems = condition_problems({"gt": [1, 0]})

        assert len(problems) == 1
        assert "unknown operator 'gt'" in problems[0]

    def test_reports_multi_key_node(self) -> None:
        problems = condition_problems({"eq": [1, 1], "ne": [1, 2]})

        assert problems == ["condition: condition must have exactly one operator (found: eq, ne)"]

    def test_combined_aggregates_are_well_formed(self) -> None:
        assert condition_problems({"all": [{"eq": [1, 1]}], "any": [{"ne": [1, 2]}]}) == []

    def test_reports_problems_inside_combined_aggregates(self) -> None:
        problems = condition_problems({"all": [{"eq": [1]}], "any": [{"gt": [1, 0]}]}, location="abac")

        assert problems == [
            "abac.all[0].eq: expected exactly two operands",
            "abac.any[0]: unknown operator 'gt' (expected one of: all, any, eq, in, includes, ne)",
        ]

    def test_reports_aggregate_mixed_with_comparison(self) -> None:
        problems = condition_problems({"all": [], "eq": [1, 1]})

        assert problems == ["condition: condition must have exactly one operator (found: all, eq)"]

    def test_reports_excess_depth(self) -> None:
        problems = condition_problems({"all": [{"all": [{"eq": [1, 1]}]}]}, max_depth=2)

        assert problems == ["condition.all[0].all[0]: nesting exceeds maximum depth of 2"]
