"""Unit tests for the value interpreter (`ConfigValue`)."""

from __future__ import annotations

import pytest

from configmapper.errors import CoercionError, TypeMismatch
from configmapper.expressions import Expression
from configmapper.scalars import ScalarType
from configmapper.values import ConfigValue


def test_as_scalar_evaluates_expression_before_coercion(evaluator, expr) -> None:
    """Expressions should be evaluated against the environment, then coerced."""

    value = ConfigValue(expr("limit"), evaluator)

    assert value.as_scalar(ScalarType.LONG, {"limit": "12"}) == 12
    assert evaluator.calls == ["limit"]


def test_as_scalar_returns_native_value_unchanged(evaluator) -> None:
    """Already-typed values should short-circuit without evaluation."""

    payload = "unchanged"

    assert ConfigValue(payload, evaluator).as_scalar(ScalarType.STRING) is payload
    assert evaluator.calls == []


def test_as_scalar_raises_coercion_error_for_incompatible_value(evaluator) -> None:
    """Incompatible values should surface as `CoercionError`."""

    with pytest.raises(CoercionError):
        ConfigValue("abc", evaluator).as_scalar(ScalarType.DOUBLE)


def test_as_list_preserves_order_and_coerces_items(evaluator, expr) -> None:
    """List interpretation should keep input order and evaluate item expressions."""

    value = ConfigValue(["3", expr("4"), 5], evaluator)

    assert value.as_list(ScalarType.LONG) == [3, 4, 5]


def test_as_list_flattens_expression_yielding_sequence(evaluator, expr) -> None:
    """Documented quirk: a sequence-valued item expands in place, one level deep."""

    evaluator.results["pair"] = ["b", "c"]
    value = ConfigValue(["a", expr("pair"), "d"], evaluator)

    assert value.as_list(ScalarType.STRING) == ["a", "b", "c", "d"]


def test_as_list_flattens_top_level_expression_yielding_sequence(evaluator, expr) -> None:
    """A top-level expression producing a sequence should yield its coerced items."""

    value = ConfigValue(expr("[1, 2, 3]"), evaluator)

    assert value.as_list(ScalarType.STRING) == ["1", "2", "3"]


def test_as_list_wraps_single_scalar(evaluator) -> None:
    """Non-container values should become a one-element list."""

    assert ConfigValue("7", evaluator).as_list(ScalarType.LONG) == [7]


def test_as_list_of_none_wraps_the_coerced_zero_value(evaluator) -> None:
    """An absent value should be coerced like any other scalar and wrapped."""

    assert ConfigValue(None, evaluator).as_list(ScalarType.STRING) == [""]
    assert ConfigValue(None, evaluator).as_set(ScalarType.LONG) == {0}


def test_as_list_of_expression_yielding_none_wraps_zero_value(evaluator, expr) -> None:
    """An expression evaluating to `None` takes the same single-value path."""

    evaluator.results["nothing"] = None

    assert ConfigValue(expr("nothing"), evaluator).as_list(ScalarType.BOOLEAN) == [False]


def test_as_set_deduplicates_by_equality(evaluator, expr) -> None:
    """Set interpretation should deduplicate coerced values."""

    value = ConfigValue(["1", 1, expr("1"), "2"], evaluator)

    assert value.as_set(ScalarType.LONG) == {1, 2}


def test_as_map_of_none_is_empty_mapping(evaluator) -> None:
    """An absent value should interpret as an empty mapping, never `None`."""

    assert ConfigValue(None, evaluator).as_map(ScalarType.STRING, ScalarType.LONG) == {}


def test_as_map_coerces_keys_and_values_and_evaluates_expressions(evaluator, expr) -> None:
    """Map entries should be coerced independently, evaluating expression values."""

    value = ConfigValue({"k": expr("5"), 2: "3"}, evaluator)

    assert value.as_map(ScalarType.STRING, ScalarType.LONG) == {"k": 5, "2": 3}


def test_as_map_evaluates_top_level_expression(evaluator, expr) -> None:
    """A top-level expression should be evaluated before the mapping check."""

    evaluator.results["table"] = {"a": "1"}

    assert ConfigValue(expr("table"), evaluator).as_map(ScalarType.STRING, ScalarType.DOUBLE) == {
        "a": 1.0
    }


def test_as_map_rejects_non_mapping_values(evaluator) -> None:
    """Non-mapping values should fail with `TypeMismatch`."""

    with pytest.raises(TypeMismatch, match="Cannot transform type list into a map"):
        ConfigValue(["a"], evaluator).as_map(ScalarType.STRING, ScalarType.STRING)


def test_as_raw_object_evaluates_only_expressions(evaluator, expr) -> None:
    """Raw access should evaluate expressions and otherwise return the value as-is."""

    payload = {"nested": [1, 2]}

    assert ConfigValue(payload, evaluator).as_raw_object() is payload
    assert ConfigValue(expr("name"), evaluator).as_raw_object({"name": "bob"}) == "bob"


def test_expressions_pass_through_without_evaluator() -> None:
    """Without an evaluator, expressions stay unevaluated."""

    expression = Expression.parse("1 + 1")

    assert ConfigValue(expression).as_raw_object() is expression
    with pytest.raises(CoercionError):
        ConfigValue(expression).as_scalar(ScalarType.LONG)
