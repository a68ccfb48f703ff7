"""Shared pytest fixtures for the full configmapper test suite."""

from __future__ import annotations

from typing import Any, Mapping

import pytest
import yaml

from configmapper.expressions import Expression


class StubEvaluator:
    """Deterministic evaluator resolving expressions from the environment or a result table.

    Sources found in neither are read as YAML literals, so `"5"` evaluates to `5`
    and `"[1, 2]"` to `[1, 2]`.
    """

    def __init__(self, results: Mapping[str, Any] | None = None) -> None:
        """Initialize the result table and the call journal."""

        self.results: dict[str, Any] = dict(results or {})
        self.calls: list[str] = []

    def evaluate(self, expression: Expression, environment: Mapping[str, Any]) -> Any:
        """Record the call and return the expression's value."""

        self.calls.append(expression.source)
        if expression.source in environment:
            return environment[expression.source]
        if expression.source in self.results:
            return self.results[expression.source]
        return yaml.safe_load(expression.source)


@pytest.fixture
def evaluator() -> StubEvaluator:
    """Provide a fresh stub evaluator."""

    return StubEvaluator()


@pytest.fixture
def expr():
    """Provide a shorthand for building expression values."""

    return Expression.parse
