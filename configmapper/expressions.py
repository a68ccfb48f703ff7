"""Deferred expression values and the evaluator contract.

Responsibilities:
- Represent a parsed-but-unevaluated expression embedded in configuration.
- Define the narrow evaluator interface the mapper forwards expressions to.

Parsing and evaluating expression syntax is left to the caller's evaluator;
this module only marks values as deferred.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, Protocol


Environment = Mapping[str, Any]
ExpressionParser = Callable[[str], Any]

EMPTY_ENVIRONMENT: Environment = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Expression:
    """A deferred expression node.

    Attributes:
        source: Expression text as written in the configuration.
        node: Pre-parsed representation handed to the evaluator.
    """

    source: str
    node: Any = None

    @classmethod
    def parse(cls, source: str, parser: ExpressionParser | None = None) -> Expression:
        """Build an expression, pre-parsing `source` when a parser is supplied."""

        node = parser(source) if parser is not None else source
        return cls(source=source, node=node)


class ExpressionEvaluator(Protocol):
    """Evaluates deferred expressions against an environment."""

    def evaluate(self, expression: Expression, environment: Environment) -> Any:
        """Return the value of `expression` under `environment`."""


def evaluate_if_expression(
    value: Any,
    evaluator: ExpressionEvaluator | None,
    environment: Environment,
) -> Any:
    """Evaluate `value` when it is an expression and an evaluator is available."""

    if isinstance(value, Expression) and evaluator is not None:
        return evaluator.evaluate(value, environment)
    return value
