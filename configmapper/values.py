"""Value interpreter for raw configuration values.

Responsibilities:
- Resolve a raw value, possibly a deferred expression, into a requested scalar,
  list, set or map shape.
- Evaluate expressions lazily, only when a value is demanded, against the
  environment supplied at that point.

Key types:
- `ConfigValue`: wrapper around one raw value plus the evaluator used to resolve it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .errors import TypeMismatch
from .expressions import (
    EMPTY_ENVIRONMENT,
    Environment,
    ExpressionEvaluator,
    evaluate_if_expression,
)
from .scalars import ScalarType

_COLLECTION_TYPES = (list, tuple, set, frozenset)


class ConfigValue:
    """A raw configuration value interpreted on demand.

    Fields declared as `ConfigValue` receive this wrapper unevaluated, so the
    owner can resolve it later with its own runtime environment.
    """

    __slots__ = ("value", "_evaluator")

    def __init__(self, value: Any, evaluator: ExpressionEvaluator | None = None) -> None:
        self.value = value
        self._evaluator = evaluator

    def as_scalar(self, scalar_type: ScalarType, env: Environment = EMPTY_ENVIRONMENT) -> Any:
        """Evaluate and coerce the value into `scalar_type`."""

        return self._interpret_scalar(self.value, scalar_type, env)

    def as_list(self, scalar_type: ScalarType, env: Environment = EMPTY_ENVIRONMENT) -> list[Any]:
        """Interpret the value as an ordered list of `scalar_type` items."""

        return list(self._iter_collection(scalar_type, env))

    def as_set(self, scalar_type: ScalarType, env: Environment = EMPTY_ENVIRONMENT) -> set[Any]:
        """Interpret the value as a deduplicated set of `scalar_type` items."""

        return set(self._iter_collection(scalar_type, env))

    def as_map(
        self,
        key_type: ScalarType,
        value_type: ScalarType,
        env: Environment = EMPTY_ENVIRONMENT,
    ) -> dict[Any, Any]:
        """Interpret the value as a mapping with coerced keys and values.

        Raises:
            TypeMismatch: If the (evaluated) value is neither `None` nor a mapping.
        """

        value = evaluate_if_expression(self.value, self._evaluator, env)
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            raise TypeMismatch(f"Cannot transform type {type(value).__name__} into a map")

        return {
            self._interpret_scalar(key, key_type, env): self._interpret_scalar(item, value_type, env)
            for key, item in value.items()
        }

    def as_raw_object(self, env: Environment = EMPTY_ENVIRONMENT) -> Any:
        """Return the evaluated value without any coercion."""

        return evaluate_if_expression(self.value, self._evaluator, env)

    def _interpret_scalar(self, value: Any, scalar_type: ScalarType, env: Environment) -> Any:
        value = evaluate_if_expression(value, self._evaluator, env)
        return scalar_type.interpret(value)

    def _iter_collection(self, scalar_type: ScalarType, env: Environment):
        value = evaluate_if_expression(self.value, self._evaluator, env)
        if not isinstance(value, _COLLECTION_TYPES):
            yield self._interpret_scalar(value, scalar_type, env)
            return

        for item in value:
            result = evaluate_if_expression(item, self._evaluator, env)
            # Expressions yielding a collection expand in place, one level deep.
            if isinstance(result, _COLLECTION_TYPES):
                for sub_item in result:
                    yield scalar_type.interpret(sub_item)
            else:
                yield scalar_type.interpret(result)

    def __repr__(self) -> str:
        return f"ConfigValue(value={self.value!r})"

