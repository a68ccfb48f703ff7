"""Pluggable value converters.

Responsibilities:
- Let callers substitute the type a value is resolved as ("required type").
- Apply a conversion function to the resolved value afterwards.

Key types:
- `ConverterRegistry`: interface consumed by the mapper.
- `ValueConverterRegistry`: explicit, registration-based implementation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from .expressions import ExpressionEvaluator

ValueConverter = Callable[[Any, "ExpressionEvaluator | None"], Any]


class ConverterRegistry:
    """Interface for looking up custom converters by target type."""

    def get_required_type_for(self, target_type: Any) -> Any | None:
        """Return the type values must be resolved as before converting to `target_type`."""

        raise NotImplementedError

    def get_converter_for(self, target_type: Any) -> ValueConverter | None:
        """Return the converter producing `target_type` values, if one is registered."""

        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class _Registration:
    required_type: Any
    converter: ValueConverter


@dataclass(slots=True)
class ValueConverterRegistry(ConverterRegistry):
    """Registry mapping target types to a required type plus a converter."""

    _registrations: dict[Any, _Registration] = field(default_factory=dict)

    def register(self, target_type: Any, required_type: Any, converter: ValueConverter) -> None:
        """Register how values of `target_type` are resolved and converted.

        Raises:
            ValueError: If `target_type` already has a registered converter.
        """

        if target_type in self._registrations:
            raise ValueError(f"A converter for `{target_type!r}` is already registered.")
        self._registrations[target_type] = _Registration(required_type, converter)

    def get_required_type_for(self, target_type: Any) -> Any | None:
        registration = self._registrations.get(target_type)
        return registration.required_type if registration is not None else None

    def get_converter_for(self, target_type: Any) -> ValueConverter | None:
        registration = self._registrations.get(target_type)
        return registration.converter if registration is not None else None
