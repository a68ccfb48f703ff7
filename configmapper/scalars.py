"""Scalar type registry.

Responsibilities:
- Enumerate the primitive target types values can be coerced into.
- Provide the identity check and coercion rule for each of them.

Key types:
- `ScalarType`: fixed, process-wide descriptor set (`STRING`, `LONG`, `DOUBLE`, `BOOLEAN`).
- `scalar_type_for`: lookup from a native Python type to its descriptor.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable

from .errors import CoercionError, UnsupportedType
from .parsing import parse_float_token, parse_integer_token, parse_permissive_boolean


def _describe(value: object) -> str:
    return f"{type(value).__name__} value {value!r}"


def _reject_containers(value: object, target: str) -> None:
    if isinstance(value, (Mapping, list, tuple, set, frozenset)):
        raise CoercionError(f"Cannot interpret {_describe(value)} as {target}")


def _to_string(value: object) -> str:
    if value is None:
        return ""
    _reject_containers(value, "string")
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _to_long(value: object) -> int:
    if value is None:
        return 0
    _reject_containers(value, "long")
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            raise CoercionError(f"Cannot interpret {_describe(value)} as long")
        return int(value)
    if isinstance(value, str):
        parsed = parse_integer_token(value)
        if parsed is not None:
            return parsed
    raise CoercionError(f"Cannot interpret {_describe(value)} as long")


def _to_double(value: object) -> float:
    if value is None:
        return 0.0
    _reject_containers(value, "double")
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        parsed = parse_float_token(value)
        if parsed is not None:
            return parsed
    raise CoercionError(f"Cannot interpret {_describe(value)} as double")


def _to_boolean(value: object) -> bool:
    if value is None:
        return False
    _reject_containers(value, "boolean")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0
    parsed = parse_permissive_boolean(value)
    if parsed is None:
        raise CoercionError(f"Cannot interpret {_describe(value)} as boolean")
    return parsed


class ScalarType(Enum):
    """Supported scalar target kinds with their native type and coercion rule."""

    STRING = (str, _to_string)
    LONG = (int, _to_long)
    DOUBLE = (float, _to_double)
    BOOLEAN = (bool, _to_boolean)

    def __init__(self, native_type: type, coercer: Callable[[object], Any]) -> None:
        self.native_type = native_type
        self._coercer = coercer

    def matches(self, value: object) -> bool:
        """Return whether `value` already is of this scalar's native type."""

        if self is ScalarType.LONG:
            return isinstance(value, int) and not isinstance(value, bool)
        return isinstance(value, self.native_type)

    def coerce(self, value: object) -> Any:
        """Convert a raw value into this scalar's native type.

        Raises:
            CoercionError: If the runtime value has no conversion into this scalar.
        """

        return self._coercer(value)

    def interpret(self, value: object) -> Any:
        """Return `value` unchanged when it already matches, otherwise coerce it."""

        if self.matches(value):
            return value
        return self.coerce(value)


_NATIVE_SCALARS: dict[type, ScalarType] = {
    scalar.native_type: scalar for scalar in ScalarType
}


def scalar_type_for(native_type: object) -> ScalarType:
    """Return the scalar descriptor registered for a native Python type.

    Raises:
        UnsupportedType: If the type is not one of `str`, `int`, `float` or `bool`.
    """

    scalar = _NATIVE_SCALARS.get(native_type) if isinstance(native_type, type) else None
    if scalar is None:
        raise UnsupportedType(f"Unsupported type specified: {native_type!r}")
    return scalar


def is_scalar_type(native_type: object) -> bool:
    """Return whether a scalar descriptor exists for `native_type`."""

    return isinstance(native_type, type) and native_type in _NATIVE_SCALARS
