"""Domain exceptions for configuration mapping diagnostics.

Every exception raised while mapping a section derives from
`ConfigMapperError`. Leaf errors describe what went wrong with a single value;
`FieldResolutionError` wraps them with the dotted path at which they occurred.
"""

from __future__ import annotations


class ConfigMapperError(RuntimeError):
    """Base class for all mapping-time failures."""

    def with_context(self, context: str) -> ConfigMapperError:
        """Return a copy of this error with a parenthesized context suffix appended."""

        return type(self)(f"{self} ({context})")


class UnsupportedType(ConfigMapperError):
    """Raised when no scalar descriptor or shape exists for a requested type."""


class CoercionError(ConfigMapperError):
    """Raised when a raw value cannot become the requested scalar."""


class TypeMismatch(ConfigMapperError):
    """Raised when a container shape was expected but an incompatible value was found."""


class NoDefaultConstructor(ConfigMapperError):
    """Raised when a section type cannot be instantiated without arguments."""


class MappingError(ConfigMapperError):
    """Raised for structural mapping violations (self references, blank keys, plain objects)."""


class GenericTypeMissing(ConfigMapperError):
    """Raised when a container field lacks the element type arguments it needs."""


class FieldResolutionError(ConfigMapperError):
    """Raised when a field fails to resolve, annotated with its full configuration path."""

    def __init__(self, *, path: str | None, detail: str) -> None:
        """Initialize a path-scoped resolution error."""

        super().__init__(f"{detail} (at path '{path or ''}')")
        self.path = path
        self.detail = detail

    def with_context(self, context: str) -> FieldResolutionError:
        """Keep the path annotation when additional context is attached."""

        return FieldResolutionError(path=self.path, detail=f"{self.detail} ({context})")
