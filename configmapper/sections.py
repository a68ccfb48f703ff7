"""Mappable section base class and field markers.

Responsibilities:
- Define the host capability every mappable type implements
  (`runtime_decide`, `default_for`, `after_parsing`) with no-op defaults.
- Provide the markers used inside `typing.Annotated` to steer field resolution.

Example:
    class ServerSection(ConfigSection, always=True):
        host: str = "localhost"
        ports: Annotated[list[int], Always]
        credentials: Annotated[CredentialsSection, Inlined]
        cache: Annotated[dict, TypeHint(str, int)]
        scratch: Annotated[str, Ignore] = ""
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    from .fields import SectionField


class FieldMarker(Enum):
    """Markers attached to a field annotation with `typing.Annotated`."""

    IGNORE = "ignore"
    ALWAYS = "always"
    INLINED = "inlined"


Ignore = FieldMarker.IGNORE
"""Exclude the field from mapping."""

Always = FieldMarker.ALWAYS
"""Resolve the field even when its path is absent."""

Inlined = FieldMarker.INLINED
"""Read the field from the parent path instead of appending the field name."""


class TypeHint:
    """Explicit type arguments for a container annotated without them.

    `Annotated[dict, TypeHint(str, int)]` resolves like `dict[str, int]`.
    """

    __slots__ = ("arguments",)

    def __init__(self, *arguments: Any) -> None:
        self.arguments = arguments

    def __repr__(self) -> str:
        return f"TypeHint{self.arguments!r}"


class ConfigSection:
    """Base class for strongly-typed configuration sections.

    Subclasses declare fields as class annotations and must be constructible
    without arguments. Passing `always=True` in the class statement marks every
    field declared by that class as always resolved.
    """

    __config_always__ = False

    def __init_subclass__(cls, *, always: bool = False, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.__config_always__ = always

    def runtime_decide(self, field_name: str) -> Any | None:
        """Decide the concrete type of an `Any` field from already-mapped siblings.

        `Any` fields are resolved after every concretely typed field of the
        section. Returning `None` is an error.
        """

        return None

    def default_for(self, field_type: Any, field_name: str) -> Any | None:
        """Return a fallback value for a field that resolved to `None`."""

        return None

    def after_parsing(self, fields: Sequence[SectionField]) -> None:
        """Finalize the section once all fields have been assigned."""

        return None
