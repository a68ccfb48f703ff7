"""Field discovery and type-shape interpretation for section classes.

Responsibilities:
- Collect the mappable fields of a section class, including inherited ones.
- Interpret a field annotation into a shape the resolution engine dispatches on.

Key types:
- `FieldShape`: the kinds of values a field can hold.
- `TypeShape`: a shape plus the target class and its type arguments.
- `SectionField`: one discovered field with its markers.
"""

from __future__ import annotations

import collections.abc
import inspect
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Any, ClassVar, Union

from .errors import GenericTypeMissing, MappingError, UnsupportedType
from .sections import ConfigSection, FieldMarker, TypeHint
from .values import ConfigValue


class FieldShape(Enum):
    """Kinds of values a section field can be resolved into."""

    SCALAR = "scalar"
    LIST = "list"
    SET = "set"
    MAP = "map"
    ARRAY = "array"
    SECTION = "section"
    ANY = "any"
    EVALUABLE = "evaluable"


_LIST_ORIGINS = (list, collections.abc.Sequence, collections.abc.MutableSequence)
_SET_ORIGINS = (set, frozenset, collections.abc.Set, collections.abc.MutableSet)
_MAP_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


@dataclass(frozen=True, slots=True)
class TypeShape:
    """Interpreted annotation.

    Attributes:
        kind: Shape the value is resolved into.
        target: Underlying class (element container, section class or scalar type).
        arguments: Element (`LIST`, `SET`, `ARRAY`) or key/value (`MAP`) annotations.
    """

    kind: FieldShape
    target: Any
    arguments: tuple[Any, ...] = ()


def _strip_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    metadata: tuple[Any, ...] = ()
    while typing.get_origin(annotation) is Annotated:
        metadata += annotation.__metadata__
        annotation = annotation.__origin__
    return annotation, metadata


def _strip_optional(annotation: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [member for member in typing.get_args(annotation) if member is not type(None)]
        if len(members) != 1:
            raise UnsupportedType(f"Unsupported union type specified: {annotation!r}")
        return members[0]
    return annotation


def unwrap_annotation(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Strip `Annotated` and `Optional` wrappers, returning the bare type and its metadata."""

    annotation, metadata = _strip_annotated(annotation)
    annotation = _strip_optional(annotation)
    annotation, inner_metadata = _strip_annotated(annotation)
    return annotation, metadata + inner_metadata


def _container_shape(
    kind: FieldShape,
    origin: Any,
    arguments: tuple[Any, ...],
    hint: TypeHint | None,
    arity: int,
    annotation: Any,
) -> TypeShape:
    if not arguments and hint is not None:
        arguments = hint.arguments
    if kind is FieldShape.ARRAY and len(arguments) == 2 and arguments[1] is Ellipsis:
        arguments = arguments[:1]
    if not arguments:
        raise GenericTypeMissing(
            f"Container type {annotation!r} requires element type arguments or a TypeHint"
        )
    if len(arguments) != arity:
        raise MappingError(
            f"Unknown generic arity {len(arguments)} for {annotation!r}, expected {arity}"
        )
    return TypeShape(kind, origin, tuple(arguments))


def shape_of(annotation: Any) -> TypeShape:
    """Interpret a (possibly wrapped) annotation into a `TypeShape`.

    Raises:
        GenericTypeMissing: If a container annotation has no type arguments.
        MappingError: If a container carries an unexpected number of arguments.
        UnsupportedType: If the annotation is a union of several types.
    """

    bare, metadata = unwrap_annotation(annotation)
    hint = next((item for item in metadata if isinstance(item, TypeHint)), None)

    if bare is Any or bare is object:
        return TypeShape(FieldShape.ANY, object)

    origin = typing.get_origin(bare) or bare
    arguments = typing.get_args(bare)

    if origin is tuple:
        return _container_shape(FieldShape.ARRAY, tuple, arguments, hint, 1, annotation)
    if origin in _LIST_ORIGINS:
        return _container_shape(FieldShape.LIST, list, arguments, hint, 1, annotation)
    if origin in _SET_ORIGINS:
        return _container_shape(FieldShape.SET, set, arguments, hint, 1, annotation)
    if origin in _MAP_ORIGINS:
        return _container_shape(FieldShape.MAP, dict, arguments, hint, 2, annotation)

    if isinstance(bare, type) and issubclass(bare, ConfigSection):
        return TypeShape(FieldShape.SECTION, bare)
    if bare is ConfigValue:
        return TypeShape(FieldShape.EVALUABLE, ConfigValue)
    return TypeShape(FieldShape.SCALAR, bare)


@dataclass(frozen=True, slots=True)
class SectionField:
    """One mappable field of a section class.

    Attributes:
        name: Attribute name, also the relative configuration key.
        annotation: Declared annotation, including `Annotated` metadata.
        owner: Class that declared the field.
        always: Resolve even when the path is absent.
        inlined: Reuse the parent path instead of appending `name`.
    """

    name: str
    annotation: Any
    owner: type
    always: bool = False
    inlined: bool = False

    @property
    def shape(self) -> TypeShape:
        """Shape of the declared annotation."""

        return shape_of(self.annotation)

    @property
    def declared_type(self) -> Any:
        """Declared type without `Annotated`/`Optional` wrappers."""

        return unwrap_annotation(self.annotation)[0]

    @property
    def is_deferred(self) -> bool:
        """Whether the field's concrete type is decided at runtime."""

        bare = self.declared_type
        return bare is Any or bare is object


def _is_class_var(annotation: Any) -> bool:
    annotation, _ = _strip_annotated(annotation)
    return annotation is ClassVar or typing.get_origin(annotation) is ClassVar


def describe_fields(section_type: type[ConfigSection]) -> list[SectionField]:
    """Discover the mappable fields of `section_type`, base classes first.

    Raises:
        MappingError: If a field's type is `section_type` itself.
    """

    hints = typing.get_type_hints(section_type, include_extras=True)
    fields: dict[str, SectionField] = {}

    for owner in reversed(section_type.__mro__):
        if owner is object or owner is ConfigSection:
            continue

        for name in inspect.get_annotations(owner):
            annotation = hints.get(name)
            if annotation is None or _is_class_var(annotation):
                continue

            bare, metadata = unwrap_annotation(annotation)
            if FieldMarker.IGNORE in metadata:
                fields.pop(name, None)
                continue

            if bare is section_type:
                raise MappingError(
                    f"Sections cannot use self-referencing fields ({section_type.__name__}, {name})"
                )

            fields[name] = SectionField(
                name=name,
                annotation=annotation,
                owner=owner,
                always=FieldMarker.ALWAYS in metadata or owner.__dict__.get("__config_always__", False),
                inlined=FieldMarker.INLINED in metadata,
            )

    return list(fields.values())


def order_fields(fields: list[SectionField]) -> list[SectionField]:
    """Return `fields` with runtime-decided (`Any`) fields moved last, otherwise stable."""

    return sorted(fields, key=lambda section_field: section_field.is_deferred)
