"""Section mapper and field resolution engine.

Responsibilities:
- Instantiate section classes and populate their fields from the config store.
- Resolve each field by path, shape and converter, recursing into nested sections.
- Annotate any failure with the full dotted path of the offending value.

Key types:
- `ConfigMapper`: entry point, `map_section(root, SectionType)`.

Field metadata is re-derived on every call; nothing is cached between calls.
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from typing import Any, TypeVar

from .converters import ConverterRegistry, ValueConverter
from .errors import (
    ConfigMapperError,
    FieldResolutionError,
    MappingError,
    NoDefaultConstructor,
    TypeMismatch,
    UnsupportedType,
)
from .expressions import EMPTY_ENVIRONMENT, ExpressionEvaluator, evaluate_if_expression
from .fields import (
    FieldShape,
    SectionField,
    TypeShape,
    describe_fields,
    order_fields,
    shape_of,
    unwrap_annotation,
)
from .logger import MapperLogger
from .paths import join_paths, resolve_path
from .scalars import scalar_type_for
from .sections import ConfigSection
from .store import ConfigStore
from .values import ConfigValue

SectionT = TypeVar("SectionT", bound=ConfigSection)

_SEQUENCE_TYPES = (list, tuple, set, frozenset)
_REQUIRED_PARAMETER_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)
_COLLECTION_LABELS = {
    FieldShape.LIST: "a list",
    FieldShape.SET: "a set",
    FieldShape.ARRAY: "an array",
}


class ConfigMapper:
    """Map configuration subtrees onto `ConfigSection` instances."""

    def __init__(
        self,
        config: ConfigStore,
        evaluator: ExpressionEvaluator | None = None,
        converter_registry: ConverterRegistry | None = None,
        run_logger: MapperLogger | None = None,
    ) -> None:
        """Initialize the mapper.

        Args:
            config: Store values are read from.
            evaluator: Evaluator for deferred expressions; without one, expressions
                are passed on unevaluated.
            converter_registry: Optional registry of custom value converters.
            run_logger: Event logger; a sink-less logger is used when omitted.
        """

        self._config = config
        self._evaluator = evaluator
        self._converters = converter_registry
        self._logger = run_logger or MapperLogger()

    @property
    def config(self) -> ConfigStore:
        """Store this mapper reads from."""

        return self._config

    def close(self) -> None:
        """Detach the log sink of this mapper's logger, if it has one."""

        self._logger.close()

    def map_section(self, root: str | None, section_type: type[SectionT]) -> SectionT:
        """Map the subtree at `root` (`None` for the whole config) onto a new `section_type`.

        Raises:
            FieldResolutionError: If a field fails to resolve; carries the dotted path.
            NoDefaultConstructor: If `section_type` needs constructor arguments.
            MappingError: If `section_type` is not a section or references itself.
        """

        return self._map_section_sub(root, None, section_type, None)

    def _map_section_sub(
        self,
        root: str | None,
        source: Mapping[Any, Any] | None,
        section_type: type[SectionT],
        origin: str | None,
    ) -> SectionT:
        """Create a section and assign every mapped field.

        `source` replaces store lookups for this subtree when the values were
        already fetched as a mapping; `origin` is the display path of that
        mapping and only affects error and log locations.
        """

        self._logger.log_section_start(join_paths(origin, root), section_type)
        instance = self._instantiate(section_type)
        fields = describe_fields(section_type)

        for section_field in order_fields(fields):
            display_path = join_paths(origin, join_paths(root, section_field.name))
            try:
                self._assign_field(instance, root, source, origin, section_field)
            except FieldResolutionError:
                raise
            except ConfigMapperError as error:
                self._logger.log_failure(display_path, type(error).__name__)
                raise FieldResolutionError(path=display_path, detail=str(error)) from error

        instance.after_parsing(fields)
        self._logger.log_section_complete(join_paths(origin, root), section_type, len(fields))
        return instance

    def _assign_field(
        self,
        instance: ConfigSection,
        root: str | None,
        source: Mapping[Any, Any] | None,
        origin: str | None,
        section_field: SectionField,
    ) -> None:
        field_type: Any = section_field.annotation

        if section_field.is_deferred:
            decided_type = instance.runtime_decide(section_field.name)
            if decided_type is None or decided_type is Any or decided_type is object:
                raise MappingError("Requesting plain objects is disallowed")
            self._logger.log_runtime_decision(section_field.name, decided_type)
            field_type = decided_type

        effective_type, converter = self._substitute_type(field_type)
        value = self._resolve_field_value(root, source, origin, section_field, effective_type)

        # Converters also receive absent values.
        if converter is not None:
            value = converter(value, self._evaluator)

        # Fall back on a section-provided default, then on the constructor's value.
        if value is None:
            value = instance.default_for(unwrap_annotation(field_type)[0], section_field.name)
        if value is None:
            return

        setattr(instance, section_field.name, value)

    def _resolve_field_value(
        self,
        root: str | None,
        source: Mapping[Any, Any] | None,
        origin: str | None,
        section_field: SectionField,
        effective_type: Any,
    ) -> Any:
        path = root if section_field.inlined else join_paths(root, section_field.name)
        display_path = join_paths(origin, path)

        shape = shape_of(effective_type)
        self._logger.log_field(display_path, shape.target)

        value = resolve_path(path, source, self._config, self._logger)
        if value is None and not section_field.always:
            return None

        if shape.kind is FieldShape.SECTION:
            return self._map_section_sub(path, source, shape.target, origin)
        if shape.kind is FieldShape.ANY:
            return value
        if shape.kind is FieldShape.MAP:
            return self._resolve_map(value, shape, display_path)
        if shape.kind in _COLLECTION_LABELS:
            return self._resolve_collection(value, shape, display_path)
        return self._convert_plain(value, effective_type, display_path)

    def _resolve_collection(self, value: Any, shape: TypeShape, display_path: str | None) -> Any:
        value = evaluate_if_expression(value, self._evaluator, EMPTY_ENVIRONMENT)
        items = value if isinstance(value, _SEQUENCE_TYPES) else ()

        element_type = shape.arguments[0]
        label = _COLLECTION_LABELS[shape.kind]
        results: list[Any] = []
        for index, item in enumerate(items):
            try:
                results.append(self._convert_type(item, element_type, f"{display_path or ''}[{index}]"))
            except FieldResolutionError:
                raise
            except ConfigMapperError as error:
                raise error.with_context(f"at index {index} of {label}") from error

        if shape.kind is FieldShape.SET:
            try:
                return set(results)
            except TypeError as error:
                raise TypeMismatch(f"Cannot collect unhashable values into a set: {error}") from error
        if shape.kind is FieldShape.ARRAY:
            return tuple(results)
        return results

    def _resolve_map(self, value: Any, shape: TypeShape, display_path: str | None) -> dict[Any, Any]:
        value = evaluate_if_expression(value, self._evaluator, EMPTY_ENVIRONMENT)
        if not isinstance(value, Mapping):
            return {}

        key_type, value_type = shape.arguments
        results: dict[Any, Any] = {}
        for raw_key, raw_value in value.items():
            try:
                key = self._convert_type(raw_key, key_type, display_path)
            except FieldResolutionError:
                raise
            except ConfigMapperError as error:
                raise error.with_context("at the key of a map") from error

            try:
                results[key] = self._convert_type(raw_value, value_type, f"{display_path or ''}[{key}]")
            except FieldResolutionError:
                raise
            except ConfigMapperError as error:
                raise error.with_context(f"at value for key={key} of a map") from error

        return results

    def _convert_type(self, value: Any, target_type: Any, origin: str | None) -> Any:
        """Convert a container element, applying converter substitution for its type."""

        if value is None:
            return None
        effective_type, converter = self._substitute_type(target_type)
        return self._apply_converter(converter, self._convert_plain(value, effective_type, origin))

    def _convert_plain(self, value: Any, target_type: Any, origin: str | None) -> Any:
        if value is None:
            return None

        shape = shape_of(target_type)
        if shape.kind is FieldShape.ANY:
            return value
        if shape.kind is FieldShape.SECTION:
            section_source = value if isinstance(value, Mapping) else {}
            return self._map_section_sub(None, section_source, shape.target, origin)

        evaluable = ConfigValue(value, self._evaluator)
        if shape.kind is FieldShape.EVALUABLE:
            return evaluable
        if shape.kind is FieldShape.SCALAR:
            return evaluable.as_scalar(scalar_type_for(shape.target), EMPTY_ENVIRONMENT)
        raise UnsupportedType(f"Unsupported type specified: {target_type!r}")

    def _substitute_type(self, target_type: Any) -> tuple[Any, ValueConverter | None]:
        """Return the type to resolve as and the converter to apply afterwards."""

        if self._converters is None:
            return target_type, None

        bare_type = unwrap_annotation(target_type)[0]
        required_type = self._converters.get_required_type_for(bare_type)
        converter = self._converters.get_converter_for(bare_type)
        if required_type is not None and converter is not None:
            self._logger.log_converter(bare_type, required_type)
            return required_type, converter
        return target_type, converter

    def _apply_converter(self, converter: ValueConverter | None, value: Any) -> Any:
        if converter is None or value is None:
            return value
        return converter(value, self._evaluator)

    @staticmethod
    def _instantiate(section_type: type[SectionT]) -> SectionT:
        if not isinstance(section_type, type) or not issubclass(section_type, ConfigSection):
            raise MappingError(f"{section_type!r} is not a config section")

        try:
            signature = inspect.signature(section_type)
        except (TypeError, ValueError):
            signature = None

        if signature is not None and any(
            parameter.default is inspect.Parameter.empty and parameter.kind in _REQUIRED_PARAMETER_KINDS
            for parameter in signature.parameters.values()
        ):
            raise NoDefaultConstructor(
                f"Please specify an empty default constructor on {section_type.__name__}"
            )

        return section_type()

