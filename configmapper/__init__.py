"""Top-level package for configmapper.

This package maps loosely-typed configuration trees onto strongly-typed
`ConfigSection` classes, resolving deferred expressions on demand. The main
entry point is `ConfigMapper.map_section`.
"""

from loguru import logger as _loguru_logger

from .converters import ConverterRegistry, ValueConverterRegistry
from .errors import (
    CoercionError,
    ConfigMapperError,
    FieldResolutionError,
    GenericTypeMissing,
    MappingError,
    NoDefaultConstructor,
    TypeMismatch,
    UnsupportedType,
)
from .expressions import EMPTY_ENVIRONMENT, Expression, ExpressionEvaluator
from .factory import MapperFactory
from .fields import SectionField
from .mapper import ConfigMapper
from .paths import join_paths
from .scalars import ScalarType, scalar_type_for
from .sections import Always, ConfigSection, Ignore, Inlined, TypeHint
from .settings import MapperSettings, SettingsLoader
from .store import ConfigStore, YamlConfig
from .values import ConfigValue

_loguru_logger.disable(__name__)

__all__ = [
    "Always",
    "CoercionError",
    "ConfigMapper",
    "ConfigMapperError",
    "ConfigSection",
    "ConfigStore",
    "ConfigValue",
    "ConverterRegistry",
    "EMPTY_ENVIRONMENT",
    "Expression",
    "ExpressionEvaluator",
    "FieldResolutionError",
    "GenericTypeMissing",
    "Ignore",
    "Inlined",
    "MapperFactory",
    "MapperSettings",
    "MappingError",
    "NoDefaultConstructor",
    "ScalarType",
    "SectionField",
    "SettingsLoader",
    "TypeHint",
    "TypeMismatch",
    "UnsupportedType",
    "ValueConverterRegistry",
    "YamlConfig",
    "join_paths",
    "scalar_type_for",
    "__version__",
]

__version__ = "0.1.0"
