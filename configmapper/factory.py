"""Mapper factory helpers.

Responsibilities:
- Wire a store, evaluator, converters and logging into a `ConfigMapper`.
- Keep callers independent from settings-to-component construction.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

from .converters import ConverterRegistry
from .expressions import ExpressionEvaluator, ExpressionParser
from .logger import MapperLogger
from .mapper import ConfigMapper
from .settings import MapperSettings
from .store import ConfigStore, YamlConfig


class MapperFactory:
    """Factory for configured mappers and YAML-backed stores."""

    @staticmethod
    def create(
        store: ConfigStore,
        evaluator: ExpressionEvaluator | None = None,
        converters: ConverterRegistry | None = None,
        settings: MapperSettings | None = None,
        sink: TextIO | None = None,
    ) -> ConfigMapper:
        """Create a mapper over `store`, logging to `sink` (stderr by default) when enabled.

        Call `close()` on the returned mapper to detach its log sink.
        """

        resolved_settings = settings if settings is not None else MapperSettings()
        resolved_settings.validate()

        run_logger = (
            MapperLogger(sink=sink or sys.stderr, level=resolved_settings.log_level)
            if resolved_settings.log_enabled
            else MapperLogger()
        )
        return ConfigMapper(
            store,
            evaluator=evaluator,
            converter_registry=converters,
            run_logger=run_logger,
        )

    @staticmethod
    def create_yaml_store(
        source: str | Path,
        settings: MapperSettings | None = None,
        expression_parser: ExpressionParser | None = None,
    ) -> YamlConfig:
        """Create a YAML store from document text or a file path."""

        resolved_settings = settings if settings is not None else MapperSettings()
        resolved_settings.validate()

        if isinstance(source, Path):
            return YamlConfig.from_path(
                source,
                expression_marker_suffix=resolved_settings.expression_marker_suffix,
                expression_parser=expression_parser,
            )

        store = YamlConfig(
            expression_marker_suffix=resolved_settings.expression_marker_suffix,
            expression_parser=expression_parser,
        )
        store.load(source)
        return store

    @staticmethod
    def from_yaml(
        source: str | Path,
        evaluator: ExpressionEvaluator | None = None,
        converters: ConverterRegistry | None = None,
        settings: MapperSettings | None = None,
        expression_parser: ExpressionParser | None = None,
    ) -> ConfigMapper:
        """Create a mapper over a YAML document given as text or a file path."""

        store = MapperFactory.create_yaml_store(source, settings, expression_parser)
        return MapperFactory.create(store, evaluator, converters, settings)
