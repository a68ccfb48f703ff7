"""Mapper settings and loaders.

Responsibilities:
- Define the library's own runtime settings as a typed dataclass.
- Provide loader entry points for file- and environment-based settings.

Key types:
- `MapperSettings`: normalized settings for building stores and mappers.
- `SettingsLoader`: static construction helpers for `MapperSettings`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import normalize_optional_string, parse_required_boolean

_DEFAULT_EXPRESSION_MARKER_SUFFIX = "$"
_DEFAULT_LOG_LEVEL = "WARNING"
_SUPPORTED_LOG_LEVELS = frozenset({"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"})


@dataclass(frozen=True, slots=True)
class MapperSettings:
    """Settings for one mapper setup.

    Attributes:
        expression_marker_suffix: Key suffix marking expression values in YAML.
        log_enabled: Whether mapper events are written to the log sink.
        log_level: Minimum loguru level for emitted mapper events.
    """

    expression_marker_suffix: str = _DEFAULT_EXPRESSION_MARKER_SUFFIX
    log_enabled: bool = False
    log_level: str = _DEFAULT_LOG_LEVEL

    def validate(self) -> None:
        """Validate settings values before they are used."""

        if not isinstance(self.expression_marker_suffix, str) or not self.expression_marker_suffix.strip():
            raise ValueError("`expression_marker_suffix` must be a non-empty string.")
        if "." in self.expression_marker_suffix:
            raise ValueError("`expression_marker_suffix` must not contain the path separator `.`.")
        if self.log_level not in _SUPPORTED_LOG_LEVELS:
            supported = ", ".join(sorted(_SUPPORTED_LOG_LEVELS))
            raise ValueError(f"Unsupported `log_level` value `{self.log_level}`; supported: {supported}.")


class SettingsLoader:
    """Factory methods for creating `MapperSettings` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset({"expression_marker_suffix", "log_enabled", "log_level"})

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> MapperSettings:
        """Create validated settings from environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env

        suffix = (
            normalize_optional_string(env_map.get("CONFIGMAPPER_EXPRESSION_SUFFIX"))
            or _DEFAULT_EXPRESSION_MARKER_SUFFIX
        )
        enabled_token = normalize_optional_string(env_map.get("CONFIGMAPPER_LOG_ENABLED"))
        log_enabled = (
            parse_required_boolean(enabled_token, "CONFIGMAPPER_LOG_ENABLED")
            if enabled_token is not None
            else False
        )
        log_level = (
            normalize_optional_string(env_map.get("CONFIGMAPPER_LOG_LEVEL")) or _DEFAULT_LOG_LEVEL
        ).upper()

        settings = MapperSettings(
            expression_marker_suffix=suffix,
            log_enabled=log_enabled,
            log_level=log_level,
        )
        settings.validate()
        return settings

    @staticmethod
    def from_yaml(path: Path) -> MapperSettings:
        """Create validated settings from a YAML file."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML settings `{path}` must contain a top-level mapping/object.")

        SettingsLoader._validate_keys(payload, f"YAML `{path}`")

        settings = MapperSettings(
            expression_marker_suffix=SettingsLoader._optional_string(
                payload, "expression_marker_suffix"
            )
            or _DEFAULT_EXPRESSION_MARKER_SUFFIX,
            log_enabled=SettingsLoader._optional_boolean(payload, "log_enabled"),
            log_level=(SettingsLoader._optional_string(payload, "log_level") or _DEFAULT_LOG_LEVEL).upper(),
        )
        settings.validate()
        return settings

    @staticmethod
    def _validate_keys(payload: Mapping[str, Any], source_label: str) -> None:
        """Reject keys that do not correspond to a settings field."""

        unknown = sorted(str(key) for key in payload if key not in SettingsLoader._SUPPORTED_YAML_KEYS)
        if unknown:
            raise ValueError(f"{source_label} contains unknown key(s): {', '.join(unknown)}.")

    @staticmethod
    def _optional_string(payload: Mapping[str, Any], key: str) -> str | None:
        return normalize_optional_string(payload.get(key))

    @staticmethod
    def _optional_boolean(payload: Mapping[str, Any], key: str) -> bool:
        value = payload.get(key)
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        return parse_required_boolean(str(value), key)
