"""Unit tests for YAML/environment settings loader behavior."""

from __future__ import annotations

from pathlib import Path

import pytest

from configmapper.settings import MapperSettings, SettingsLoader


def test_settings_defaults_are_valid() -> None:
    """Default settings should validate without changes."""

    settings = MapperSettings()

    settings.validate()
    assert settings.expression_marker_suffix == "$"
    assert settings.log_enabled is False
    assert settings.log_level == "WARNING"


def test_settings_loader_from_env_normalizes_values() -> None:
    """Environment loading should strip values and upper-case the log level."""

    settings = SettingsLoader.from_env(
        {
            "CONFIGMAPPER_EXPRESSION_SUFFIX": " @ ",
            "CONFIGMAPPER_LOG_ENABLED": " yes ",
            "CONFIGMAPPER_LOG_LEVEL": " debug ",
        }
    )

    assert settings == MapperSettings(
        expression_marker_suffix="@",
        log_enabled=True,
        log_level="DEBUG",
    )


def test_settings_loader_from_env_uses_defaults_for_blank_values() -> None:
    """Blank or missing environment values should fall back to defaults."""

    settings = SettingsLoader.from_env({"CONFIGMAPPER_EXPRESSION_SUFFIX": "   "})

    assert settings == MapperSettings()


def test_settings_loader_from_env_rejects_invalid_boolean() -> None:
    """An invalid log toggle should fail with the variable name in the message."""

    with pytest.raises(ValueError, match="CONFIGMAPPER_LOG_ENABLED"):
        SettingsLoader.from_env({"CONFIGMAPPER_LOG_ENABLED": "sometimes"})


def test_settings_loader_from_env_rejects_unknown_log_level() -> None:
    """Log levels must be known to loguru."""

    with pytest.raises(ValueError, match="Unsupported `log_level` value `LOUD`"):
        SettingsLoader.from_env({"CONFIGMAPPER_LOG_LEVEL": "loud"})


def test_settings_loader_from_env_reads_process_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Without an explicit mapping, `os.environ` should be used."""

    monkeypatch.setenv("CONFIGMAPPER_LOG_LEVEL", "info")
    monkeypatch.delenv("CONFIGMAPPER_EXPRESSION_SUFFIX", raising=False)
    monkeypatch.delenv("CONFIGMAPPER_LOG_ENABLED", raising=False)

    assert SettingsLoader.from_env().log_level == "INFO"


def test_settings_validate_rejects_separator_in_suffix() -> None:
    """The marker suffix cannot contain the path separator."""

    with pytest.raises(ValueError, match="path separator"):
        MapperSettings(expression_marker_suffix=".x").validate()


def test_settings_loader_from_yaml_loads_valid_settings(tmp_path: Path) -> None:
    """YAML loading should parse and normalize all supported keys."""

    settings_path = tmp_path / "configmapper.yml"
    settings_path.write_text(
        'expression_marker_suffix: " ! "\nlog_enabled: "on"\nlog_level: trace\n',
        encoding="utf-8",
    )

    settings = SettingsLoader.from_yaml(settings_path)

    assert settings == MapperSettings(
        expression_marker_suffix="!",
        log_enabled=True,
        log_level="TRACE",
    )


def test_settings_loader_from_yaml_accepts_empty_file(tmp_path: Path) -> None:
    """An empty settings file should yield default settings."""

    settings_path = tmp_path / "empty.yml"
    settings_path.write_text("", encoding="utf-8")

    assert SettingsLoader.from_yaml(settings_path) == MapperSettings()


def test_settings_loader_from_yaml_rejects_unknown_keys(tmp_path: Path) -> None:
    """Unknown keys should be reported by name."""

    settings_path = tmp_path / "unknown.yml"
    settings_path.write_text("log_level: INFO\ncolour: blue\n", encoding="utf-8")

    with pytest.raises(ValueError, match=r"contains unknown key\(s\): colour\."):
        SettingsLoader.from_yaml(settings_path)


def test_settings_loader_from_yaml_rejects_non_mapping_root(tmp_path: Path) -> None:
    """A settings document must be a mapping."""

    settings_path = tmp_path / "list.yml"
    settings_path.write_text("- a\n", encoding="utf-8")

    with pytest.raises(ValueError, match="top-level mapping/object"):
        SettingsLoader.from_yaml(settings_path)
