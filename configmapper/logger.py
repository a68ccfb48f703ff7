"""Structured mapping logs.

Responsibilities:
- Emit concise, deterministic event lines while sections are being mapped.
- Route them through `loguru`; the package is disabled on import, so nothing is
  emitted unless a `MapperLogger` is created with a sink or the caller runs
  `logger.enable("configmapper")`. Closing the last sink logger disables the
  package again.
"""

from __future__ import annotations

import threading
from typing import TextIO

from loguru import logger as _loguru_logger

_PACKAGE_NAME = "configmapper"
_ROOT_PATH_TOKEN = "root"


def _sanitize_context_value(value: object) -> str:
    """Convert context values into stable, shell-safe tokens."""

    raw = str(value).strip()
    if not raw:
        return "none"
    return "".join(
        character if character.isalnum() or character in {"-", "_", ".", ":", "/", "[", "]"} else "_"
        for character in raw
    )


def _format_context(context: dict[str, object]) -> str:
    """Serialize context key/value pairs in deterministic key order."""

    if not context:
        return ""
    tokens = [
        f"{key}={_sanitize_context_value(context[key])}"
        for key in sorted(context.keys())
    ]
    return " " + " ".join(tokens)


def _type_label(value: object) -> str:
    return getattr(value, "__name__", None) or repr(value)


class MapperLogger:
    """Emit deterministic event logs for mapper activity.

    The package stays enabled in loguru only while at least one logger with a
    sink is open.
    """

    _sink_lock = threading.Lock()
    _open_sinks = 0

    def __init__(self, sink: TextIO | None = None, level: str = "DEBUG") -> None:
        """Attach an optional sink receiving this package's events at `level` and above."""

        self._handler_id: int | None = None
        if sink is not None:
            self._handler_id = _loguru_logger.add(
                sink,
                format="{message}",
                level=level,
                colorize=False,
                filter=_PACKAGE_NAME,
            )
            with MapperLogger._sink_lock:
                MapperLogger._open_sinks += 1
                _loguru_logger.enable(_PACKAGE_NAME)

    def close(self) -> None:
        """Detach the sink added by this logger, if any."""

        if self._handler_id is None:
            return

        _loguru_logger.remove(self._handler_id)
        self._handler_id = None
        with MapperLogger._sink_lock:
            MapperLogger._open_sinks -= 1
            if MapperLogger._open_sinks == 0:
                _loguru_logger.disable(_PACKAGE_NAME)

    def _emit(self, level: str, event: str, **context: object) -> None:
        """Emit one structured mapper log line."""

        line = f"[mapper] level={level} event={event}{_format_context(context)}"
        _loguru_logger.log(level, line)

    def log_section_start(self, path: str | None, section_type: type) -> None:
        """Emit a section-mapping start event."""

        self._emit("DEBUG", "section_start", path=path or _ROOT_PATH_TOKEN, type=_type_label(section_type))

    def log_section_complete(self, path: str | None, section_type: type, field_count: int) -> None:
        """Emit a section-mapping completion event."""

        self._emit(
            "DEBUG",
            "section_complete",
            path=path or _ROOT_PATH_TOKEN,
            type=_type_label(section_type),
            fields=field_count,
        )

    def log_field(self, path: str | None, field_type: object) -> None:
        """Emit a field-resolution event."""

        self._emit("TRACE", "field", path=path or _ROOT_PATH_TOKEN, type=_type_label(field_type))

    def log_runtime_decision(self, field_name: str, decided_type: object) -> None:
        """Emit the type a section decided for one of its `Any` fields."""

        self._emit("TRACE", "runtime_decide", field=field_name, type=_type_label(decided_type))

    def log_converter(self, target_type: object, required_type: object) -> None:
        """Emit a custom-converter substitution event."""

        self._emit(
            "TRACE",
            "converter",
            target=_type_label(target_type),
            required=_type_label(required_type),
        )

    def log_dead_end(self, key: str, path: str) -> None:
        """Emit an event for a path walk ending on a non-mapping value."""

        self._emit("TRACE", "dead_end", key=key, path=path)

    def log_failure(self, path: str | None, error_type: str) -> None:
        """Emit a field-failure event without value payloads."""

        self._emit("WARNING", "failure", path=path or _ROOT_PATH_TOKEN, error_type=error_type)
