"""Dotted path helpers.

Responsibilities:
- Join a root path and a relative segment without doubled or missing separators.
- Resolve a dotted path against the backing store or an already-fetched mapping.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .errors import MappingError
from .logger import MapperLogger

if TYPE_CHECKING:
    from .store import ConfigStore


def join_paths(a: str | None, b: str | None) -> str | None:
    """Join two dotted paths.

    Examples:
        `join_paths("a.", ".b") == "a.b"`, `join_paths(None, "b") == "b"`,
        `join_paths("a", None) == "a"`.
    """

    if a is None or not a.strip():
        return b
    if b is None or not b.strip():
        return a
    if a.endswith(".") and b.startswith("."):
        return a + b[1:]
    if a.endswith(".") or b.startswith("."):
        return a + b
    return f"{a}.{b}"


def resolve_path(
    path: str | None,
    source: Mapping[Any, Any] | None,
    store: ConfigStore,
    run_logger: MapperLogger | None = None,
) -> Any:
    """Resolve `path` from `source` when given, otherwise from the backing store.

    Returns:
        The value at `path`, or `None` when absent or when an intermediate
        segment is not a mapping.

    Raises:
        MappingError: If a segment of the path is blank.
    """

    if source is None:
        return store.get(path)

    if not path:
        return source

    current: Mapping[Any, Any] = source
    keys = path.split(".")
    for position, key in enumerate(keys):
        if not key.strip():
            raise MappingError("Cannot resolve a blank key")

        value = current.get(key)
        if position == len(keys) - 1:
            return value

        if not isinstance(value, Mapping):
            if run_logger is not None:
                run_logger.log_dead_end(key, path)
            return None
        current = value

    return None
