"""Path-addressable configuration store.

Responsibilities:
- Define the key/value store contract the mapper reads from.
- Provide a YAML-backed in-memory implementation with expression-marked keys.

Key types:
- `ConfigStore`: interface for dotted-path `get/set/remove/exists` and comments.
- `YamlConfig`: nested-mapping store loaded from and dumped to YAML.

Keys ending with the expression marker suffix (`$` by default) hold expression
source text; they are stored without the suffix as `Expression` values.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import IO, Any

import yaml

from .errors import MappingError
from .expressions import Expression, ExpressionParser

_DEFAULT_EXPRESSION_MARKER_SUFFIX = "$"


class ConfigStore:
    """Interface for a dotted-path key/value store.

    A `None` or empty path addresses the root mapping.
    """

    def get(self, path: str | None) -> Any:
        """Return the value at `path`, or `None` when absent."""

        raise NotImplementedError

    def set(self, path: str | None, value: Any) -> None:
        """Store `value` at `path`, creating intermediate mappings."""

        raise NotImplementedError

    def remove(self, path: str | None) -> None:
        """Remove the key at `path` with all of its children."""

        raise NotImplementedError

    def exists(self, path: str | None) -> bool:
        """Return whether `path` exists."""

        raise NotImplementedError

    def attach_comment(self, path: str | None, lines: list[str], self_key: bool) -> None:
        """Attach comment lines to the key at `path` (`self_key`) or to its value."""

        raise NotImplementedError

    def read_comment(self, path: str | None, self_key: bool) -> list[str] | None:
        """Return the comment lines attached at `path`, or `None` when there are none."""

        raise NotImplementedError


def _split_path(path: str | None) -> list[str]:
    if path is None or not path.strip():
        return []
    keys = path.split(".")
    if any(not key.strip() for key in keys):
        raise MappingError(f"Cannot resolve a blank key in config path `{path}`")
    return keys


class YamlConfig(ConfigStore):
    """In-memory nested-mapping store with YAML load and dump support.

    Comments live in memory only and are not written by `dump`.
    """

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        *,
        expression_marker_suffix: str = _DEFAULT_EXPRESSION_MARKER_SUFFIX,
        expression_parser: ExpressionParser | None = None,
    ) -> None:
        """Initialize the store, optionally seeded with an already-parsed mapping."""

        if not expression_marker_suffix:
            raise ValueError("`expression_marker_suffix` must be a non-empty string.")
        self._suffix = expression_marker_suffix
        self._parser = expression_parser
        self._root: dict[str, Any] = self._import_mapping(data or {})
        self._comments: dict[tuple[str, bool], list[str]] = {}

    @classmethod
    def from_path(cls, path: Path, **kwargs: Any) -> YamlConfig:
        """Create a store from a YAML file."""

        store = cls(**kwargs)
        store.load(path.read_text(encoding="utf-8"), source_label=f"YAML `{path}`")
        return store

    def load(self, source: str | IO[str], source_label: str = "YAML input") -> None:
        """Replace the store contents with a parsed YAML document.

        Raises:
            ValueError: If the document root is not a mapping.
        """

        payload = yaml.safe_load(source)
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"{source_label} must contain a top-level mapping/object.")
        self._root = self._import_mapping(payload)
        self._comments.clear()

    def dump(self, stream: IO[str] | None = None) -> str | None:
        """Serialize the store to YAML, restoring expression-marked keys.

        Returns the YAML text when no stream is given.
        """

        return yaml.safe_dump(
            self._export_mapping(self._root),
            stream,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )

    def get(self, path: str | None) -> Any:
        keys = _split_path(path)
        current: Any = self._root
        for key in keys:
            if not isinstance(current, Mapping) or key not in current:
                return None
            current = current[key]
        return current

    def set(self, path: str | None, value: Any) -> None:
        keys = _split_path(path)
        if value is None:
            self.remove(path)
            return
        if not keys:
            if not isinstance(value, Mapping):
                raise ValueError("The config root can only be replaced by a mapping.")
            self._root = dict(value)
            return

        current = self._root
        for key in keys[:-1]:
            child = current.get(key)
            if not isinstance(child, dict):
                child = {}
                current[key] = child
            current = child
        current[keys[-1]] = value

    def remove(self, path: str | None) -> None:
        keys = _split_path(path)
        if not keys:
            self._root = {}
            self._comments.clear()
            return

        parent = self.get(".".join(keys[:-1])) if len(keys) > 1 else self._root
        if isinstance(parent, dict):
            parent.pop(keys[-1], None)

        prefix = ".".join(keys)
        for comment_key in [key for key in self._comments if key[0] == prefix or key[0].startswith(prefix + ".")]:
            del self._comments[comment_key]

    def exists(self, path: str | None) -> bool:
        keys = _split_path(path)
        current: Any = self._root
        for key in keys:
            if not isinstance(current, Mapping) or key not in current:
                return False
            current = current[key]
        return True

    def attach_comment(self, path: str | None, lines: list[str], self_key: bool) -> None:
        if not self.exists(path):
            raise KeyError(f"Cannot attach a comment to missing path `{path}`.")
        self._comments[(".".join(_split_path(path)), self_key)] = list(lines)

    def read_comment(self, path: str | None, self_key: bool) -> list[str] | None:
        if not self.exists(path):
            return None
        lines = self._comments.get((".".join(_split_path(path)), self_key))
        return list(lines) if lines is not None else None

    def _import_value(self, value: Any) -> Any:
        if isinstance(value, Mapping):
            return self._import_mapping(value)
        if isinstance(value, list):
            return [self._import_value(item) for item in value]
        return value

    def _import_mapping(self, mapping: Mapping[Any, Any]) -> dict[Any, Any]:
        result: dict[Any, Any] = {}
        for key, value in mapping.items():
            if isinstance(key, str) and key.endswith(self._suffix) and len(key) > len(self._suffix):
                result[key[: -len(self._suffix)]] = self._import_expression(value)
                continue
            result[key] = self._import_value(value)
        return result

    def _import_expression(self, value: Any) -> Any:
        if isinstance(value, str):
            return Expression.parse(value, self._parser)
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return [Expression.parse(item, self._parser) for item in value]
        raise ValueError(
            "Expression-marked keys must hold a string or a list of strings, "
            f"got {type(value).__name__}."
        )

    def _export_value(self, value: Any) -> Any:
        if isinstance(value, Mapping):
            return self._export_mapping(value)
        if isinstance(value, (list, tuple)):
            return [self._export_value(item) for item in value]
        if isinstance(value, (set, frozenset)):
            return [self._export_value(item) for item in sorted(value, key=repr)]
        if isinstance(value, Expression):
            return value.source
        return value

    def _export_mapping(self, mapping: Mapping[Any, Any]) -> dict[Any, Any]:
        result: dict[Any, Any] = {}
        for key, value in mapping.items():
            if isinstance(key, str) and _contains_expression(value):
                result[f"{key}{self._suffix}"] = self._export_value(value)
                continue
            result[key] = self._export_value(value)
        return result


def _contains_expression(value: Any) -> bool:
    if isinstance(value, Expression):
        return True
    if isinstance(value, (list, tuple)):
        return any(isinstance(item, Expression) for item in value)
    return False
