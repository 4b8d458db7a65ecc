"""Localized description lookup.

Descriptions are addressed by a path such as
``("resources", "employees", "attributes", "first_name", "description")``.
A resolver returns the text or None; it never returns an empty string.

Locale files are YAML documents keyed by locale and a root namespace:

    en:
      graftql:
        resources:
          employees:
            description: Employees of the company
            attributes:
              first_name:
                description: Given name
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Sequence, Union

import yaml

__all__ = [
    'DescriptionResolver',
    'NullDescriptionResolver',
    'DictDescriptionResolver',
    'YamlDescriptionResolver',
]

logger = logging.getLogger("graftql")


class DescriptionResolver(Protocol):
    def resolve(self, path: Sequence[str]) -> Optional[str]:
        ...


class NullDescriptionResolver:
    def resolve(self, path: Sequence[str]) -> Optional[str]:
        return None


def _dig(data: Any, path: Sequence[str]) -> Optional[str]:
    node = data
    for key in path:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
        if node is None:
            return None
    if node is None:
        return None
    text = str(node).strip()
    return text or None


class DictDescriptionResolver:
    """Resolve descriptions from an in-memory nested mapping."""

    def __init__(self, data: Mapping[str, Any]):
        self.data = data

    def resolve(self, path: Sequence[str]) -> Optional[str]:
        return _dig(self.data, path)


class YamlDescriptionResolver:
    """Resolve descriptions from one or more locale YAML files.

    Later files override earlier ones key by key. Only the ``locale`` section
    under the ``root`` namespace is consulted.
    """

    def __init__(
        self,
        paths: Union[str, Path, Iterable[Union[str, Path]]],
        locale: str = 'en',
        root: str = 'graftql',
    ):
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self.paths = [Path(p) for p in paths]
        self.locale = locale
        self.root = root
        self._data: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        merged: Dict[str, Any] = {}
        for path in self.paths:
            if not path.exists():
                raise FileNotFoundError(f"Locale file not found: {path}")
            with open(path, encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, Mapping):
                raise ValueError(f"Invalid locale file {path}: top level must be a mapping")
            section = (data.get(self.locale) or {}).get(self.root) or {}
            _deep_merge(merged, section)
            logger.debug("Loaded descriptions from %s", path)
        return merged

    def resolve(self, path: Sequence[str]) -> Optional[str]:
        if self._data is None:
            self._data = self._load()
        return _dig(self._data, path)


def _deep_merge(into: Dict[str, Any], other: Mapping[str, Any]) -> None:
    for k, v in other.items():
        if isinstance(v, Mapping) and isinstance(into.get(k), dict):
            _deep_merge(into[k], v)
        elif isinstance(v, Mapping):
            into[k] = {}
            _deep_merge(into[k], v)
        else:
            into[k] = v
