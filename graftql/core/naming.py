from __future__ import annotations

import re
from typing import Any, Optional

import inflection

__all__ = [
    'from_camel',
    'to_camel',
    'to_pascal',
    'singularize',
    'pluralize',
    'graphql_name_for',
]

_camel_to_snake_pattern = re.compile(r'(?<!^)(?=[A-Z])')


def from_camel(name: str) -> str:
    """Convert lower/upper camelCase to snake_case."""
    if not name:
        return name
    return _camel_to_snake_pattern.sub('_', str(name)).lower()


def to_camel(name: str) -> str:
    """Convert snake_case to lowerCamelCase."""
    if not name:
        return name
    parts = str(name).split('_')
    if not parts:
        return name
    return parts[0] + ''.join(p.capitalize() for p in parts[1:])


def to_pascal(name: str) -> str:
    """Convert snake_case (or camelCase) to PascalCase."""
    camel = to_camel(name)
    return camel[:1].upper() + camel[1:] if camel else camel


def singularize(name: str) -> str:
    if not name:
        return name
    return inflection.singularize(name)


def pluralize(name: str) -> str:
    if not name:
        return name
    return inflection.pluralize(name)


def graphql_name_for(python_name: str, config: Optional[Any] = None) -> str:
    """Return the GraphQL name a Strawberry config would give ``python_name``.

    Falls back to lowerCamelCase when no config (or no name converter) is
    available, which matches Strawberry's default ``auto_camel_case=True``.
    """
    converter = getattr(config, 'name_converter', None) if config is not None else None
    if converter is not None and hasattr(converter, 'apply_naming_config'):
        return converter.apply_naming_config(python_name)
    if config is not None and getattr(config, 'auto_camel_case', True) is False:
        return python_name
    return to_camel(python_name)
