"""GraftQL: GraphQL schemas generated from API resources, grafted onto Strawberry schemas.

Exposes:
- Resource and the field factories (attribute, extra_attribute, has_many, has_one,
  belongs_to, filter_field, sort_field)
- MemoryAdapter, SQLAlchemyAdapter
- SchemaDefinition, MergedSchema, merge
- schemas (process-wide SchemaRegistry), config (process-wide Configuration)
- execute, Runner, with_context, current_context
"""
from __future__ import annotations

from .adapters import BaseAdapter, MemoryAdapter, SQLAlchemyAdapter
from .config import Configuration, config
from .context import current_context, with_context
from .core.fields import attribute, belongs_to, extra_attribute, filter_field, has_many, has_one, sort_field
from .descriptions import DictDescriptionResolver, NullDescriptionResolver, YamlDescriptionResolver
from .exceptions import DepthExceededError, GenerationConfigError, GraftQLError, MalformedResourceError
from .merge import MergedSchema, SchemaDefinition, merge
from .registry import SchemaRegistry, schemas
from .resource import Resource
from .runner import Runner, execute
from .synthesizer import GeneratedTypeSet

__all__ = [
    'Resource', 'attribute', 'extra_attribute', 'has_many', 'has_one', 'belongs_to', 'filter_field', 'sort_field',
    'BaseAdapter', 'MemoryAdapter', 'SQLAlchemyAdapter',
    'SchemaDefinition', 'MergedSchema', 'GeneratedTypeSet', 'merge',
    'SchemaRegistry', 'schemas', 'Configuration', 'config',
    'Runner', 'execute', 'with_context', 'current_context',
    'NullDescriptionResolver', 'DictDescriptionResolver', 'YamlDescriptionResolver',
    'GraftQLError', 'GenerationConfigError', 'MalformedResourceError', 'DepthExceededError',
]
