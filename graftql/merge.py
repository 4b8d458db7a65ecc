"""Graft generated types onto a user-authored schema.

The caller's classes are never modified. The merged root query is a new
subclass built by ``strawberry.tools.merge_types`` from the caller's query type
and the generated one, and the merged schema is a new ``strawberry.Schema``.
"""
from __future__ import annotations

import logging
from functools import cached_property
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

import strawberry
from strawberry.tools import merge_types

from .depth import depth_limit_extension
from .exceptions import GenerationConfigError
from .synthesizer import GeneratedTypeSet

__all__ = [
    'TypeProvider',
    'SchemaDefinition',
    'CompositeTypeProvider',
    'MergedSchema',
    'merge',
]

logger = logging.getLogger("graftql")


class TypeProvider(Protocol):
    def lookup(self, name: str) -> Any:
        ...

    def all_names(self) -> List[str]:
        ...


def _extensions(extensions: Sequence[Any], max_depth: Optional[int]) -> List[Any]:
    out = list(extensions)
    if max_depth is not None:
        out.append(depth_limit_extension(max_depth))
    return out


class SchemaDefinition:
    """A user-authored schema: root types, orphan types and root-level settings.

    Example:

        @strawberry.type
        class Query:
            @strawberry.field
            def things(self) -> List[Thing]: ...

        base = SchemaDefinition(query=Query, types=[Orphan], max_depth=3)
    """

    def __init__(
        self,
        query: Any,
        *,
        types: Iterable[Any] = (),
        max_depth: Optional[int] = None,
        extensions: Iterable[Any] = (),
        config: Any = None,
        mutation: Any = None,
        subscription: Any = None,
    ):
        if getattr(query, '__strawberry_definition__', None) is None:
            raise GenerationConfigError("SchemaDefinition query must be a strawberry type", kind='query')
        self.query = query
        self._types = tuple(types)
        self.max_depth = max_depth
        self.extensions = tuple(extensions)
        self.config = config
        self.mutation = mutation
        self.subscription = subscription

    @cached_property
    def strawberry_schema(self) -> strawberry.Schema:
        kwargs: Dict[str, Any] = {}
        if self.config is not None:
            kwargs['config'] = self.config
        return strawberry.Schema(
            query=self.query,
            mutation=self.mutation,
            subscription=self.subscription,
            types=list(self._types),
            extensions=_extensions(self.extensions, self.max_depth),
            **kwargs,
        )

    @property
    def query_name(self) -> str:
        return self.query.__strawberry_definition__.name

    @property
    def orphan_types(self) -> List[Any]:
        return list(self._types)

    @property
    def type_map(self) -> Mapping[str, Any]:
        return MappingProxyType(self.strawberry_schema._schema.type_map)

    @property
    def query_field_names(self) -> List[str]:
        return list(self.strawberry_schema._schema.query_type.fields.keys())

    @property
    def query_python_names(self) -> List[str]:
        return [f.python_name for f in self.query.__strawberry_definition__.fields]

    def lookup(self, name: str) -> Any:
        return self.type_map.get(name)

    def all_names(self) -> List[str]:
        return list(self.type_map.keys())


class CompositeTypeProvider:
    """Look names up in several providers, first match wins."""

    def __init__(self, *providers: TypeProvider):
        self.providers = [p for p in providers if p is not None]

    def lookup(self, name: str) -> Any:
        for p in self.providers:
            found = p.lookup(name)
            if found is not None:
                return found
        return None

    def all_names(self) -> List[str]:
        names: Dict[str, None] = {}
        for p in self.providers:
            for n in p.all_names():
                names.setdefault(n, None)
        return list(names)


class MergedSchema:
    """The executable result of grafting a :class:`GeneratedTypeSet` onto a base."""

    def __init__(
        self,
        query: Any,
        generated: GeneratedTypeSet,
        base: Optional[SchemaDefinition] = None,
        config: Any = None,
    ):
        self.query = query
        self.generated = generated
        self.base = base
        self.max_depth = base.max_depth if base is not None else None
        self.config = base.config if base is not None and base.config is not None else config
        orphans: List[Any] = list(base.orphan_types) if base is not None else []
        for t in generated.object_types:
            if t not in orphans:
                orphans.append(t)
        self.orphan_types = orphans
        self.provider = CompositeTypeProvider(base, generated)
        kwargs: Dict[str, Any] = {}
        if self.config is not None:
            kwargs['config'] = self.config
        self.strawberry_schema = strawberry.Schema(
            query=query,
            mutation=base.mutation if base is not None else None,
            subscription=base.subscription if base is not None else None,
            types=list(orphans),
            extensions=_extensions(base.extensions if base is not None else (), self.max_depth),
            **kwargs,
        )

    @property
    def types(self) -> Mapping[str, Any]:
        return MappingProxyType(self.strawberry_schema._schema.type_map)

    @property
    def query_fields(self) -> Mapping[str, Any]:
        return MappingProxyType(self.strawberry_schema._schema.query_type.fields)

    def lookup(self, name: str) -> Any:
        return self.provider.lookup(name)

    def all_names(self) -> List[str]:
        return self.provider.all_names()

    async def execute(
        self,
        query: str,
        variable_values: Optional[Dict[str, Any]] = None,
        context_value: Any = None,
        operation_name: Optional[str] = None,
    ) -> Any:
        return await self.strawberry_schema.execute(
            query,
            variable_values=variable_values,
            context_value=context_value,
            operation_name=operation_name,
        )

    def as_sdl(self) -> str:
        return self.strawberry_schema.as_str()


def _check_collisions(base: SchemaDefinition, generated: GeneratedTypeSet) -> None:
    base_fields = set(base.query_field_names)
    for name in generated.root_field_names:
        if name in base_fields:
            raise GenerationConfigError(
                f"Generated root field {name!r} collides with a field on {base.query_name}",
                name=name,
                kind='field',
            )
    base_py = set(base.query_python_names)
    for f in generated.query.__strawberry_definition__.fields:
        if f.python_name in base_py:
            raise GenerationConfigError(
                f"Generated root field {f.python_name!r} collides with an attribute of {base.query_name}",
                name=f.python_name,
                kind='field',
            )
    for name in generated.all_names():
        if base.lookup(name) is not None:
            raise GenerationConfigError(
                f"Generated type {name!r} collides with a type of the base schema",
                name=name,
                kind='type',
            )


def merge(base: Optional[SchemaDefinition], generated: GeneratedTypeSet, config: Any = None) -> MergedSchema:
    """Combine ``base`` (optional) and ``generated`` into a new :class:`MergedSchema`.

    Raises:
        GenerationConfigError: A generated root field or type name is already
            used by the base schema.
    """
    if base is None:
        merged = MergedSchema(generated.query, generated, None, config=config)
    else:
        _check_collisions(base, generated)
        query = merge_types(base.query_name, (base.query, generated.query))
        merged = MergedSchema(query, generated, base, config=config)
    logger.info(
        "Merged schema: %d types, %d root query fields",
        len(merged.types),
        len(merged.query_fields),
    )
    return merged
