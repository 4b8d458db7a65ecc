"""Read resource declarations into immutable descriptors.

The descriptors are the only input of the type synthesizer. Reading is a
pure pass over class-level metadata plus an optional description lookup.
"""
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Type

from .core.fields import FieldDef
from .core.naming import singularize
from .descriptions import DescriptionResolver, NullDescriptionResolver
from .exceptions import GenerationConfigError, MalformedResourceError
from .resource import Resource, registered_resources, resolve_resource

__all__ = [
    'AttributeDescriptor',
    'RelationshipDescriptor',
    'FilterDescriptor',
    'SortDescriptor',
    'ResourceDescriptor',
    'read_resources',
    'is_remote',
]

logger = logging.getLogger("graftql")


@dataclass(frozen=True)
class AttributeDescriptor:
    name: str
    semantic_type: str
    readable: bool = True
    description: Optional[str] = None
    extra: bool = False


@dataclass(frozen=True)
class RelationshipDescriptor:
    name: str
    target: Optional[str]
    cardinality: str
    remote: bool = False
    description: Optional[str] = None
    macro: str = 'has_many'
    target_resource: Optional[Type[Resource]] = None


@dataclass(frozen=True)
class FilterDescriptor:
    name: str
    semantic_type: str
    operators: Tuple[str, ...]
    description: Optional[str] = None


@dataclass(frozen=True)
class SortDescriptor:
    name: str
    semantic_type: str


@dataclass(frozen=True)
class ResourceDescriptor:
    resource: Type[Resource]
    type_name: str
    entrypoint_name: Optional[str]
    attributes: Tuple[AttributeDescriptor, ...] = ()
    extra_attributes: Tuple[AttributeDescriptor, ...] = ()
    relationships: Tuple[RelationshipDescriptor, ...] = ()
    filters: Tuple[FilterDescriptor, ...] = ()
    sorts: Tuple[SortDescriptor, ...] = ()
    description: Optional[str] = None

    @property
    def supports_filtering(self) -> bool:
        return bool(self.filters)

    @property
    def supports_sorting(self) -> bool:
        return bool(self.sorts)

    @property
    def single_entrypoint_name(self) -> Optional[str]:
        if not self.entrypoint_name:
            return None
        single = singularize(self.entrypoint_name)
        return single if single != self.entrypoint_name else None

    @property
    def local_relationships(self) -> Tuple[RelationshipDescriptor, ...]:
        return tuple(r for r in self.relationships if not is_remote(r))


def is_remote(rel: RelationshipDescriptor) -> bool:
    """Remote relationships live in another service and get no field."""
    return bool(rel.remote)


class _Reader:
    def __init__(self, resolver: DescriptionResolver):
        self.resolver = resolver

    def describe(self, inline: Optional[str], path: Sequence[str]) -> Optional[str]:
        if inline and inline.strip():
            return inline
        found = self.resolver.resolve(tuple(path))
        return found or None

    def field_description(self, cls: Type[Resource], kind: str, fdef: FieldDef) -> Optional[str]:
        return self.describe(fdef.description, ('resources', cls.type, kind, fdef.name, 'description'))

    def relationship(self, cls: Type[Resource], fdef: FieldDef) -> RelationshipDescriptor:
        meta = fdef.meta
        desc = self.field_description(cls, 'relationships', fdef)
        if meta.get('remote'):
            logger.debug("Skipping remote relationship %s.%s (%s)", cls.__name__, fdef.name, meta.get('remote'))
            return RelationshipDescriptor(
                name=fdef.name,
                target=None,
                cardinality=meta.get('cardinality', 'many'),
                remote=True,
                description=desc,
                macro=meta.get('macro', 'has_many'),
            )
        if meta.get('target') is None:
            raise MalformedResourceError(cls, f"relationship {fdef.name!r} has no target")
        target_cls = resolve_resource(meta['target'], cls)
        return RelationshipDescriptor(
            name=fdef.name,
            target=target_cls.type_name(),
            cardinality=meta.get('cardinality', 'many'),
            remote=False,
            description=desc,
            macro=meta.get('macro', 'has_many'),
            target_resource=target_cls,
        )

    def read(self, cls: Type[Resource], entrypoint: Optional[str]) -> ResourceDescriptor:
        attrs: List[AttributeDescriptor] = []
        for fdef in cls.attributes().values():
            if not fdef.flag('readable'):
                continue
            attrs.append(AttributeDescriptor(
                name=fdef.name,
                semantic_type=cls.semantic_type_of(fdef),
                readable=True,
                description=self.field_description(cls, 'attributes', fdef),
            ))
        extras = [
            AttributeDescriptor(
                name=fdef.name,
                semantic_type=cls.semantic_type_of(fdef),
                readable=True,
                description=self.field_description(cls, 'extra_attributes', fdef),
                extra=True,
            )
            for fdef in cls.extra_attributes().values()
        ]
        rels = [self.relationship(cls, fdef) for fdef in cls.relationships().values()]
        filters = [
            FilterDescriptor(
                name=name,
                semantic_type=cls.semantic_type_of(fdef),
                operators=cls.operators_of(fdef),
                description=self.field_description(cls, 'filters', fdef),
            )
            for name, fdef in cls.filters().items()
        ]
        sorts = [SortDescriptor(name=name, semantic_type=cls.semantic_type_of(fdef)) for name, fdef in cls.sorts().items()]
        return ResourceDescriptor(
            resource=cls,
            type_name=cls.type_name(),
            entrypoint_name=entrypoint,
            attributes=tuple(attrs),
            extra_attributes=tuple(extras),
            relationships=tuple(rels),
            filters=tuple(filters),
            sorts=tuple(sorts),
            description=self.describe(cls.description, ('resources', cls.type, 'description')),
        )


def _allowed(cls: Type[Resource], allowlist: Optional[Iterable[Any]]) -> bool:
    if allowlist is None:
        return True
    for item in allowlist:
        if item is cls or item == cls.__name__ or item == cls.graphql_entrypoint:
            return True
    return False


def read_resources(
    resources: Optional[Iterable[Type[Resource]]] = None,
    *,
    description_resolver: Optional[DescriptionResolver] = None,
    entrypoints: Optional[Iterable[Any]] = None,
) -> List[ResourceDescriptor]:
    """Produce descriptors for ``resources`` (all registered resources by default).

    Resources with a ``graphql_entrypoint`` come first, in the order given.
    Resources they reach through local relationships follow, breadth-first,
    without an entrypoint. Resources that declare no entrypoint and are not
    reachable are skipped.
    """
    reader = _Reader(description_resolver or NullDescriptionResolver())
    classes = list(resources) if resources is not None else registered_resources()
    allowlist = list(entrypoints) if entrypoints is not None else None

    out: List[ResourceDescriptor] = []
    by_type: Dict[str, Type[Resource]] = {}
    seen: set = set()
    queue: deque = deque()

    def _add(cls: Type[Resource], entrypoint: Optional[str]) -> None:
        desc = reader.read(cls, entrypoint)
        other = by_type.get(desc.type_name)
        if other is not None and other is not cls:
            raise GenerationConfigError(
                f"Resources {other.__name__} and {cls.__name__} both generate type {desc.type_name!r}",
                name=desc.type_name,
                kind='type',
            )
        by_type[desc.type_name] = cls
        seen.add(cls)
        out.append(desc)
        queue.append(desc)

    for cls in classes:
        if cls in seen:
            continue
        if not cls.graphql_entrypoint:
            logger.debug("Resource %s declares no graphql_entrypoint; not exposed", cls.__name__)
            continue
        if not _allowed(cls, allowlist):
            continue
        _add(cls, cls.graphql_entrypoint)

    while queue:
        desc = queue.popleft()
        for rel in desc.local_relationships:
            if rel.target_resource is not None and rel.target_resource not in seen:
                _add(rel.target_resource, None)
    return out
