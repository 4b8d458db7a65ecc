"""Turn resource descriptors into Strawberry types.

Types are built in two passes, the same way hand-written schemas are: first a
plain class per generated type so every type can reference every other one,
then fields are attached and the classes are decorated with
``strawberry.type`` / ``strawberry.input`` / ``strawberry.enum``.
"""
from __future__ import annotations

import enum
import logging
from typing import Annotated, Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import strawberry
from strawberry.types import Info

from .context import resource_context
from .core.filters import LIST_OPERATORS
from .core.naming import from_camel, graphql_name_for, to_pascal
from .core.types import python_type_for
from .core.utils import input_to_dict, maybe_await, read_value
from .descriptors import AttributeDescriptor, FilterDescriptor, RelationshipDescriptor, ResourceDescriptor
from .exceptions import GenerationConfigError, MalformedResourceError

__all__ = [
    'SortDir',
    'Page',
    'GeneratedTypeSet',
    'TypeSynthesizer',
    'synthesize',
]

logger = logging.getLogger("graftql")

_ARG_DESC_FILTER = "Filter records; each operator takes one value or a list (any-of)."
_ARG_DESC_SORT = "Sort records by one or more attributes, most significant first."
_ARG_DESC_PAGE = "Page size and 1-based page number."


class _SortDirEnum(enum.Enum):
    asc = 'asc'
    desc = 'desc'


SortDir = strawberry.enum(_SortDirEnum, name="SortDir")  # type: ignore


@strawberry.input(name="Page", description="Pagination window.")
class Page:
    size: Optional[int] = None
    number: Optional[int] = None


class GeneratedTypeSet:
    """Everything generated from one set of descriptors.

    Attributes:
        types: GraphQL type name -> Strawberry type, enum or input, in
            generation order.
        object_types: Generated object types, handed to the schema as orphans.
        root_fields: ``(graphql_name, StrawberryField)`` pairs for the root query.
        query: A decorated ``Query`` type holding the root fields.
    """

    def __init__(self, types: Dict[str, Any], object_types: List[Any], root_fields: List[Tuple[str, Any]], query: Any):
        self.types = types
        self.object_types = object_types
        self.root_fields = root_fields
        self.query = query

    def lookup(self, name: str) -> Any:
        return self.types.get(name)

    def all_names(self) -> List[str]:
        return list(self.types.keys())

    @property
    def root_field_names(self) -> List[str]:
        return [n for n, _ in self.root_fields]


def _make_collection_resolver(fname: str, impl: Callable[..., Any], filter_t: Any, sort_t: Any, return_t: Any):
    """Build an async resolver whose signature carries only the supported arguments."""
    arg_names: List[str] = []
    anns: Dict[str, Any] = {'info': Info}
    if filter_t is not None:
        arg_names.append('filter')
        anns['filter'] = Annotated[Optional[filter_t], strawberry.argument(description=_ARG_DESC_FILTER)]
    if sort_t is not None:
        arg_names.append('sort')
        anns['sort'] = Annotated[Optional[List[sort_t]], strawberry.argument(description=_ARG_DESC_SORT)]
    arg_names.append('page')
    anns['page'] = Annotated[Optional[Page], strawberry.argument(description=_ARG_DESC_PAGE)]
    params = ', '.join(['self', 'info'] + [f"{a}=None" for a in arg_names])
    call = ', '.join(f"{a}={a}" for a in arg_names)
    src = f"async def {fname}({params}):\n"
    src += f"    return await _impl(self, info, {call})\n"
    env: Dict[str, Any] = {'_impl': impl}
    exec(src, env)
    fn = env[fname]
    fn.__module__ = __name__
    anns['return'] = return_t
    fn.__annotations__ = anns
    return fn


class TypeSynthesizer:
    def __init__(self, config: Any = None):
        self.config = config
        self._types: Dict[str, Any] = {}
        self._objects: Dict[str, Any] = {}
        self._connections: Dict[str, Any] = {}
        self._filter_inputs: Dict[str, Any] = {}
        self._sort_inputs: Dict[str, Any] = {}

    # --- helpers -------------------------------------------------------------------
    def _register(self, name: str, t: Any) -> Any:
        if name in self._types:
            raise GenerationConfigError(f"Generated type name {name!r} is not unique", name=name, kind='type')
        self._types[name] = t
        return t

    def _gql(self, python_name: str) -> str:
        return graphql_name_for(python_name, self.config)

    # --- pass 1: plain classes -----------------------------------------------------
    def _declare(self, d: ResourceDescriptor) -> None:
        self._objects[d.type_name] = type(d.type_name, (), {'__module__': __name__})
        self._connections[d.type_name] = type(f"{d.type_name}Connection", (), {'__module__': __name__})

    # --- filters and sorts ---------------------------------------------------------
    def _operator_input(self, d: ResourceDescriptor, f: FilterDescriptor) -> Any:
        name = f"{d.type_name}Filter{to_pascal(f.name)}"
        base_t = python_type_for(f.semantic_type, nullable=False)
        anns: Dict[str, Any] = {}
        ns: Dict[str, Any] = {'__module__': __name__}
        for op in f.operators:
            anns[op] = Optional[List[base_t]] if op in LIST_OPERATORS else Optional[base_t]
            ns[op] = None
        ns['__annotations__'] = anns
        plain = type(name, (), ns)
        return self._register(name, strawberry.input(plain, name=name, description=f.description))

    def _filter_input(self, d: ResourceDescriptor) -> Any:
        if not d.supports_filtering:
            return None
        name = f"{d.type_name}Filter"
        anns: Dict[str, Any] = {}
        ns: Dict[str, Any] = {'__module__': __name__}
        for f in d.filters:
            anns[f.name] = Optional[self._operator_input(d, f)]
            ns[f.name] = strawberry.field(default=None, description=f.description)
        ns['__annotations__'] = anns
        plain = type(name, (), ns)
        return self._register(name, strawberry.input(plain, name=name))

    def _sort_input(self, d: ResourceDescriptor) -> Any:
        if not d.supports_sorting:
            return None
        att_name = f"{d.type_name}SortAtt"
        members = {self._gql(s.name): s.name for s in d.sorts}
        att_enum = self._register(att_name, strawberry.enum(enum.Enum(att_name, members), name=att_name))
        if 'SortDir' not in self._types:
            self._register('SortDir', SortDir)
        name = f"{d.type_name}Sort"
        plain = type(name, (), {
            '__module__': __name__,
            '__annotations__': {'att': att_enum, 'dir': SortDir},
            'dir': _SortDirEnum.asc,
        })
        return self._register(name, strawberry.input(plain, name=name))

    # --- field resolvers -----------------------------------------------------------
    def _attribute_field(self, d: ResourceDescriptor, a: AttributeDescriptor) -> Any:
        fdef = d.resource.__resource_fields__.get(a.name)
        resolve = fdef.meta.get('resolve') if fdef is not None else None
        name = a.name
        py_t = python_type_for(a.semantic_type, nullable=(name != 'id'))
        if resolve is None:
            def resolver(self):
                return read_value(self, name)
        else:
            async def resolver(self):
                return await maybe_await(resolve(self))
        resolver.__annotations__ = {'return': py_t}
        return strawberry.field(resolver=resolver, description=a.description)

    def _target(self, d: ResourceDescriptor, rel: RelationshipDescriptor) -> ResourceDescriptor:
        target = self._descriptors.get(rel.target)
        if target is None:
            raise MalformedResourceError(
                d.resource, f"relationship {rel.name!r} targets {rel.target!r}, which is not being generated"
            )
        return target

    def _relationship_field(self, d: ResourceDescriptor, rel: RelationshipDescriptor) -> Any:
        target = self._target(d, rel)
        owner_cls = d.resource
        rel_name = rel.name
        if rel.cardinality == 'many':
            async def _impl(self, info, filter=None, sort=None, page=None):
                resource = owner_cls(resource_context(info))
                return await resource.related(
                    rel_name, self,
                    filter=input_to_dict(filter), sort=input_to_dict(sort), page=input_to_dict(page),
                )
            fn = _make_collection_resolver(
                f"_resolve_{rel_name}",
                _impl,
                self._filter_inputs.get(target.type_name),
                self._sort_inputs.get(target.type_name),
                self._connections[target.type_name],
            )
        else:
            async def fn(self, info):
                resource = owner_cls(resource_context(info))
                return await resource.related(rel_name, self)
            fn.__annotations__ = {'info': Info, 'return': Optional[self._objects[target.type_name]]}
        return strawberry.field(resolver=fn, description=rel.description)

    def _connection_fields(self, d: ResourceDescriptor) -> None:
        conn = self._connections[d.type_name]

        async def nodes(self):
            return await self.records()
        nodes.__annotations__ = {'return': List[self._objects[d.type_name]]}

        async def count(self):
            return await self.count()
        count.__annotations__ = {'return': int}

        conn.nodes = strawberry.field(resolver=nodes, description="Records on the requested page.")
        conn.count = strawberry.field(resolver=count, description="Total number of matching records.")

    # --- root fields ---------------------------------------------------------------
    def _root_fields(self, d: ResourceDescriptor) -> List[Tuple[str, str, Any]]:
        rcls = d.resource
        out: List[Tuple[str, str, Any]] = []

        async def _impl(self, info, filter=None, sort=None, page=None):
            resource = rcls(resource_context(info))
            return resource.query(filter=input_to_dict(filter), sort=input_to_dict(sort), page=input_to_dict(page))

        py_name = from_camel(d.entrypoint_name)
        fn = _make_collection_resolver(
            f"_resolve_{d.entrypoint_name}",
            _impl,
            self._filter_inputs.get(d.type_name),
            self._sort_inputs.get(d.type_name),
            self._connections[d.type_name],
        )
        out.append((d.entrypoint_name, py_name, strawberry.field(resolver=fn, name=d.entrypoint_name, description=d.description)))

        single = d.single_entrypoint_name
        if single:
            async def find(self, info, id):
                return await rcls(resource_context(info)).find(id)
            find.__annotations__ = {'info': Info, 'id': strawberry.ID, 'return': Optional[self._objects[d.type_name]]}
            out.append((single, from_camel(single), strawberry.field(resolver=find, name=single, description=d.description)))
        return out

    # --- entry ---------------------------------------------------------------------
    def synthesize(self, descriptors: Sequence[ResourceDescriptor]) -> GeneratedTypeSet:
        self._descriptors: Dict[str, ResourceDescriptor] = {d.type_name: d for d in descriptors}
        for d in descriptors:
            self._declare(d)
        for d in descriptors:
            self._register(d.type_name, self._objects[d.type_name])
            self._register(f"{d.type_name}Connection", self._connections[d.type_name])
        if descriptors:
            self._register('Page', Page)
        for d in descriptors:
            fi = self._filter_input(d)
            if fi is not None:
                self._filter_inputs[d.type_name] = fi
            si = self._sort_input(d)
            if si is not None:
                self._sort_inputs[d.type_name] = si

        for d in descriptors:
            obj = self._objects[d.type_name]
            for a in d.attributes + d.extra_attributes:
                setattr(obj, a.name, self._attribute_field(d, a))
            for rel in d.local_relationships:
                setattr(obj, rel.name, self._relationship_field(d, rel))
            self._connection_fields(d)

        root: List[Tuple[str, Any]] = []
        query_ns: Dict[str, Any] = {'__module__': __name__}
        for d in descriptors:
            if not d.entrypoint_name:
                continue
            for gql_name, py_name, field in self._root_fields(d):
                if any(n == gql_name for n, _ in root):
                    raise GenerationConfigError(
                        f"Root field {gql_name!r} is generated more than once", name=gql_name, kind='field'
                    )
                root.append((gql_name, field))
                query_ns[py_name] = field

        # Decorate now that every field is attached
        for d in descriptors:
            self._types[d.type_name] = strawberry.type(self._objects[d.type_name], name=d.type_name, description=d.description)
            conn_name = f"{d.type_name}Connection"
            self._types[conn_name] = strawberry.type(self._connections[d.type_name], name=conn_name)

        query = strawberry.type(type('Query', (), query_ns), name='Query')
        logger.info("Generated %d types and %d root fields", len(self._types), len(root))
        return GeneratedTypeSet(
            types=dict(self._types),
            object_types=[self._types[d.type_name] for d in descriptors],
            root_fields=root,
            query=query,
        )


def synthesize(descriptors: Iterable[ResourceDescriptor], config: Any = None) -> GeneratedTypeSet:
    return TypeSynthesizer(config).synthesize(list(descriptors))
