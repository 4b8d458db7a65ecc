"""Declarative API resources.

A resource names a collection (``type``), the fields it exposes and how its
records are fetched (``adapter``). GraphQL types are derived from resources by
:mod:`graftql.descriptors` and :mod:`graftql.synthesizer`; at query time the
generated resolvers instantiate the resource with the request context and
call :meth:`Resource.all`, :meth:`Resource.find` or :meth:`Resource.related`.

Example:

    class EmployeeResource(Resource):
        type = 'employees'
        graphql_entrypoint = 'employees'
        adapter = MemoryAdapter(lambda: DB['employees'])

        first_name = attribute('string')
        age = attribute('integer')
        positions = has_many('PositionResource')
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Type

from .core.fields import FieldDef, FieldDescriptor, attribute
from .core.filters import operators_for
from .core.naming import from_camel, pluralize, singularize
from .core.types import coerce_filter_value, semantic_type_from_column
from .core.utils import dir_value, maybe_await, read_value
from .exceptions import MalformedResourceError

__all__ = [
    'Resource',
    'ResourceMeta',
    'Listing',
    'resolve_resource',
    'registered_resources',
]

logger = logging.getLogger("graftql")

# Resource class name -> class, used to resolve string relationship targets
_RESOURCE_CLASSES: Dict[str, Type['Resource']] = {}


def registered_resources() -> List[Type['Resource']]:
    """All concrete resource classes, in definition order."""
    return list(_RESOURCE_CLASSES.values())


def resolve_resource(target: Any, owner: Any = None) -> Type['Resource']:
    """Resolve a relationship target (class or class name) to a resource class."""
    if isinstance(target, type) and issubclass(target, Resource):
        return target
    if isinstance(target, str):
        cls = _RESOURCE_CLASSES.get(target)
        if cls is not None:
            return cls
        raise MalformedResourceError(owner if owner is not None else target, f"unknown resource {target!r}")
    raise MalformedResourceError(owner if owner is not None else target, f"invalid relationship target {target!r}")


class ResourceMeta(type):
    def __new__(mcls, name, bases, namespace):
        fdefs: Dict[str, FieldDef] = {}
        # Inherited declarations first; subclasses override by name
        for base in reversed(bases):
            for k, fd in getattr(base, '__resource_fields__', {}).items():
                fdefs[k] = fd
        for k, v in list(namespace.items()):
            if isinstance(v, FieldDescriptor):
                v.__set_name__(None, k)
                fdefs[k] = v.build(name)
                # Declarations live in __resource_fields__ only
                del namespace[k]
        namespace['__resource_fields__'] = fdefs
        cls = super().__new__(mcls, name, bases, namespace)
        if bases and not namespace.get('abstract', False):
            if 'id' not in fdefs:
                id_def = attribute('integer_id')
                id_def.__set_name__(None, 'id')
                fdefs = {'id': id_def.build(name), **fdefs}
                cls.__resource_fields__ = fdefs
            if not namespace.get('type'):
                cls.type = pluralize(from_camel(cls._base_name()))
            _RESOURCE_CLASSES[name] = cls
            logger.debug("Registered resource %s (type=%s)", name, cls.type)
        return cls


class Listing:
    """A filtered, sorted and paginated view over a resource's records.

    ``records()`` and ``count()`` are evaluated independently and cached, so a
    query that only asks for ``count`` never loads the page.
    """

    def __init__(self, resource: 'Resource', scope: Any, sorts: Sequence[Tuple[str, str]], size: int, number: int):
        self.resource = resource
        self._scope = scope
        self._sorts = list(sorts)
        self.size = size
        self.number = number
        self._records: Optional[List[Any]] = None
        self._count: Optional[int] = None

    async def count(self) -> int:
        if self._count is None:
            adapter = self.resource.adapter
            self._count = int(await maybe_await(adapter.count(self._scope, self.resource)))
        return self._count

    async def records(self) -> List[Any]:
        if self._records is None:
            adapter = self.resource.adapter
            scope = self._scope
            for name, direction in self._sorts:
                fdef = self.resource.sorts().get(name)
                apply = fdef.meta.get('apply') if fdef is not None else None
                if apply is not None:
                    scope = apply(scope, direction, self.resource.context)
                else:
                    scope = adapter.order(scope, name, direction, self.resource)
            scope = adapter.paginate(scope, self.size, self.number, self.resource)
            self._records = list(await maybe_await(adapter.resolve(scope, self.resource)))
        return self._records


class Resource(metaclass=ResourceMeta):
    """Base class for API resources."""

    abstract = True
    type: str = ''
    graphql_entrypoint: Optional[str] = None
    graphql_name: Optional[str] = None
    namespace: Optional[str] = None
    description: Optional[str] = None
    model: Optional[Type] = None
    adapter: Any = None
    default_page_size: int = 20
    max_page_size: int = 1000

    def __init__(self, context: Any = None):
        self.context = context
        if self.adapter is None:
            raise MalformedResourceError(type(self), "no adapter configured")

    # --- declaration introspection -------------------------------------------------
    @classmethod
    def _base_name(cls) -> str:
        name = cls.__name__
        return name[:-len('Resource')] if name.endswith('Resource') and name != 'Resource' else name

    @classmethod
    def type_name(cls) -> str:
        """GraphQL object type name for this resource."""
        if cls.graphql_name:
            return cls.graphql_name
        return f"{cls.namespace or ''}{cls._base_name()}"

    @classmethod
    def fields_of(cls, kind: str) -> Dict[str, FieldDef]:
        return {k: fd for k, fd in cls.__resource_fields__.items() if fd.kind == kind}

    @classmethod
    def attributes(cls) -> Dict[str, FieldDef]:
        return cls.fields_of('attribute')

    @classmethod
    def extra_attributes(cls) -> Dict[str, FieldDef]:
        return cls.fields_of('extra_attribute')

    @classmethod
    def relationships(cls) -> Dict[str, FieldDef]:
        return cls.fields_of('relationship')

    @classmethod
    def semantic_type_of(cls, fdef: FieldDef) -> str:
        if fdef.semantic_type:
            return fdef.semantic_type
        if cls.model is not None and hasattr(cls.model, '__table__'):
            col = cls.model.__table__.c.get(fdef.name)
            if col is not None:
                return semantic_type_from_column(col)
        return 'string'

    @classmethod
    def filters(cls) -> Dict[str, FieldDef]:
        """Filterable fields: filterable attributes with operators plus explicit filters."""
        out: Dict[str, FieldDef] = {}
        for k, fd in cls.attributes().items():
            if fd.flag('filterable') and cls.operators_of(fd):
                out[k] = fd
        for k, fd in cls.fields_of('filter').items():
            out[k] = fd
        return out

    @classmethod
    def sorts(cls) -> Dict[str, FieldDef]:
        out: Dict[str, FieldDef] = {}
        for k, fd in cls.attributes().items():
            if fd.flag('sortable') and cls.semantic_type_of(fd) in _SORTABLE_TYPES:
                out[k] = fd
        for k, fd in cls.fields_of('sort').items():
            out[k] = fd
        return out

    @classmethod
    def operators_of(cls, fdef: FieldDef) -> Tuple[str, ...]:
        declared = fdef.meta.get('operators')
        if declared is not None:
            return tuple(declared)
        return operators_for(cls.semantic_type_of(fdef))

    @classmethod
    def relationship_keys(cls, fdef: FieldDef) -> Tuple[str, str]:
        """(foreign_key, primary_key) of a relationship, with conventional defaults."""
        fk = fdef.meta.get('foreign_key')
        pk = fdef.meta.get('primary_key') or 'id'
        if fk is None:
            if fdef.meta.get('macro') == 'belongs_to':
                fk = f"{fdef.name}_id"
            else:
                fk = f"{singularize(cls.type)}_id"
        return fk, pk

    # --- data access ---------------------------------------------------------------
    async def read_attribute(self, record: Any, name: str) -> Any:
        fdef = self.__resource_fields__.get(name)
        resolve = fdef.meta.get('resolve') if fdef is not None else None
        if resolve is not None:
            return await maybe_await(resolve(record))
        return read_value(record, name)

    def _page_bounds(self, page: Optional[Mapping[str, Any]]) -> Tuple[int, int]:
        page = page or {}
        size = page.get('size') or self.default_page_size
        number = page.get('number') or 1
        size = max(1, min(int(size), self.max_page_size))
        return size, max(1, int(number))

    def _apply_filter(self, scope: Any, filter: Optional[Mapping[str, Any]]) -> Any:
        if not filter:
            return scope
        filters = self.filters()
        for name, op_map in filter.items():
            fdef = filters.get(name)
            if fdef is None:
                raise ValueError(f"Unknown filter {name!r} on {type(self).__name__}")
            stype = self.semantic_type_of(fdef)
            allowed = self.operators_of(fdef)
            for op, raw in (op_map or {}).items():
                if raw is None:
                    continue
                if op not in allowed:
                    raise ValueError(f"Operator {op!r} not supported for filter {name!r}")
                values = list(raw) if isinstance(raw, (list, tuple)) else [raw]
                values = coerce_filter_value(stype, values)
                apply = fdef.meta.get('apply')
                if apply is not None:
                    scope = apply(scope, op, values, self.context)
                else:
                    scope = self.adapter.filter(scope, name, op, values, self)
        return scope

    def _normalize_sort(self, sort: Optional[Iterable[Any]]) -> List[Tuple[str, str]]:
        out: List[Tuple[str, str]] = []
        sorts = self.sorts()
        for item in sort or ():
            if isinstance(item, Mapping):
                name, direction = item.get('att'), item.get('dir')
            else:
                name, direction = item
            if name not in sorts:
                raise ValueError(f"Unknown sort {name!r} on {type(self).__name__}")
            out.append((name, dir_value(direction)))
        return out

    def query(
        self,
        filter: Optional[Mapping[str, Any]] = None,
        sort: Optional[Iterable[Any]] = None,
        page: Optional[Mapping[str, Any]] = None,
        scope: Any = None,
    ) -> Listing:
        """Build a lazy :class:`Listing`; nothing is fetched until awaited."""
        if scope is None:
            scope = self.adapter.base_scope(self)
        scope = self._apply_filter(scope, filter)
        size, number = self._page_bounds(page)
        return Listing(self, scope, self._normalize_sort(sort), size, number)

    async def all(self, filter=None, sort=None, page=None) -> Tuple[List[Any], int]:
        """Return ``(records, total)`` where total is the count before pagination."""
        listing = self.query(filter=filter, sort=sort, page=page)
        return await listing.records(), await listing.count()

    async def find(self, id: Any) -> Any:
        stype = self.semantic_type_of(self.__resource_fields__['id'])
        scope = self.adapter.base_scope(self)
        scope = self.adapter.filter(scope, 'id', 'eql', coerce_filter_value(stype, [id]), self)
        scope = self.adapter.paginate(scope, 1, 1, self)
        rows = list(await maybe_await(self.adapter.resolve(scope, self)))
        return rows[0] if rows else None

    async def related(self, name: str, parent: Any, filter=None, sort=None, page=None) -> Any:
        """Load relationship ``name`` of ``parent``.

        Returns a :class:`Listing` for ``has_many`` and a record (or None) for
        ``has_one`` / ``belongs_to``.
        """
        fdef = self.relationships().get(name)
        if fdef is None:
            raise ValueError(f"Unknown relationship {name!r} on {type(self).__name__}")
        custom = fdef.meta.get('resolve')
        target_cls = resolve_resource(fdef.meta.get('target'), type(self))
        target = target_cls(self.context)
        fk, pk = type(self).relationship_keys(fdef)
        macro = fdef.meta.get('macro')
        if custom is not None:
            result = await maybe_await(custom(parent, self.context))
            if macro == 'has_many':
                return _StaticListing(target, list(result or []))
            return result
        if macro == 'belongs_to':
            value = read_value(parent, fk)
            if value is None:
                return None
            scope = target.adapter.base_scope(target)
            scope = target.adapter.filter(scope, pk, 'eql', [value], target)
            rows = await target.query(scope=scope, page={'size': 1}).records()
            return rows[0] if rows else None
        owner_value = read_value(parent, pk)
        scope = target.adapter.base_scope(target)
        scope = target.adapter.filter(scope, fk, 'eql', [owner_value], target)
        if macro == 'has_one':
            rows = await target.query(scope=scope, page={'size': 1}).records()
            return rows[0] if rows else None
        return target.query(filter=filter, sort=sort, page=page, scope=scope)


class _StaticListing(Listing):
    """Listing over records produced by a custom relationship resolver."""

    def __init__(self, resource: Resource, records: List[Any]):
        super().__init__(resource, None, (), len(records) or 1, 1)
        self._records = records
        self._count = len(records)


_SORTABLE_TYPES = frozenset({
    'string', 'integer', 'integer_id', 'uuid', 'float', 'big_decimal', 'boolean', 'date', 'datetime',
})

