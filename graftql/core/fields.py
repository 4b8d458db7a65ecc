from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional

__all__ = [
    'FieldDef',
    'FieldDescriptor',
    'CAPABILITIES',
    'attribute',
    'extra_attribute',
    'has_many',
    'has_one',
    'belongs_to',
    'filter_field',
    'sort_field',
]

CAPABILITIES = ('readable', 'writable', 'filterable', 'sortable')


@dataclass
class FieldDef:
    """Internal, normalized field description collected by the resource metaclass.

    Attributes:
        name: The attribute name on the declaring resource (e.g. "first_name").
        kind: One of "attribute", "extra_attribute", "relationship", "filter", "sort".
        meta: Metadata captured from the descriptor factory. Keys vary by kind
            (semantic_type, readable, filterable, target, cardinality, remote,
            foreign_key, description, resolve, ...).
    """

    name: str
    kind: str
    meta: Dict[str, Any]

    @property
    def semantic_type(self) -> Optional[str]:
        return self.meta.get('semantic_type')

    @property
    def description(self) -> Optional[str]:
        return self.meta.get('description')

    def flag(self, capability: str) -> bool:
        return bool(self.meta.get(capability, False))


class FieldDescriptor:
    """Descriptor placed on resources to declare fields.

    Users normally use helper factories like :func:`attribute`,
    :func:`has_many` or :func:`filter_field` which return a
    ``FieldDescriptor`` instance. The resource metaclass converts it to a
    :class:`FieldDef` with normalized metadata.
    """

    def __init__(self, *, kind: str, **meta):
        self.kind = kind
        self.meta = dict(meta)
        self.name: str | None = None

    def __set_name__(self, owner, name):  # pragma: no cover - simple
        self.name = name

    def build(self, parent_name: str) -> FieldDef:
        """Build a :class:`FieldDef` for the resource named ``parent_name``."""
        return FieldDef(name=self.name or '', kind=self.kind, meta=dict(self.meta))


def _capabilities(
    defaults: Dict[str, bool],
    only: Optional[Iterable[str]],
    exclude: Optional[Iterable[str]],
) -> Dict[str, bool]:
    caps = dict(defaults)
    if only is not None:
        only_set = set(only)
        unknown = only_set.difference(CAPABILITIES)
        if unknown:
            raise ValueError(f"Unknown capabilities in only=: {sorted(unknown)}")
        caps = {c: (c in only_set) for c in CAPABILITIES}
    if exclude is not None:
        for c in exclude:
            if c not in CAPABILITIES:
                raise ValueError(f"Unknown capability in exclude=: {c!r}")
            caps[c] = False
    return caps


def attribute(
    semantic_type: Optional[str] = None,
    /,
    *,
    readable: bool = True,
    writable: bool = True,
    filterable: bool = True,
    sortable: bool = True,
    only: Optional[Iterable[str]] = None,
    exclude: Optional[Iterable[str]] = None,
    description: Optional[str] = None,
    resolve: Optional[Callable[[Any], Any]] = None,
    operators: Optional[Iterable[str]] = None,
) -> FieldDescriptor:
    """Declare an attribute on a resource.

    Attributes are readable, writable, filterable and sortable unless told
    otherwise. ``only`` keeps just the listed capabilities and ``exclude``
    drops some:

        class EmployeeResource(Resource):
            first_name = attribute('string')
            secret = attribute('string', only=['filterable'])
            age = attribute('integer', exclude=['sortable'])

    When ``semantic_type`` is omitted and the resource has a SQLAlchemy
    ``model``, the type is inferred from the mapped column.

    ``resolve`` is an optional callable receiving the record and returning the
    value (sync or async); by default the attribute is read from the record.
    """
    caps = _capabilities(
        {'readable': readable, 'writable': writable, 'filterable': filterable, 'sortable': sortable},
        only,
        exclude,
    )
    return FieldDescriptor(
        kind='attribute',
        semantic_type=semantic_type,
        description=description,
        resolve=resolve,
        operators=tuple(operators) if operators is not None else None,
        **caps,
    )


def extra_attribute(
    semantic_type: str,
    /,
    *,
    description: Optional[str] = None,
    resolve: Optional[Callable[[Any], Any]] = None,
) -> FieldDescriptor:
    """Declare a computed, read-only field that is never filtered or sorted."""
    return FieldDescriptor(
        kind='extra_attribute',
        semantic_type=semantic_type,
        description=description,
        resolve=resolve,
        readable=True,
        writable=False,
        filterable=False,
        sortable=False,
    )


def _relationship(macro: str, target: Any, cardinality: str, meta: Dict[str, Any]) -> FieldDescriptor:
    m = dict(meta)
    m['target'] = target
    m['macro'] = macro
    m['cardinality'] = cardinality
    return FieldDescriptor(kind='relationship', **m)


def has_many(
    target: Any = None,
    /,
    *,
    foreign_key: Optional[str] = None,
    primary_key: str = 'id',
    description: Optional[str] = None,
    remote: Optional[str] = None,
    resolve: Optional[Callable[..., Any]] = None,
) -> FieldDescriptor:
    """Declare a one-to-many relationship.

    Args:
        target: Target resource class or its class name. Optional for remote
            relationships.
        foreign_key: Column on the target pointing back at this resource.
            Defaults to ``<singular owner type>_id``.
        primary_key: Column on this resource the foreign key refers to.
        description: Optional GraphQL field description.
        remote: URL of the external service hosting the target. Remote
            relationships are left out of the generated schema.
        resolve: Optional ``(parent, context) -> records`` override.

    Example:
        class EmployeeResource(Resource):
            positions = has_many('PositionResource')
            remote_positions = has_many(remote='http://test.com')
    """
    return _relationship('has_many', target, 'many', {
        'foreign_key': foreign_key,
        'primary_key': primary_key,
        'description': description,
        'remote': remote,
        'resolve': resolve,
    })


def has_one(
    target: Any = None,
    /,
    *,
    foreign_key: Optional[str] = None,
    primary_key: str = 'id',
    description: Optional[str] = None,
    remote: Optional[str] = None,
    resolve: Optional[Callable[..., Any]] = None,
) -> FieldDescriptor:
    """Declare a one-to-one relationship where the target holds the foreign key."""
    return _relationship('has_one', target, 'one', {
        'foreign_key': foreign_key,
        'primary_key': primary_key,
        'description': description,
        'remote': remote,
        'resolve': resolve,
    })


def belongs_to(
    target: Any = None,
    /,
    *,
    foreign_key: Optional[str] = None,
    primary_key: str = 'id',
    description: Optional[str] = None,
    remote: Optional[str] = None,
    resolve: Optional[Callable[..., Any]] = None,
) -> FieldDescriptor:
    """Declare a many-to-one relationship where this resource holds the foreign key.

    ``foreign_key`` defaults to ``<relationship name>_id`` on this resource and
    ``primary_key`` names the referenced column on the target.
    """
    return _relationship('belongs_to', target, 'one', {
        'foreign_key': foreign_key,
        'primary_key': primary_key,
        'description': description,
        'remote': remote,
        'resolve': resolve,
    })


def filter_field(
    semantic_type: str,
    /,
    *,
    operators: Optional[Iterable[str]] = None,
    apply: Optional[Callable[..., Any]] = None,
    description: Optional[str] = None,
) -> FieldDescriptor:
    """Declare a filter that is not backed by a readable attribute.

    ``apply(scope, operator, values, context)`` receives the adapter scope and
    returns the narrowed scope; without it the adapter filters on the column
    or record attribute of the same name.
    """
    return FieldDescriptor(
        kind='filter',
        semantic_type=semantic_type,
        operators=tuple(operators) if operators is not None else None,
        apply=apply,
        description=description,
    )


def sort_field(
    semantic_type: str = 'string',
    /,
    *,
    apply: Optional[Callable[..., Any]] = None,
) -> FieldDescriptor:
    """Declare a sort that is not backed by an attribute.

    ``apply(scope, direction, context)`` returns the ordered scope.
    """
    return FieldDescriptor(kind='sort', semantic_type=semantic_type, apply=apply)
