from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Tuple

from sqlalchemy import func, not_, or_

__all__ = [
    'OPERATORS_BY_TYPE',
    'LIST_OPERATORS',
    'MEMORY_OPERATORS',
    'SQL_OPERATORS',
    'operators_for',
    'register_operator',
]

_STRING_OPS = ('eq', 'not_eq', 'eql', 'not_eql', 'prefix', 'not_prefix', 'suffix', 'not_suffix', 'match', 'not_match')
_ORDERED_OPS = ('eq', 'not_eq', 'gt', 'gte', 'lt', 'lte')
_ID_OPS = ('eq', 'not_eq')

OPERATORS_BY_TYPE: Dict[str, Tuple[str, ...]] = {
    'string': _STRING_OPS,
    'integer': _ORDERED_OPS,
    'float': _ORDERED_OPS,
    'big_decimal': _ORDERED_OPS,
    'date': _ORDERED_OPS,
    'datetime': _ORDERED_OPS,
    'boolean': ('eq',),
    'integer_id': _ID_OPS,
    'uuid': _ID_OPS,
}

# Operators whose GraphQL argument is a list (any-of semantics)
LIST_OPERATORS = frozenset({'eq', 'not_eq', 'eql', 'not_eql'})


def operators_for(semantic_type: str) -> Tuple[str, ...]:
    """Operators a filter of ``semantic_type`` supports; empty when unfilterable."""
    return OPERATORS_BY_TYPE.get(semantic_type, ())


def _lower(v: Any) -> Any:
    return v.lower() if isinstance(v, str) else v


def _any(values: Iterable[Any], pred: Callable[[Any], bool]) -> bool:
    return any(pred(v) for v in values)


def _ordered(cmp: Callable[[Any, Any], bool]) -> Callable[[Any, List[Any]], bool]:
    def _op(actual: Any, values: List[Any]) -> bool:
        if actual is None:
            return False
        return _any(values, lambda v: v is not None and cmp(actual, v))
    return _op


def _str_op(test: Callable[[str, str], bool]) -> Callable[[Any, List[Any]], bool]:
    def _op(actual: Any, values: List[Any]) -> bool:
        if actual is None:
            return False
        a = str(actual).lower()
        return _any(values, lambda v: v is not None and test(a, str(v).lower()))
    return _op


def _negate(op: Callable[[Any, List[Any]], bool]) -> Callable[[Any, List[Any]], bool]:
    return lambda actual, values: not op(actual, values)


_mem_eq = lambda actual, values: _any(values, lambda v: _lower(actual) == _lower(v))  # noqa: E731
_mem_eql = lambda actual, values: _any(values, lambda v: actual == v)  # noqa: E731
_mem_prefix = _str_op(lambda a, v: a.startswith(v))
_mem_suffix = _str_op(lambda a, v: a.endswith(v))
_mem_match = _str_op(lambda a, v: v in a)

# Python-side predicates: (record value, list of filter values) -> bool
MEMORY_OPERATORS: Dict[str, Callable[[Any, List[Any]], bool]] = {
    'eq': _mem_eq,
    'not_eq': _negate(_mem_eq),
    'eql': _mem_eql,
    'not_eql': _negate(_mem_eql),
    'prefix': _mem_prefix,
    'not_prefix': _negate(_mem_prefix),
    'suffix': _mem_suffix,
    'not_suffix': _negate(_mem_suffix),
    'match': _mem_match,
    'not_match': _negate(_mem_match),
    'gt': _ordered(lambda a, v: a > v),
    'gte': _ordered(lambda a, v: a >= v),
    'lt': _ordered(lambda a, v: a < v),
    'lte': _ordered(lambda a, v: a <= v),
}


def _sql_eq(col, values):
    str_values = [v for v in values if isinstance(v, str)]
    if str_values and len(str_values) == len(values):
        return func.lower(col).in_([v.lower() for v in values])
    return col.in_(values)


def _sql_like(pattern: str):
    def _op(col, values):
        return or_(*[func.lower(col).like(pattern.format(str(v).lower())) for v in values])
    return _op


def _sql_ordered(cmp: Callable[[Any, Any], Any]):
    return lambda col, values: or_(*[cmp(col, v) for v in values])


# SQLAlchemy expression builders: (column, list of filter values) -> SQL expression
SQL_OPERATORS: Dict[str, Callable[[Any, List[Any]], Any]] = {
    'eq': _sql_eq,
    'not_eq': lambda col, values: not_(_sql_eq(col, values)),
    'eql': lambda col, values: col.in_(values),
    'not_eql': lambda col, values: col.not_in(values),
    'prefix': _sql_like('{}%'),
    'not_prefix': lambda col, values: not_(_sql_like('{}%')(col, values)),
    'suffix': _sql_like('%{}'),
    'not_suffix': lambda col, values: not_(_sql_like('%{}')(col, values)),
    'match': _sql_like('%{}%'),
    'not_match': lambda col, values: not_(_sql_like('%{}%')(col, values)),
    'gt': _sql_ordered(lambda col, v: col > v),
    'gte': _sql_ordered(lambda col, v: col >= v),
    'lt': _sql_ordered(lambda col, v: col < v),
    'lte': _sql_ordered(lambda col, v: col <= v),
}


def register_operator(
    name: str,
    memory: Callable[[Any, List[Any]], bool],
    sql: Callable[[Any, List[Any]], Any] | None = None,
    *,
    types: Iterable[str] = (),
) -> None:  # pragma: no cover - simple
    """Register a custom filter operator and attach it to the given semantic types."""
    MEMORY_OPERATORS[name] = memory
    if sql is not None:
        SQL_OPERATORS[name] = sql
    for t in types:
        current = OPERATORS_BY_TYPE.get(t, ())
        if name not in current:
            OPERATORS_BY_TYPE[t] = current + (name,)
