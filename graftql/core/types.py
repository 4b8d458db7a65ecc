from __future__ import annotations

import uuid as _py_uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

import strawberry
from strawberry.scalars import JSON as ST_JSON
from sqlalchemy.sql.sqltypes import (
    JSON as SA_JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    Integer,
    Numeric,
    String,
    Uuid as SA_Uuid,
)

__all__ = [
    'SEMANTIC_TYPES',
    'ID_TYPES',
    'python_type_for',
    'semantic_type_from_column',
    'coerce_filter_value',
]

# Semantic (resource-level) type name -> Python annotation understood by Strawberry
SEMANTIC_TYPES: Dict[str, Any] = {
    'string': str,
    'integer': int,
    'integer_id': strawberry.ID,
    'uuid': _py_uuid.UUID,
    'float': float,
    'big_decimal': Decimal,
    'boolean': bool,
    'date': date,
    'datetime': datetime,
    'hash': ST_JSON,
    'array': List[ST_JSON],  # type: ignore[valid-type]
    'array_of_strings': List[str],
    'array_of_integers': List[int],
}

ID_TYPES = frozenset({'integer_id', 'uuid'})


def python_type_for(semantic_type: str, *, nullable: bool = True) -> Any:
    """Map a semantic type name to the annotation used on generated fields."""
    try:
        py_t = SEMANTIC_TYPES[semantic_type]
    except KeyError:
        raise ValueError(
            f"Unknown semantic type {semantic_type!r}. Known types: {sorted(SEMANTIC_TYPES)}"
        ) from None
    return Optional[py_t] if nullable else py_t


def semantic_type_from_column(column: Any) -> str:
    """Infer a semantic type name from a SQLAlchemy column (or column type).

    Defaults to ``string`` for unknown types.
    """
    # A Column-like has both 'type' and 'info'
    sqlatype = column.type if hasattr(column, 'type') and hasattr(column, 'info') else column
    if getattr(column, 'primary_key', False) and isinstance(sqlatype, Integer):
        return 'integer_id'
    if isinstance(sqlatype, SA_Uuid):
        return 'uuid'
    # Boolean before Integer; DateTime before Date
    if isinstance(sqlatype, Boolean):
        return 'boolean'
    if isinstance(sqlatype, Integer):
        return 'integer'
    if isinstance(sqlatype, DateTime):
        return 'datetime'
    if isinstance(sqlatype, Date):
        return 'date'
    if isinstance(sqlatype, Float):
        return 'float'
    if isinstance(sqlatype, Numeric):
        return 'big_decimal'
    if isinstance(sqlatype, SA_JSON):
        return 'hash'
    if isinstance(sqlatype, String):
        return 'string'
    return 'string'


def coerce_filter_value(semantic_type: str, val: Any) -> Any:
    """Coerce an incoming filter value to the Python type records hold.

    GraphQL ``ID`` values arrive as strings; integer ids are turned back into
    ints so both in-memory comparison and SQL parameters line up.
    """
    if isinstance(val, (list, tuple)):
        return [coerce_filter_value(semantic_type, v) for v in val]
    if val is None:
        return None
    if semantic_type == 'integer_id' and isinstance(val, str) and val.lstrip('-').isdigit():
        return int(val)
    if semantic_type == 'uuid' and isinstance(val, str):
        try:
            return _py_uuid.UUID(val)
        except ValueError:
            return val
    if semantic_type == 'big_decimal' and isinstance(val, (int, float, str)):
        return Decimal(str(val))
    return val
