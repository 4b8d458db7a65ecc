from __future__ import annotations

import inspect
from dataclasses import fields as _dc_fields, is_dataclass
from enum import Enum
from typing import Any, Dict, Mapping

from strawberry import UNSET

__all__ = [
    'maybe_await',
    'dir_value',
    'input_to_dict',
    'read_value',
    'get_db_session',
]


async def maybe_await(value: Any) -> Any:
    """Await ``value`` when it is awaitable; adapters may be sync or async."""
    if inspect.isawaitable(value):
        return await value
    return value


def dir_value(order_dir: Any) -> str:
    if order_dir is None:
        return 'asc'
    val = getattr(order_dir, 'value', order_dir)
    val = str(val).lower()
    return 'desc' if val == 'desc' else 'asc'


def input_to_dict(obj: Any) -> Any:
    """Convert a Strawberry input instance (or nested list/dict) to plain Python dicts/lists.

    Omitted (UNSET) input fields are dropped; enums collapse to their values.
    """
    if obj is None or obj is UNSET:
        return None
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, (list, tuple)):
        return [input_to_dict(x) for x in obj]
    if isinstance(obj, dict):
        return {k: input_to_dict(v) for k, v in obj.items() if v is not UNSET}
    if is_dataclass(obj):
        out: Dict[str, Any] = {}
        for f in _dc_fields(obj):
            v = getattr(obj, f.name, UNSET)
            if v is UNSET:
                continue
            out[f.name] = input_to_dict(v)
        return out
    return obj


def read_value(record: Any, name: str) -> Any:
    """Read ``name`` from a mapping record or an attribute-style record."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


# --- Context helpers ---
def get_db_session(info_or_ctx: Any) -> Any | None:
    """Best-effort extraction of an AsyncSession-like object from context.

    Accepts either a Strawberry ``Info`` or a plain context object/dict. Tries
    common keys/attributes in order: ``db_session``, ``db``, ``session``,
    ``async_session``.

    Returns:
        The session object if found; otherwise ``None``.
    """
    if info_or_ctx is None:
        return None
    # If a Strawberry Info is passed, use its .context
    ctx = getattr(info_or_ctx, 'context', info_or_ctx)
    if ctx is None:
        return None
    candidates = ('db_session', 'db', 'session', 'async_session')
    if isinstance(ctx, Mapping):
        for k in candidates:
            v = ctx.get(k)
            if v is not None:
                return v
        # Default resolution context wraps the request context under "object"
        inner = ctx.get('object')
        if inner is not None and inner is not ctx:
            return get_db_session(inner)
        return None
    for k in candidates:
        v = getattr(ctx, k, None)
        if v is not None:
            return v
    return None
