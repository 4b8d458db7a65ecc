"""Request context plumbing.

``with_context`` / ``current_context`` hold the framework-level request
context for the running task. ``resolution_context`` turns it into the
mapping GraphQL resolvers receive as ``info.context``.
"""
from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Mapping, Optional

__all__ = [
    'with_context',
    'current_context',
    'resolution_context',
    'resource_context',
]

_request_context: contextvars.ContextVar[Any] = contextvars.ContextVar('graftql_request_context', default=None)


@contextmanager
def with_context(ctx: Any) -> Iterator[Any]:
    """Make ``ctx`` the current request context for the duration of the block."""
    token = _request_context.set(ctx)
    try:
        yield ctx
    finally:
        _request_context.reset(token)


def current_context() -> Any:
    return _request_context.get()


def resolution_context(ctx: Any, mapper: Optional[Callable[[Any], Any]] = None) -> Dict[str, Any]:
    """Build the per-request context handed to GraphQL resolvers.

    A configured ``mapper`` wins and must return a mapping. Without one the
    raw request context is exposed under the ``object`` key.
    """
    if mapper is None:
        return {'object': ctx}
    mapped = mapper(ctx)
    if not isinstance(mapped, Mapping):
        raise TypeError(
            f"Context mapper must return a mapping, got {type(mapped).__name__}"
        )
    return dict(mapped)


def resource_context(info: Any = None) -> Any:
    """Context a resource should see while resolving a GraphQL field.

    The framework-level context wins when one is active; otherwise the
    GraphQL context itself is used (so sessions put on ``info.context`` are
    still found).
    """
    ctx = current_context()
    if ctx is not None:
        return ctx
    return getattr(info, 'context', None) if info is not None else None
