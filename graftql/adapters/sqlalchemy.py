from __future__ import annotations

import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.sql import Select

from ..core.filters import SQL_OPERATORS
from ..core.utils import get_db_session
from .base import BaseAdapter


_SESSION_LOCKS: 'weakref.WeakKeyDictionary[Any, asyncio.Lock]' = weakref.WeakKeyDictionary()


def _lock_for(session: Any) -> asyncio.Lock:
    lock = _SESSION_LOCKS.get(session)
    if lock is None:
        lock = asyncio.Lock()
        _SESSION_LOCKS[session] = lock
    return lock


class SQLAlchemyAdapter(BaseAdapter):
    """Serve resource records from a SQLAlchemy model through an ``AsyncSession``.

    The session is looked up on the resource context (``db_session``, ``db``,
    ``session`` or ``async_session``). When none is present and a
    ``session_factory`` (e.g. an ``async_sessionmaker``) was given, a short
    lived session is opened per statement.
    """

    name = 'sqlalchemy'

    def __init__(self, model: Any = None, session_factory: Optional[Callable[[], Any]] = None):
        self.model = model
        self.session_factory = session_factory

    def _model(self, resource) -> Any:
        model = self.model if self.model is not None else getattr(resource, 'model', None)
        if model is None:
            raise ValueError(f"{type(resource).__name__}: SQLAlchemyAdapter needs a model")
        return model

    def _column(self, resource, name: str) -> Any:
        model = self._model(resource)
        col = model.__table__.c.get(name)
        if col is None:
            raise ValueError(f"Unknown column {name!r} on {model.__name__}")
        return col

    @asynccontextmanager
    async def _session(self, resource) -> AsyncIterator[Any]:
        session = get_db_session(resource.context)
        if session is not None:
            # Sibling fields resolve concurrently; an AsyncSession runs one statement at a time
            async with _lock_for(session):
                yield session
            return
        if self.session_factory is None:
            raise ValueError("No db_session in context")
        async with self.session_factory() as session:
            yield session

    def base_scope(self, resource) -> Select:
        return select(self._model(resource))

    def filter(self, scope: Select, name: str, operator: str, values: list, resource) -> Select:
        try:
            op_fn = SQL_OPERATORS[operator]
        except KeyError:
            raise ValueError(f"Unknown filter operator: {operator}") from None
        return scope.where(op_fn(self._column(resource, name), values))

    def order(self, scope: Select, name: str, direction: str, resource) -> Select:
        col = self._column(resource, name)
        return scope.order_by(col.desc() if direction == 'desc' else col.asc())

    def paginate(self, scope: Select, size: int, number: int, resource) -> Select:
        return scope.limit(size).offset((number - 1) * size)

    async def count(self, scope: Select, resource) -> int:
        stmt = select(func.count()).select_from(scope.order_by(None).subquery())
        async with self._session(resource) as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())

    async def resolve(self, scope: Select, resource) -> List[Any]:
        async with self._session(resource) as session:
            result = await session.execute(scope)
            return list(result.scalars().all())
