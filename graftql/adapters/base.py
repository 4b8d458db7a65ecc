from __future__ import annotations
from typing import Any


class BaseAdapter:
    """Data access contract used by :class:`graftql.resource.Resource`.

    A *scope* is whatever the adapter builds queries with (a list of records,
    a SQLAlchemy ``Select``, ...). ``count`` and ``resolve`` may return plain
    values or awaitables.
    """

    name = 'base'

    def base_scope(self, resource) -> Any:
        raise NotImplementedError

    def filter(self, scope: Any, name: str, operator: str, values: list, resource) -> Any:
        raise NotImplementedError

    def order(self, scope: Any, name: str, direction: str, resource) -> Any:
        raise NotImplementedError

    def paginate(self, scope: Any, size: int, number: int, resource) -> Any:
        raise NotImplementedError

    def count(self, scope: Any, resource) -> Any:
        raise NotImplementedError

    def resolve(self, scope: Any, resource) -> Any:
        raise NotImplementedError
