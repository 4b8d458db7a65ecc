from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, Tuple, Union

from ..core.filters import MEMORY_OPERATORS
from ..core.utils import read_value
from .base import BaseAdapter


@dataclass
class MemoryScope:
    records: List[Any]
    sorts: List[Tuple[str, str]] = field(default_factory=list)
    offset: int = 0
    limit: Optional[int] = None


def _sort_rows(rows: List[Any], name: str, direction: str) -> List[Any]:
    # None sorts last in both directions and never gets compared to real values
    present = [r for r in rows if read_value(r, name) is not None]
    missing = [r for r in rows if read_value(r, name) is None]
    present.sort(key=lambda r: read_value(r, name), reverse=(direction == 'desc'))
    return present + missing


class MemoryAdapter(BaseAdapter):
    """Serve resource records from Python objects or mappings.

    ``records`` is either a sequence or a zero-argument callable returning
    one; the callable is invoked for every query so tests and fixtures can
    swap the backing data.
    """

    name = 'memory'

    def __init__(self, records: Union[Iterable[Any], Callable[[], Iterable[Any]]] = ()):
        self._records = records

    def _load(self) -> List[Any]:
        src = self._records() if callable(self._records) else self._records
        return list(src or ())

    def base_scope(self, resource) -> MemoryScope:
        return MemoryScope(records=self._load())

    def filter(self, scope: MemoryScope, name: str, operator: str, values: list, resource) -> MemoryScope:
        try:
            pred = MEMORY_OPERATORS[operator]
        except KeyError:
            raise ValueError(f"Unknown filter operator: {operator}") from None
        scope.records = [r for r in scope.records if pred(read_value(r, name), values)]
        return scope

    def order(self, scope: MemoryScope, name: str, direction: str, resource) -> MemoryScope:
        scope.sorts.append((name, direction))
        return scope

    def paginate(self, scope: MemoryScope, size: int, number: int, resource) -> MemoryScope:
        scope.limit = size
        scope.offset = (number - 1) * size
        return scope

    def count(self, scope: MemoryScope, resource) -> int:
        return len(scope.records)

    def resolve(self, scope: MemoryScope, resource) -> List[Any]:
        rows = list(scope.records)
        # Stable sort applied from the least significant key up
        for name, direction in reversed(scope.sorts):
            rows = _sort_rows(rows, name, direction)
        end = None if scope.limit is None else scope.offset + scope.limit
        return rows[scope.offset:end]
