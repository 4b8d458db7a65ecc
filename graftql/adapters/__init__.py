from __future__ import annotations

from .base import BaseAdapter
from .memory import MemoryAdapter, MemoryScope
from .sqlalchemy import SQLAlchemyAdapter


__all__ = [
    'BaseAdapter',
    'MemoryAdapter',
    'MemoryScope',
    'SQLAlchemyAdapter',
]
