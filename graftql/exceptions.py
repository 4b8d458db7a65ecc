"""Error types raised by GraftQL.

Build-time problems (naming conflicts, broken resource declarations) raise
immediately so no half-built schema is ever published. Query-time problems
are reported through GraphQL error payloads instead.
"""
from __future__ import annotations

from typing import Any, Optional

from graphql import GraphQLError

__all__ = [
    'GraftQLError',
    'GenerationConfigError',
    'MalformedResourceError',
    'DepthExceededError',
]


class GraftQLError(Exception):
    """Base class for GraftQL errors."""


class GenerationConfigError(GraftQLError):
    """Schema generation found a naming conflict or an invalid configuration."""

    def __init__(self, message: str, *, name: Optional[str] = None, kind: Optional[str] = None):
        super().__init__(message)
        self.name = name
        self.kind = kind


class MalformedResourceError(GenerationConfigError):
    """A resource declaration cannot be turned into schema types."""

    def __init__(self, resource: Any, message: str):
        rname = getattr(resource, '__name__', None) or str(resource)
        super().__init__(f"{rname}: {message}", name=rname, kind='resource')
        self.resource = resource


class DepthExceededError(GraphQLError):
    """Validation error for operations nested deeper than the schema allows."""

    def __init__(self, depth: int, max_depth: int):
        super().__init__(f"Query has depth of {depth}, which exceeds max depth of {max_depth}")
        self.depth = depth
        self.max_depth = max_depth
