from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from graphql import GraphQLError

from .config import Configuration, config as default_config
from .context import current_context, resolution_context, with_context
from .registry import SchemaRegistry, schemas as default_schemas

__all__ = ['Runner', 'execute']

logger = logging.getLogger("graftql")

_UNSET = object()


class Runner:
    """Execute GraphQL documents against the published schema.

    The resolution context is built once per execution from the request
    context (explicit ``context=`` or the active ``with_context`` value) and
    the configured context mapper.
    """

    def __init__(self, registry: Optional[SchemaRegistry] = None, configuration: Optional[Configuration] = None):
        self.registry = registry if registry is not None else default_schemas
        self.configuration = configuration if configuration is not None else default_config

    async def execute(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        context: Any = _UNSET,
        operation_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        request_ctx = current_context() if context is _UNSET else context
        try:
            resolved = resolution_context(request_ctx, self.configuration.context_mapper)
        except Exception as exc:
            logger.warning("Context mapping failed: %s", exc)
            return {'errors': [GraphQLError(str(exc)).formatted]}
        schema = self.registry.graphql
        with with_context(request_ctx):
            result = await schema.execute(
                query,
                variable_values=variables,
                context_value=resolved,
                operation_name=operation_name,
            )
        payload: Dict[str, Any] = {}
        if result.data is not None:
            payload['data'] = result.data
        if result.errors:
            payload['errors'] = [e.formatted for e in result.errors]
        return payload

    def run(self, query: str, variables: Optional[Dict[str, Any]] = None, context: Any = _UNSET,
            operation_name: Optional[str] = None) -> Dict[str, Any]:
        """Synchronous wrapper around :meth:`execute` for scripts."""
        return asyncio.run(self.execute(query, variables, context, operation_name))


async def execute(query: str, variables: Optional[Dict[str, Any]] = None, context: Any = _UNSET,
                  operation_name: Optional[str] = None) -> Dict[str, Any]:
    return await Runner().execute(query, variables, context, operation_name)
