from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

from .descriptions import DescriptionResolver, NullDescriptionResolver
from .merge import SchemaDefinition

__all__ = ['Configuration', 'config']


class Configuration:
    """Process-wide GraftQL settings.

    Attributes:
        schema_class: Optional :class:`SchemaDefinition` the generated types are
            grafted onto.
        description_resolver: Lookup for locale descriptions.
        entrypoints: Optional allowlist (resource classes, class names or
            entrypoint names) of resources exposed on the root query.
        strawberry_config: ``StrawberryConfig`` used when there is no base
            schema or the base schema carries none.
        context_mapper: Callable turning the request context into the
            resolution context; see :meth:`define_context`.
    """

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.schema_class: Optional[SchemaDefinition] = None
        self.description_resolver: DescriptionResolver = NullDescriptionResolver()
        self.entrypoints: Optional[Iterable[Any]] = None
        self.strawberry_config: Any = None
        self.context_mapper: Optional[Callable[[Any], Any]] = None

    def define_context(self, fn: Callable[[Any], Any]) -> Callable[[Any], Any]:
        """Register the request-context mapper; usable as a decorator.

            @graftql.config.define_context
            def _ctx(ctx):
                return {'user': ctx.current_user}
        """
        self.context_mapper = fn
        return fn


config = Configuration()
