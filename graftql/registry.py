"""Process-wide cache of the generated and merged schemas."""
from __future__ import annotations

import logging
import threading
from typing import Any, Iterable, Optional, Tuple, Type

from .config import Configuration, config as default_config
from .descriptors import read_resources
from .merge import MergedSchema, SchemaDefinition, merge
from .resource import Resource, registered_resources
from .synthesizer import GeneratedTypeSet, synthesize

__all__ = ['SchemaRegistry', 'schemas']

logger = logging.getLogger("graftql")


class SchemaRegistry:
    """Holds the published schema and swaps it atomically on rebuild.

    A published :class:`MergedSchema` is never modified; ``build`` always
    produces a new instance and replaces the reference under a lock.
    """

    def __init__(self, configuration: Optional[Configuration] = None):
        self._config = configuration
        self._lock = threading.Lock()
        self._key: Optional[Tuple[Any, ...]] = None
        self._merged: Optional[MergedSchema] = None

    @property
    def configuration(self) -> Configuration:
        return self._config if self._config is not None else default_config

    def build(
        self,
        resources: Optional[Iterable[Type[Resource]]] = None,
        base: Optional[SchemaDefinition] = None,
        strawberry_config: Any = None,
    ) -> MergedSchema:
        """Generate and merge a schema, or return the cached one for the same inputs."""
        cfg = self.configuration
        classes = tuple(resources) if resources is not None else tuple(registered_resources())
        base = base if base is not None else cfg.schema_class
        st_config = strawberry_config if strawberry_config is not None else cfg.strawberry_config
        entrypoints = tuple(cfg.entrypoints) if cfg.entrypoints is not None else None
        key = (id(base), classes, id(st_config), id(cfg.description_resolver), entrypoints)
        with self._lock:
            if self._merged is not None and self._key == key:
                logger.debug("Schema cache hit")
                return self._merged
        descriptors = read_resources(
            classes,
            description_resolver=cfg.description_resolver,
            entrypoints=cfg.entrypoints,
        )
        naming_config = base.config if base is not None and base.config is not None else st_config
        generated = synthesize(descriptors, config=naming_config)
        merged = merge(base, generated, config=st_config)
        with self._lock:
            self._merged = merged
            self._key = key
        return merged

    @property
    def graphql(self) -> MergedSchema:
        """The published merged schema, built on first access."""
        merged = self._merged
        if merged is None:
            merged = self.build()
        return merged

    @property
    def generated(self) -> GeneratedTypeSet:
        return self.graphql.generated

    def reset(self) -> None:
        with self._lock:
            self._merged = None
            self._key = None


schemas = SchemaRegistry()
