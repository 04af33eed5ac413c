"""Entity registry - maps entity names to declared classes.

Relationships name their target entity by string, so every entity that can be
the target of a relationship must be registered. ``@entity`` registers with
``default_registry`` unless another registry is passed.
"""

from __future__ import annotations

import logging

from row_orm.core.exceptions import MetadataError, UnknownEntityError
from row_orm.mapping.metadata import EntityDescriptor, entity_name, resolve_entity

logger = logging.getLogger(__name__)


class EntityRegistry:
    """Name -> entity class lookup with cached metadata.

    Descriptors are derived once per class on first use and reused for the
    lifetime of the registry.

    Raises:
        MetadataError: If two different classes register under one name.
    """

    def __init__(self) -> None:
        self._types: dict[str, type] = {}
        self._descriptors: dict[type, EntityDescriptor] = {}

    def register(self, cls: type) -> type:
        name = entity_name(cls)
        existing = self._types.get(name)
        if existing is not None and existing is not cls:
            raise MetadataError(
                name,
                f"name already registered by {existing.__module__}.{existing.__qualname__}",
            )
        self._types[name] = cls
        logger.debug("Registered entity %s -> %s", name, cls.__qualname__)
        return cls

    def resolve(self, cls: type) -> EntityDescriptor:
        """Return the (cached) descriptor for a class."""
        descriptor = self._descriptors.get(cls)
        if descriptor is None:
            descriptor = resolve_entity(cls)
            self._descriptors[cls] = descriptor
        return descriptor

    def get(self, name: str) -> type:
        """Look up an entity class by name.

        Raises:
            UnknownEntityError: If no entity is registered under ``name``.
        """
        try:
            return self._types[name]
        except KeyError:
            raise UnknownEntityError(name) from None

    def lookup(self, name: str) -> EntityDescriptor:
        """Descriptor for the entity registered under ``name``."""
        return self.resolve(self.get(name))

    def has(self, name: str) -> bool:
        """Check if an entity name is registered."""
        return name in self._types

    @property
    def entity_names(self) -> list[str]:
        """List all registered entity names, sorted alphabetically."""
        return sorted(self._types.keys())

    def __len__(self) -> int:
        return len(self._types)


default_registry = EntityRegistry()


def registry_for(cls: type) -> EntityRegistry:
    """The registry a class was declared with, or the default one."""
    registry = cls.__dict__.get("__entity_registry__")
    return registry if registry is not None else default_registry
