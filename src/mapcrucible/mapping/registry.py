"""Mapping registry and factory protocol.

This module defines the registry that mapping contexts consult to find the
mapper definition for a type pair. The registry is configured up front and
then only read, so one registry may back any number of contexts at once.

Key concepts:
    - MapDefinition: plain and cache-aware mappers for one type pair
    - MapDefinitionFactory: builds definitions for families of type pairs
    - MapRegistry: resolves the definition for a type pair

Explicit registrations are consulted first. Factories are then queried in
order, and the first definition produced is memoized for the pair.
"""

from logging import getLogger
from typing import TYPE_CHECKING, Any, Iterable, Protocol, runtime_checkable

from mapcrucible.mapping.annotations import is_plain_same_type, unwrap_annotation
from mapcrucible.mapping.definitions import CreateFn, MapDefinition, MapperFn, PopulateFn
from mapcrucible.mapping.exceptions import MappingNotConfiguredError

if TYPE_CHECKING:
    from mapcrucible.mapping.context import MapContext

logger = getLogger(__name__)


@runtime_checkable
class MapDefinitionFactory(Protocol):
    def matches(self, source_tp: Any, target_tp: Any) -> bool:
        """Check if this factory can build a definition for the given type pair.

        Args:
            source_tp: The source type.
            target_tp: The target type.

        Returns:
            True if this factory can map from source_tp to target_tp.
        """
        ...

    def definition(
        self, source_tp: Any, target_tp: Any, registry: "MapRegistry"
    ) -> MapDefinition | None:
        """Build a definition for the given type pair.

        Args:
            source_tp: The source type.
            target_tp: The target type.
            registry: The registry, for factories that depend on other pairs.

        Returns:
            A MapDefinition, or None if the pair cannot be mapped after all.
        """
        ...


class PassthroughFactory(MapDefinitionFactory):
    """Maps identical, non-generic types to themselves.

    Intended for immutable scalars (``int``, ``str``, ``UUID`` ...). Mutable
    types registered here are shared between source and target graphs.
    """

    def matches(self, source_tp: Any, target_tp: Any) -> bool:
        return is_plain_same_type(source_tp, target_tp)

    def definition(
        self, source_tp: Any, target_tp: Any, registry: "MapRegistry"
    ) -> MapDefinition | None:
        return MapDefinition.passthrough(unwrap_annotation(target_tp))


def default_factories() -> tuple[MapDefinitionFactory, ...]:
    return (PassthroughFactory(),)


#: A registry entry can be either a ready definition or a factory
MapRegistryEntry = MapDefinition | MapDefinitionFactory


class MapRegistry:
    """Registry that resolves mapper definitions for type pairs.

    Attributes:
        _definitions: Explicit definitions keyed by normalized (source, target).
        _factories: Ordered factories queried when no explicit definition exists.
        _resolved: Memoized factory results.
    """

    def __init__(self, *entries: MapRegistryEntry) -> None:
        self._definitions: dict[tuple[Any, Any], MapDefinition] = {}
        self._factories: list[MapDefinitionFactory] = []
        self._resolved: dict[tuple[Any, Any], MapDefinition] = {}
        for entry in entries:
            if isinstance(entry, MapDefinition):
                self.add(entry)
            else:
                self._factories.append(entry)

    def add(self, definition: MapDefinition) -> MapDefinition:
        """Add a prepared definition, replacing any previous one for the same pair."""
        source_tp, target_tp = definition.source_tp, definition.target_tp
        key = (unwrap_annotation(source_tp), unwrap_annotation(target_tp))
        if key in self._definitions:
            logger.warning("Replacing mapping definition for %s -> %s", *key)
        else:
            logger.debug("Registered mapping definition for %s -> %s", *key)
        self._definitions[key] = definition
        self._resolved.pop(key, None)
        return definition

    def register(self, source_tp: Any, target_tp: Any, fn: MapperFn) -> MapDefinition:
        """Register a single mapping function for a type pair.

        See :meth:`MapDefinition.from_function` for how the cache-aware
        variant is derived.
        """
        return self.add(
            MapDefinition.from_function(
                unwrap_annotation(source_tp), unwrap_annotation(target_tp), fn
            )
        )

    def register_object(
        self,
        source_tp: Any,
        target_tp: Any,
        populate: PopulateFn,
        create: CreateFn | None = None,
    ) -> MapDefinition:
        """Register a shell-then-populate mapping for a type pair.

        See :meth:`MapDefinition.from_phases`.
        """
        return self.add(
            MapDefinition.from_phases(
                unwrap_annotation(source_tp), unwrap_annotation(target_tp), populate, create
            )
        )

    def get_map_definition(self, source_tp: Any, target_tp: Any) -> MapDefinition:
        """Find the definition for the given type pair.

        Args:
            source_tp: The source type annotation.
            target_tp: The target type annotation.

        Returns:
            The registered or factory-built MapDefinition.

        Raises:
            MappingNotConfiguredError: If nothing can map this pair.
        """
        key = (unwrap_annotation(source_tp), unwrap_annotation(target_tp))
        if (definition := self._definitions.get(key)) is not None:
            return definition
        if (definition := self._resolved.get(key)) is not None:
            return definition

        definition = next(
            (
                candidate
                for factory in self._factories
                if factory.matches(*key)
                and (candidate := factory.definition(*key, self)) is not None
            ),
            None,
        )
        if definition is None:
            raise MappingNotConfiguredError(*key)

        logger.debug("Resolved mapping definition for %s -> %s from factory", *key)
        self._resolved[key] = definition
        return definition

    def context(self, preserve_references: bool = False) -> "MapContext":
        """Create a new mapping context backed by this registry."""
        from mapcrucible.mapping.context import MapContext

        return MapContext(self, preserve_references)

    def map(
        self,
        source: Any,
        target_tp: Any,
        source_tp: Any = None,
        *,
        preserve_references: bool = False,
    ) -> Any:
        """Map ``source`` in a fresh context. See :meth:`MapContext.map`."""
        return self.context(preserve_references).map(source, target_tp, source_tp)

    def map_to_list(
        self,
        source: Iterable[Any] | None,
        target_tp: Any,
        source_tp: Any = None,
        *,
        preserve_references: bool = False,
    ) -> list[Any] | None:
        """Map ``source`` in a fresh context. See :meth:`MapContext.map_to_list`."""
        return self.context(preserve_references).map_to_list(source, target_tp, source_tp)

    def map_to_collection(
        self,
        source: Iterable[Any] | None,
        target_tp: Any,
        source_tp: Any = None,
        factory: Any = list,
        *,
        preserve_references: bool = False,
    ) -> Any:
        """Map ``source`` in a fresh context. See :meth:`MapContext.map_to_collection`."""
        return self.context(preserve_references).map_to_collection(
            source, target_tp, source_tp, factory
        )

    def map_to_array(
        self,
        source: Iterable[Any] | None,
        target_tp: Any,
        source_tp: Any = None,
        *,
        preserve_references: bool = False,
    ) -> tuple[Any, ...] | None:
        """Map ``source`` in a fresh context. See :meth:`MapContext.map_to_array`."""
        return self.context(preserve_references).map_to_array(source, target_tp, source_tp)

    def map_to_dict(
        self,
        source: Any,
        key_tp: Any,
        value_tp: Any,
        source_key_tp: Any = None,
        source_value_tp: Any = None,
        *,
        preserve_references: bool = False,
    ) -> dict[Any, Any] | None:
        """Map ``source`` in a fresh context. See :meth:`MapContext.map_to_dict`."""
        return self.context(preserve_references).map_to_dict(
            source, key_tp, value_tp, source_key_tp, source_value_tp
        )

    def __iter__(self):
        return iter([*self._definitions.values(), *self._factories])
