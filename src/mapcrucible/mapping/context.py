"""Per-operation mapping context.

A MapContext is the scope of one top-level mapping operation (or a logical
batch of them). Mappers receive the context and route nested values back
through it, so the reference cache covers the whole call tree rooted at the
original call.

With ``preserve_references`` enabled, every resolved mapper is the
cache-aware variant: a source object reached twice maps to one target
object, and cyclic graphs terminate. Without it no cache is kept and cyclic
sources recurse until ``RecursionError``.

A preserving context mutates its cache without locking. Use one context per
operation, or one thread at a time.

Example::

    context = MapContext(registry, preserve_references=True)
    dtos = context.map_to_list(people, PersonDto)
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any, TypeVar

from mapcrucible.mapping.annotations import cache_type
from mapcrucible.mapping.dicts import map_entries
from mapcrucible.mapping.identity import IdentityKey, identity_key
from mapcrucible.mapping.sequences import ElementMapper, map_iterable, map_sequence

if TYPE_CHECKING:
    from mapcrucible.mapping.definitions import MapperFn
    from mapcrucible.mapping.registry import MapRegistry

logger = getLogger(__name__)

_C = TypeVar("_C")


@dataclass(slots=True)
class _CacheEntry:
    # The source is held so its id() cannot be reused while the entry lives.
    source: Any
    target: Any


class MapContext:
    """Holds the reference cache and mapper selection for one mapping operation.

    Attributes:
        _registry: Registry the mappers are resolved from.
        _preserve_references: Whether cache-aware mappers are selected.
        _reference_cache: Targets already produced in this context.
    """

    def __init__(self, registry: "MapRegistry", preserve_references: bool = False) -> None:
        self._registry = registry
        self._preserve_references = preserve_references
        self._reference_cache: dict[IdentityKey, _CacheEntry] = {}
        logger.debug("Created mapping context (preserve_references=%s)", preserve_references)

    @property
    def preserve_references(self) -> bool:
        return self._preserve_references

    @property
    def registry(self) -> "MapRegistry":
        return self._registry

    def new_instance(self, source: Any, target: Any, target_tp: Any = None) -> None:
        """Register ``target`` as the result of mapping ``source``.

        Called by cache-aware mappers right after allocating the target and
        before populating it. An existing entry for the same key is replaced.

        Args:
            source: The source object.
            target: The target produced for it.
            target_tp: The target type the entry is filed under. Defaults to
                ``type(target)``; mappers pass their declared target type so
                that a subclass instance is found by lookups for that type.
        """
        if target_tp is None:
            target_tp = type(target)
        key = identity_key(source, type(source), cache_type(target_tp))
        self._reference_cache[key] = _CacheEntry(source, target)

    def get_from_cache(self, source: Any, target_tp: Any) -> tuple[bool, Any]:
        """Look up the target previously registered for ``source``.

        Args:
            source: The source object.
            target_tp: The target type the caller is mapping to.
                Generic aliases such as ``dict[str, Any]`` match entries filed
                under their origin class.

        Returns:
            ``(True, target)`` on a hit, ``(False, None)`` otherwise.
        """
        key = identity_key(source, type(source), cache_type(target_tp))
        entry = self._reference_cache.get(key)
        if entry is None:
            return False, None
        return True, entry.target

    def resolve_mapper(self, source_tp: Any, target_tp: Any) -> "MapperFn":
        """Resolve the mapper variant this context uses for a type pair.

        Raises:
            MappingNotConfiguredError: If the registry cannot map the pair.
        """
        definition = self._registry.get_map_definition(source_tp, target_tp)
        return definition.mapper_with_cache if self._preserve_references else definition.mapper

    def map(self, source: Any, target_tp: Any, source_tp: Any = None) -> Any:
        """Map a single value.

        Args:
            source: The value to map. ``None`` maps to ``None`` without
                consulting the registry.
            target_tp: The target type.
            source_tp: The declared source type; defaults to ``type(source)``.

        Returns:
            The mapped value.

        Raises:
            MappingNotConfiguredError: If the registry cannot map the pair.
        """
        if source is None:
            return None
        if source_tp is None:
            source_tp = type(source)
        return self.resolve_mapper(source_tp, target_tp)(source, self)

    def map_to_list(
        self,
        source: Iterable[Any] | None,
        target_tp: Any,
        source_tp: Any = None,
    ) -> list[Any] | None:
        """Map every element of ``source`` to ``target_tp``.

        Args:
            source: The elements to map, or None.
            target_tp: The element target type.
            source_tp: The declared element source type. When given, the
                mapper is resolved before any element is visited. When
                omitted, it is the runtime type of the first non-``None``
                element, and every other element must be an instance of it.

        Returns:
            ``None`` for a ``None`` source, otherwise a list with
            ``result[i]`` mapped from the i-th element.

        Raises:
            MappingNotConfiguredError: If the registry cannot map the
                element type.
            MappingError: If the element type was inferred and a later
                element is of an unrelated type.
        """
        if source is None:
            return None
        if isinstance(source, Sequence) and not source:
            return []
        elements = ElementMapper(self, source_tp, target_tp)
        if isinstance(source, Sequence):
            return map_sequence(source, elements)
        return map_iterable(source, elements)

    def map_to_collection(
        self,
        source: Iterable[Any] | None,
        target_tp: Any,
        source_tp: Any = None,
        factory: Callable[[list[Any]], _C] = list,
    ) -> _C | None:
        """Map the elements of ``source`` and collect them with ``factory``.

        ``factory`` receives the mapped list, e.g. ``set``, ``frozenset``,
        ``collections.deque`` or a custom collection class.
        """
        if source is None:
            return None
        return factory(self.map_to_list(source, target_tp, source_tp))

    def map_to_array(
        self,
        source: Iterable[Any] | None,
        target_tp: Any,
        source_tp: Any = None,
    ) -> tuple[Any, ...] | None:
        """Map the elements of ``source`` into a tuple."""
        return self.map_to_collection(source, target_tp, source_tp, tuple)

    def map_to_dict(
        self,
        source: Mapping[Any, Any] | None,
        key_tp: Any,
        value_tp: Any,
        source_key_tp: Any = None,
        source_value_tp: Any = None,
    ) -> dict[Any, Any] | None:
        """Map the keys and values of ``source``.

        Keys whose source type is exactly ``key_tp`` are passed through
        without a registry lookup; values likewise with ``value_tp``.

        Args:
            source: The dict to map, or None.
            key_tp: The key target type.
            value_tp: The value target type.
            source_key_tp: The declared key source type; defaults to the
                runtime type of the first key.
            source_value_tp: The declared value source type; defaults to the
                runtime type of the first non-``None`` value.
                Declared types are resolved before any entry is visited.

        Returns:
            ``None`` for a ``None`` source, otherwise a new dict in the
            source's iteration order.

        Raises:
            DuplicateKeyError: If two entries map to the same key.
            MappingNotConfiguredError: If a key or value mapper is missing.
            MappingError: If a key or value type was inferred and another
                entry is of an unrelated type.
        """
        if source is None:
            return None
        if not source:
            return {}
        keys = ElementMapper(self, source_key_tp, key_tp, allow_passthrough=True)
        values = ElementMapper(self, source_value_tp, value_tp, allow_passthrough=True)
        return map_entries(source, keys, values, dict[key_tp, value_tp])
