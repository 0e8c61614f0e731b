"""Mapper definitions for a single (source type, target type) pair.

Every definition carries two callables with the same signature,
``(source, context) -> target``:

    - ``mapper``: maps without touching the context's reference cache.
    - ``mapper_with_cache``: returns the already-mapped target when the source
      was seen earlier in the same context, and otherwise registers the new
      target in the cache before populating it.

Which of the two is used is decided by the context's ``preserve_references``
flag, once per resolution.

Example::

    def populate(source: Person, target: PersonDto, context: MapContext) -> None:
        set_field(target, "name", source.name)
        set_field(target, "friends", context.map_to_list(source.friends, PersonDto))


    definition = MapDefinition.from_phases(Person, PersonDto, populate)
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Self

from mapcrucible.mapping.shells import new_shell

if TYPE_CHECKING:
    from mapcrucible.mapping.context import MapContext

#: A mapping function: ``(source, context) -> target``
MapperFn = Callable[[Any, "MapContext"], Any]

#: Shell factory: ``source -> empty target``
CreateFn = Callable[[Any], Any]

#: Field population: ``(source, target, context) -> None``
PopulateFn = Callable[[Any, Any, "MapContext"], None]


@dataclass(frozen=True, slots=True)
class MapDefinition:
    """The plain and cache-aware mappers for one type pair.

    Attributes:
        source_tp: The source type this definition maps from.
        target_tp: The target type this definition maps to.
        mapper: Mapper that never consults the reference cache.
        mapper_with_cache: Mapper that consults and populates the reference cache.
    """

    source_tp: Any
    target_tp: Any
    mapper: MapperFn
    mapper_with_cache: MapperFn

    @classmethod
    def from_function(cls, source_tp: Any, target_tp: Any, fn: MapperFn) -> Self:
        """Build a definition from a single mapping function.

        The cache-aware variant files whatever ``fn`` returns under
        ``target_tp``, so shared references are preserved even when ``fn``
        returns a subclass or ``target_tp`` is a generic alias. Cycles are only
        broken if ``fn`` itself calls ``context.new_instance`` before recursing
        into the context; prefer :meth:`from_phases` for types that can take
        part in a cycle.
        """

        def mapper(source: Any, context: "MapContext") -> Any:
            if source is None:
                return None
            return fn(source, context)

        def mapper_with_cache(source: Any, context: "MapContext") -> Any:
            if source is None:
                return None
            found, cached = context.get_from_cache(source, target_tp)
            if found:
                return cached
            result = fn(source, context)
            context.new_instance(source, result, target_tp)
            return result

        return cls(source_tp, target_tp, mapper, mapper_with_cache)

    @classmethod
    def from_phases(
        cls,
        source_tp: Any,
        target_tp: Any,
        populate: PopulateFn,
        create: CreateFn | None = None,
    ) -> Self:
        """Build a definition from shell-then-populate phases.

        Args:
            source_tp: The source type.
            target_tp: The target type.
            populate: Fills the fields of an empty target from the source,
                mapping nested values through the given context.
            create: Allocates an empty target for a source. Defaults to
                :func:`~mapcrucible.mapping.shells.new_shell` on ``target_tp``.

        The cache-aware variant registers the shell before ``populate`` runs,
        so a cyclic reference back to the same source resolves to the shell
        instead of recursing.
        """
        if create is None:

            def create(_source: Any) -> Any:
                return new_shell(target_tp)

        def mapper(source: Any, context: "MapContext") -> Any:
            if source is None:
                return None
            target = create(source)
            populate(source, target, context)
            return target

        def mapper_with_cache(source: Any, context: "MapContext") -> Any:
            if source is None:
                return None
            found, cached = context.get_from_cache(source, target_tp)
            if found:
                return cached
            target = create(source)
            context.new_instance(source, target, target_tp)
            populate(source, target, context)
            return target

        return cls(source_tp, target_tp, mapper, mapper_with_cache)

    @classmethod
    def passthrough(cls, tp: Any) -> Self:
        """Definition that returns the source unchanged, for immutable scalars."""

        def mapper(source: Any, context: "MapContext") -> Any:
            return source

        return cls(tp, tp, mapper, mapper)
