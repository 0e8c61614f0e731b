"""Traversal of sequences and general iterables.

Two strategies are used depending on what the source can tell us up front:

    - Indexable sequences (``collections.abc.Sequence``): the length is known,
      so the output list is allocated once and filled by index.
    - Other iterables (generators, sets, dict views ...): elements are
      appended in encounter order.

In both cases the element mapper is resolved once per call and reused for
every element. A declared element type is resolved before traversal starts;
an inferred one is taken from the first non-``None`` element.
"""

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any

from mapcrucible.mapping.annotations import unwrap_annotation
from mapcrucible.mapping.exceptions import MappingError

if TYPE_CHECKING:
    from mapcrucible.mapping.context import MapContext
    from mapcrucible.mapping.definitions import MapperFn


def _passthrough(source: Any, context: "MapContext") -> Any:
    return source


class ElementMapper:
    """Maps the elements of one container with a single resolved mapper.

    When ``source_tp`` is declared, the mapper for ``(source_tp, target_tp)``
    is resolved up front, so a missing mapping raises even if every element
    is ``None``. Otherwise the runtime type of the first non-``None`` element
    is used, and every later element must be an instance of that type.
    ``None`` elements map to ``None``.

    Attributes:
        _context: The context the elements are mapped in.
        _target_tp: Element target type.
        _allow_passthrough: Skip the registry entirely when the element source
            type is exactly the target type.
        _inferred_tp: Element source type taken from the first element, or
            None while unknown or when the type was declared.
        _mapper: The resolved mapper, once known.
    """

    __slots__ = ("_context", "_target_tp", "_allow_passthrough", "_inferred_tp", "_mapper")

    def __init__(
        self,
        context: "MapContext",
        source_tp: Any,
        target_tp: Any,
        allow_passthrough: bool = False,
    ) -> None:
        self._context = context
        self._target_tp = target_tp
        self._allow_passthrough = allow_passthrough
        self._inferred_tp: type | None = None
        self._mapper: "MapperFn | None" = None
        if source_tp is not None:
            self._mapper = self._resolve(unwrap_annotation(source_tp))

    def _resolve(self, source_tp: Any) -> "MapperFn":
        if self._allow_passthrough and source_tp is unwrap_annotation(self._target_tp):
            return _passthrough
        return self._context.resolve_mapper(source_tp, self._target_tp)

    def _check_element(self, item: Any) -> None:
        if not isinstance(item, self._inferred_tp):
            raise MappingError(
                f"Element of type {type(item).__qualname__} does not match the element "
                f"type {self._inferred_tp.__qualname__} inferred from the first element; "
                "declare the source element type to map mixed containers",
                source=item,
                target_type=self._target_tp,
            )

    def __call__(self, item: Any) -> Any:
        if item is None:
            return None
        mapper = self._mapper
        if mapper is None:
            self._inferred_tp = type(item)
            mapper = self._mapper = self._resolve(self._inferred_tp)
        elif self._inferred_tp is not None:
            self._check_element(item)
        return mapper(item, self._context)


def map_sequence(source: Sequence[Any], elements: ElementMapper) -> list[Any]:
    """Map an indexable sequence into a pre-sized list."""
    count = len(source)
    result: list[Any] = [None] * count
    for idx in range(count):
        result[idx] = elements(source[idx])
    return result


def map_iterable(source: Iterable[Any], elements: ElementMapper) -> list[Any]:
    """Map an iterable of unknown length, preserving encounter order."""
    result: list[Any] = []
    for item in source:
        result.append(elements(item))
    return result
