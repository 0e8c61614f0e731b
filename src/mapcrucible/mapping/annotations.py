"""Helpers for normalizing type annotations before registry lookups."""

from typing import Annotated, Any, get_args, get_origin

from sqlalchemy.orm import Mapped

# Origins that only decorate the type they wrap.
_TRANSPARENT_ORIGINS = (Annotated, Mapped)


def unwrap_annotation(tp: Any) -> Any:
    """Peel ``Annotated[...]`` and ``Mapped[...]`` layers off ``tp``.

    >>> unwrap_annotation(Mapped[Annotated[int, "pk"]])
    <class 'int'>
    """
    while get_origin(tp) in _TRANSPARENT_ORIGINS:
        tp = get_args(tp)[0]
    return tp


def cache_type(tp: Any) -> Any:
    """The class a target of type ``tp`` is cached under.

    Generic aliases collapse to their origin, so ``dict[str, Any]`` and a
    plain ``dict`` instance share one cache slot.
    """
    tp = unwrap_annotation(tp)
    return get_origin(tp) or tp


def is_plain_same_type(source_tp: Any, target_tp: Any) -> bool:
    """True when both annotations name the same non-generic class."""
    source_tp = unwrap_annotation(source_tp)
    if get_origin(source_tp) is not None:
        return False
    return source_tp is unwrap_annotation(target_tp)
