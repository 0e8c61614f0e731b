"""Exceptions for the mapping engine.

This module defines exceptions raised while mapping an object graph. Using
specific exception types allows callers to tell a missing configuration apart
from a mapped container that cannot be built, and provides better error
messages than the underlying KeyError or TypeError would.
"""

from typing import Any, get_origin


class MappingError(Exception):
    """Base exception for mapping failures.

    Attributes:
        source: The value that failed to map, if any.
        source_type: The source type of the failed mapping.
        target_type: The type we attempted to map to.
        message: Human-readable description of the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        source: Any = None,
        source_type: Any = None,
        target_type: Any = None,
    ) -> None:
        self.source = source
        self.source_type = source_type or (type(source) if source is not None else None)
        self.target_type = target_type
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class MappingNotConfiguredError(MappingError):
    """Raised when the registry holds no mapper for a (source, target) type pair."""

    def __init__(
        self,
        source_type: Any,
        target_type: Any,
        message: str | None = None,
    ) -> None:
        if message is None:
            message = (
                f"No mapping configured from {_type_name(source_type)} "
                f"to {_type_name(target_type)}"
            )
        super().__init__(
            message,
            source_type=source_type,
            target_type=target_type,
        )


class DuplicateKeyError(MappingError):
    """Raised when two dict entries map to the same output key.

    Attributes:
        key: The mapped key that was produced twice.
    """

    def __init__(
        self,
        key: Any,
        target_type: Any,
        message: str | None = None,
    ) -> None:
        self.key = key
        if message is None:
            message = f"Duplicate key {key!r} while mapping to {_type_name(target_type)}"
        super().__init__(
            message,
            target_type=target_type,
        )


def _type_name(tp: Any) -> str:
    if get_origin(tp) is not None:
        return repr(tp)
    return getattr(tp, "__qualname__", None) or repr(tp)
