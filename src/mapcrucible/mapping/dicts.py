"""Traversal of dict-like containers.

Keys and values are mapped by independent pipelines. A pipeline whose source
type is exactly its target type passes items through untouched, without a
registry lookup or a reference-cache lookup. Otherwise the mapper for the
pair is resolved once and applied to every entry.

Python dicts silently overwrite on repeated keys. Here two source entries
that map to the same output key are rejected with DuplicateKeyError instead.
"""

from collections.abc import Mapping
from typing import Any

from mapcrucible.mapping.exceptions import DuplicateKeyError
from mapcrucible.mapping.sequences import ElementMapper


def map_entries(
    source: Mapping[Any, Any],
    keys: ElementMapper,
    values: ElementMapper,
    target_tp: Any,
) -> dict[Any, Any]:
    """Map every entry of ``source``, following its iteration order.

    Args:
        source: The dict to map.
        keys: Pipeline for keys.
        values: Pipeline for values.
        target_tp: Target dict type, for error reporting.

    Returns:
        A new dict with mapped keys and values.

    Raises:
        DuplicateKeyError: If two entries produce the same mapped key.
    """
    result: dict[Any, Any] = {}
    for key, value in source.items():
        out_key = keys(key)
        if out_key in result:
            raise DuplicateKeyError(out_key, target_tp)
        result[out_key] = values(value)
    return result
