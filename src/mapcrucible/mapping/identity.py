from typing import Any

#: (id(source), source type, target type)
IdentityKey = tuple[int, type, Any]


def identity_key(obj: Any, source_tp: type, target_tp: Any) -> IdentityKey:
    """Build the reference-cache key for mapping ``obj`` to ``target_tp``.

    Keys use ``id(obj)`` rather than ``hash(obj)``, so two distinct objects that
    compare equal never share an entry. The source and target types are part of
    the key so the same object mapped to two target types is cached separately.

    Example:
        >>> a, b = [1], [1]
        >>> identity_key(a, list, tuple) == identity_key(b, list, tuple)
        False
    """
    return (id(obj), source_tp, target_tp)
