from mapcrucible.mapping import (
    DuplicateKeyError,
    MapContext,
    MapDefinition,
    MappingError,
    MappingNotConfiguredError,
    MapRegistry,
    default_factories,
    new_shell,
    set_field,
)
from mapcrucible._version import __version__

__all__ = [
    "MapRegistry",
    "MapContext",
    "MapDefinition",
    "default_factories",
    "new_shell",
    "set_field",
    "MappingError",
    "MappingNotConfiguredError",
    "DuplicateKeyError",
    "__version__",
]
