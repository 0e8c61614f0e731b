from mapcrucible.mapping.context import MapContext
from mapcrucible.mapping.definitions import MapDefinition
from mapcrucible.mapping.exceptions import (
    DuplicateKeyError,
    MappingError,
    MappingNotConfiguredError,
)
from mapcrucible.mapping.registry import (
    MapDefinitionFactory,
    MapRegistry,
    PassthroughFactory,
    default_factories,
)
from mapcrucible.mapping.shells import new_shell, set_field

__all__ = [
    "MapContext",
    "MapDefinition",
    "MapDefinitionFactory",
    "MapRegistry",
    "PassthroughFactory",
    "default_factories",
    "new_shell",
    "set_field",
    "MappingError",
    "MappingNotConfiguredError",
    "DuplicateKeyError",
]
