import pytest

from mapcrucible.mapping.registry import default_factories
from tests.mapping.models import (
    Person,
    PersonDto,
    RecordingRegistry,
    SourceItem,
    Tag,
    TagDto,
    TargetItem,
    populate_person,
    source_to_target,
    tag_to_dto,
)


@pytest.fixture
def registry() -> RecordingRegistry:
    """Create a registry with the test mappers plus the default factories."""
    registry = RecordingRegistry(*default_factories())
    registry.register(SourceItem, TargetItem, source_to_target)
    registry.register(Tag, TagDto, tag_to_dto)
    registry.register_object(Person, PersonDto, populate_person)
    return registry
