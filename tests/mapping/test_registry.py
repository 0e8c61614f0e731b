import logging
from typing import Annotated, Any
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Mapped

from mapcrucible.mapping.context import MapContext
from mapcrucible.mapping.definitions import MapDefinition
from mapcrucible.mapping.exceptions import MappingNotConfiguredError
from mapcrucible.mapping.registry import MapRegistry, PassthroughFactory, default_factories
from tests.mapping.models import SourceItem, Tag, TagDto, TargetItem, source_to_target


def test_registry_raises_when_no_match() -> None:
    registry = MapRegistry()
    with pytest.raises(MappingNotConfiguredError):
        registry.get_map_definition(int, str)


def test_registered_definition_is_returned() -> None:
    registry = MapRegistry()
    definition = registry.register(SourceItem, TargetItem, source_to_target)
    assert registry.get_map_definition(SourceItem, TargetItem) is definition


def test_prepared_definitions_can_be_passed_to_constructor() -> None:
    definition = MapDefinition.from_function(SourceItem, TargetItem, source_to_target)
    registry = MapRegistry(definition)
    assert registry.get_map_definition(SourceItem, TargetItem) is definition


@pytest.mark.parametrize(
    "target_tp",
    [TargetItem, Annotated[TargetItem, "meta"], Mapped[TargetItem]],
    ids=["plain", "annotated", "mapped"],
)
def test_wrapped_types_resolve_to_the_wrapped_definition(target_tp: Any) -> None:
    registry = MapRegistry()
    definition = registry.register(SourceItem, TargetItem, source_to_target)
    assert registry.get_map_definition(SourceItem, target_tp) is definition


def test_replacing_a_definition_logs_a_warning(caplog: pytest.LogCaptureFixture) -> None:
    registry = MapRegistry()
    registry.register(Tag, TagDto, lambda source, context: TagDto(source.label))

    with caplog.at_level(logging.WARNING, logger="mapcrucible.mapping.registry"):
        replacement = registry.register(Tag, TagDto, lambda source, context: TagDto("x"))

    assert registry.get_map_definition(Tag, TagDto) is replacement
    assert "Replacing mapping definition" in caplog.text


def test_explicit_definition_takes_precedence_over_factories() -> None:
    registry = MapRegistry(PassthroughFactory())
    registry.register(str, str, lambda source, context: source.upper())

    assert registry.map("abc", str) == "ABC"


def test_factory_result_is_memoized() -> None:
    class CountingFactory(PassthroughFactory):
        def __init__(self) -> None:
            self.calls = 0

        def definition(self, source_tp: Any, target_tp: Any, registry: MapRegistry):
            self.calls += 1
            return super().definition(source_tp, target_tp, registry)

    factory = CountingFactory()
    registry = MapRegistry(factory)

    first = registry.get_map_definition(int, int)
    second = registry.get_map_definition(int, int)

    assert first is second
    assert factory.calls == 1


def test_factories_are_queried_in_order() -> None:
    class Refusing(PassthroughFactory):
        def definition(self, source_tp: Any, target_tp: Any, registry: MapRegistry):
            return None

    registry = MapRegistry(Refusing(), PassthroughFactory())
    definition = registry.get_map_definition(int, int)
    assert definition.mapper(5, MapContext(registry)) == 5


class TestPassthroughFactory:
    @pytest.mark.parametrize(
        ("source_tp", "target_tp"),
        [(int, int), (str, str), (UUID, UUID), (Annotated[int, "x"], int)],
    )
    def test_matches_identical_types(self, source_tp: Any, target_tp: Any) -> None:
        assert PassthroughFactory().matches(source_tp, target_tp)

    @pytest.mark.parametrize(
        ("source_tp", "target_tp"),
        [(int, str), (bool, int), (list[int], list[int]), (Tag, TagDto)],
    )
    def test_does_not_match_different_or_generic_types(
        self, source_tp: Any, target_tp: Any
    ) -> None:
        assert not PassthroughFactory().matches(source_tp, target_tp)

    def test_returns_same_object(self) -> None:
        registry = MapRegistry(*default_factories())
        value = uuid4()
        assert registry.map(value, UUID) is value


class TestConvenienceEntryPoints:
    def test_each_call_uses_a_fresh_context(self) -> None:
        registry = MapRegistry()
        registry.register(Tag, TagDto, lambda source, context: TagDto(source.label))
        tag = Tag("a")

        first = registry.map(tag, TagDto, preserve_references=True)
        second = registry.map(tag, TagDto, preserve_references=True)

        assert first is not second

    def test_collections(self) -> None:
        registry = MapRegistry(*default_factories())
        registry.register(SourceItem, TargetItem, source_to_target)
        items = [SourceItem(1), SourceItem(2)]

        assert registry.map_to_list(items, TargetItem) == [TargetItem(2), TargetItem(4)]
        assert registry.map_to_array(items, TargetItem) == (TargetItem(2), TargetItem(4))
        assert registry.map_to_collection(items, TargetItem, factory=set) == {
            TargetItem(2),
            TargetItem(4),
        }
        assert registry.map_to_dict({"a": items[0]}, str, TargetItem) == {"a": TargetItem(2)}

    def test_context_factory(self) -> None:
        registry = MapRegistry()
        context = registry.context(preserve_references=True)
        assert context.preserve_references is True
        assert context.registry is registry
