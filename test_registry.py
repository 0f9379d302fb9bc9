"""Tests for the provider registry."""

from core.models.candidate import Rank, SourceDescriptor
from core.registry.plugin_registry import ProviderRegistry


def _descriptor(name, klass="Source/Video", rank=Rank.PRIMARY):
    return SourceDescriptor(name, klass, rank, factory=lambda n: None)


def test_singleton(registry):
    assert ProviderRegistry() is registry


def test_register_and_lookup(registry):
    registry.register_source(_descriptor("camsrc"))
    assert registry.get_source("camsrc").rank == Rank.PRIMARY
    assert registry.get_source("missing") is None
    assert [d.name for d in registry.list_sources()] == ["camsrc"]


def test_sources_with_tags_uses_all_tags(registry):
    registry.register_source(_descriptor("camsrc"))
    registry.register_source(_descriptor("micsrc", "Source/Audio"))
    registry.register_source(_descriptor("screen", "Source/Video/Screen"))
    registry.register_source(_descriptor("sink", "Sink/Video"))

    assert [d.name for d in registry.sources_with_tags({"Source", "Video"})] == ["camsrc", "screen"]
    assert [d.name for d in registry.sources_with_tags({"Source"})] == ["camsrc", "micsrc", "screen"]
    assert registry.sources_with_tags({"Unknown"}) == []
    assert len(registry.sources_with_tags([])) == 4


def test_reregister_replaces_and_reindexes(registry):
    registry.register_source(_descriptor("camsrc"))
    registry.register_source(_descriptor("camsrc", "Source/Audio"))
    assert registry.sources_with_tags({"Video"}) == []
    assert [d.name for d in registry.sources_with_tags({"Audio"})] == ["camsrc"]


def test_unregister(registry):
    registry.register_source(_descriptor("camsrc"))
    assert registry.unregister_source("camsrc")
    assert not registry.unregister_source("camsrc")
    assert registry.sources_with_tags({"Source"}) == []


def test_set_rank(registry):
    registry.register_source(_descriptor("camsrc", rank=Rank.NONE))
    assert registry.set_rank("camsrc", Rank.SECONDARY)
    assert registry.get_source("camsrc").rank == Rank.SECONDARY
    assert registry.sources_with_tags({"Video"})[0].rank == Rank.SECONDARY
    assert not registry.set_rank("missing", 1)
