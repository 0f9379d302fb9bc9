"""Tests for configuration loading and provider registration."""

import pytest
import yaml

from core.config.config_loader import DEFAULT_CONFIG, ConfigLoader, ConfigurationError
from core.models.caps import Caps, CapsParseError, RAW_VIDEO_CAPS
from core.models.candidate import Rank
from core.models.config import AutoVideoConfig, DetectConfig
from modules.sources import plugin as sources_plugin


def test_load_defaults_is_a_copy():
    loader = ConfigLoader()
    config = loader.load_defaults()
    config["detect"]["name"] = "changed"
    assert DEFAULT_CONFIG["detect"]["name"] == "autovideosrc0"


def test_load_from_file_merges_over_defaults(tmp_path):
    path = tmp_path / "autovideo.yaml"
    path.write_text(yaml.dump({
        "detect": {"filter_caps": "video/x-raw-rgb"},
        "sources": {"v4l2src": {"device": "/dev/video2"}},
    }))

    loader = ConfigLoader()
    config = loader.load_from_file(str(path))

    assert config["detect"]["filter_caps"] == "video/x-raw-rgb"
    assert config["detect"]["min_rank"] == "marginal"
    assert config["sources"]["v4l2src"] == {"device": "/dev/video2", "blocksize": 614400}
    assert config["sources"]["screensrc"] == {"monitor": 1}
    assert loader.config is config


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert ConfigLoader().load_from_file(str(path)) == DEFAULT_CONFIG


def test_load_errors(tmp_path):
    loader = ConfigLoader()
    with pytest.raises(ConfigurationError):
        loader.load_from_file(str(tmp_path / "missing.yaml"))

    broken = tmp_path / "broken.yaml"
    broken.write_text("detect: [unclosed")
    with pytest.raises(ConfigurationError):
        loader.load_from_file(str(broken))

    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n")
    with pytest.raises(ConfigurationError):
        loader.load_from_file(str(listing))


def test_typed_config_from_defaults():
    settings = AutoVideoConfig.from_dict(ConfigLoader().load_defaults())

    assert settings.detect.min_rank == Rank.MARGINAL
    assert settings.detect.caps == Caps.from_string(RAW_VIDEO_CAPS)
    assert settings.logging.level == "INFO"
    assert settings.sources["videotestsrc"]["pattern"] == "smpte"
    assert settings.rank_overrides == {}


def test_typed_config_parses_ranks():
    settings = AutoVideoConfig.from_dict({
        "detect": {"min_rank": 200, "filter_caps": None},
        "registry": {"rank_overrides": {"videotestsrc": "secondary", "screensrc": 10}},
    })
    assert settings.detect.min_rank == 200
    assert settings.detect.caps is None
    assert settings.rank_overrides == {"videotestsrc": Rank.SECONDARY, "screensrc": 10}

    with pytest.raises(ValueError):
        AutoVideoConfig.from_dict({"detect": {"min_rank": "highest"}})


def test_invalid_filter_caps_rejected():
    with pytest.raises(CapsParseError):
        DetectConfig(filter_caps="video/x-raw, width=[ 1, 2")


def test_sources_plugin_registers_builtins(registry):
    sources_plugin.register()

    names = {d.name for d in registry.list_sources()}
    assert {"fakesrc", "videotestsrc", "v4l2src"} <= names
    assert registry.get_source("v4l2src").rank == Rank.PRIMARY
    assert registry.get_source("fakesrc").class_tags == {"Source"}
    # fakesrc is not a video source and never becomes a candidate
    assert "fakesrc" not in {d.name for d in registry.sources_with_tags({"Source", "Video"})}


def test_sources_plugin_applies_config(registry):
    settings = AutoVideoConfig.from_dict({
        "sources": {"videotestsrc": {"pattern": "blue", "width": 8, "height": 4}},
        "registry": {"rank_overrides": {"videotestsrc": "primary", "unknownsrc": 1}},
    })
    sources_plugin.register(settings.sources, settings.rank_overrides)

    descriptor = registry.get_source("videotestsrc")
    assert descriptor.rank == Rank.PRIMARY
    source = descriptor.create("pattern0")
    assert source.name == "pattern0"
    assert source.get_property("pattern") == "blue"
    assert source.get_property("width") == 8
