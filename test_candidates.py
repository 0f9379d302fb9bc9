"""Tests for candidate filtering, ordering, matching and naming."""

import random

from core.models.caps import Caps, RAW_VIDEO_CAPS
from core.models.candidate import Rank, SourceDescriptor
from modules.detect.candidates import compare_ranks, filter_candidates, sort_candidates
from modules.detect.matcher import caps_compatible
from modules.detect.naming import pretty_instance_name


def _descriptor(name, rank, klass="Source/Video"):
    return SourceDescriptor(name, klass, rank, factory=lambda n: None)


def test_filter_requires_all_class_tags():
    descriptors = [
        _descriptor("camsrc", Rank.PRIMARY),
        _descriptor("micsrc", Rank.PRIMARY, "Source/Audio"),
        _descriptor("videosink", Rank.PRIMARY, "Sink/Video"),
        _descriptor("decoder", Rank.PRIMARY, "Codec/Decoder/Video"),
        _descriptor("netsrc", Rank.SECONDARY, "Source/Video/Network"),
    ]
    names = [d.name for d in filter_candidates(descriptors)]
    assert names == ["camsrc", "netsrc"]


def test_filter_applies_rank_threshold():
    descriptors = [
        _descriptor("none", Rank.NONE),
        _descriptor("below", Rank.MARGINAL - 1),
        _descriptor("marginal", Rank.MARGINAL),
        _descriptor("primary", Rank.PRIMARY),
    ]
    names = [d.name for d in filter_candidates(descriptors)]
    assert names == ["marginal", "primary"]


def test_filter_empty_input():
    assert filter_candidates([]) == []
    assert filter_candidates([_descriptor("x", Rank.NONE)]) == []


def test_sort_by_rank_then_name_descending():
    descriptors = [
        _descriptor("alpha", 128),
        _descriptor("beta", 64),
        _descriptor("gamma", 128),
        _descriptor("delta", 256),
    ]
    names = [d.name for d in sort_candidates(descriptors)]
    assert names == ["delta", "gamma", "alpha", "beta"]


def test_name_tie_break_is_bytewise():
    descriptors = [_descriptor("Zeta", 64), _descriptor("alpha", 64)]
    # 'a' (0x61) sorts after 'Z' (0x5a) byte-wise, so it comes first when descending
    assert [d.name for d in sort_candidates(descriptors)] == ["alpha", "Zeta"]


def test_sorting_is_deterministic_and_idempotent():
    descriptors = [_descriptor(f"src{i}", random.choice([64, 128, 256])) for i in range(30)]
    once = sort_candidates(descriptors)
    shuffled = list(descriptors)
    random.shuffle(shuffled)
    assert sort_candidates(shuffled) == once
    assert sort_candidates(once) == once


def test_compare_ranks_sign():
    high = _descriptor("a", 256)
    low = _descriptor("b", 64)
    assert compare_ranks(high, low) < 0
    assert compare_ranks(low, high) > 0
    assert compare_ranks(high, high) == 0


def test_caps_compatible():
    raw = Caps.from_string(RAW_VIDEO_CAPS)
    assert caps_compatible(None, Caps.from_string("image/jpeg"))
    assert caps_compatible(raw, Caps.from_string("video/x-raw-rgb, width=640"))
    assert not caps_compatible(Caps.from_string("x-compressed"), Caps.from_string("x-raw-rgb"))


def test_pretty_instance_name():
    assert pretty_instance_name("autovideosrc0", "v4l2src") == "autovideosrc0-actual-src-v4l2"
    assert pretty_instance_name("auto", "gstcamsrc") == "auto-actual-src-cam"
    assert pretty_instance_name("auto", "webcam") == "auto-actual-src-webcam"
