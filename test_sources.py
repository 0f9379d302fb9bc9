"""Tests for the built-in source providers."""

import time

import pytest

from core.bus.message_bus import MessageBus
from core.interfaces.events import ErrorCode, ErrorDomain, MessageType
from core.interfaces.source import SourceError
from core.models.caps import Caps
from core.models.state import State, StateChangeReturn
from modules.sources.providers.fake_source import FakeSource
from modules.sources.providers.pattern_source import PATTERNS, PatternSource, render_pattern
from modules.sources.providers.screen_source import ScreenSource
from modules.sources.providers.v4l2_source import V4l2Source


def _open_with_bus(source):
    bus = MessageBus("test")
    source.set_bus(bus)
    return source.set_state(State.READY), bus


def test_state_changes_walk_every_level():
    source = FakeSource("fake")
    bus = MessageBus("test")
    source.set_bus(bus)

    assert source.set_state(State.PLAYING) == StateChangeReturn.SUCCESS
    assert source.set_state(State.NULL) == StateChangeReturn.SUCCESS
    steps = [m.text for m in bus.drain(MessageType.STATE_CHANGED)]
    assert steps == [
        "NULL -> READY", "READY -> PAUSED", "PAUSED -> PLAYING",
        "PLAYING -> PAUSED", "PAUSED -> READY", "READY -> NULL",
    ]


def test_unknown_property_raises():
    source = FakeSource("fake")
    assert source.has_property("sync")
    assert not source.has_property("device")
    with pytest.raises(SourceError):
        source.get_property("device")
    with pytest.raises(SourceError):
        source.set_property("device", "/dev/video0")


def test_config_keys_accept_underscores():
    source = FakeSource("fake", config={"num_buffers": 2})
    assert source.get_property("num-buffers") == 2


def test_fake_source_frames_and_end_of_stream():
    source = FakeSource("fake", config={"num-buffers": 2})
    source.set_state(State.PLAYING)
    frames = [source.create(), source.create()]
    assert [f.sequence for f in frames] == [0, 1]
    assert frames[0].caps.is_any
    with pytest.raises(SourceError):
        source.create()
    source.release()


def test_fake_source_sync_paces_frames():
    source = FakeSource("fake", config={"sync": True, "framerate": 50})
    source.set_state(State.PLAYING)
    start = time.monotonic()
    for _ in range(4):
        source.create()
    # Frames 0..3 are due at 0, 20, 40 and 60 ms
    assert time.monotonic() - start >= 0.05
    source.release()


def test_pattern_source_renders_requested_size():
    source = PatternSource("pattern", config={"pattern": "smpte", "width": 70, "height": 10})
    assert source.set_state(State.PAUSED) == StateChangeReturn.SUCCESS
    frame = source.create()
    assert frame.image.size == (70, 10)
    assert frame.image.getpixel((0, 0)) == (192, 192, 192)
    assert frame.image.getpixel((69, 0)) == (0, 0, 192)
    assert frame.size == 70 * 10 * 3
    assert source.get_caps() == Caps.from_string("video/x-raw-rgb, format=RGB, width=70, height=10")
    source.release()


def test_pattern_source_live_mode_returns_no_preroll():
    source = PatternSource("pattern", config={"is-live": True})
    assert source.set_state(State.PAUSED) == StateChangeReturn.NO_PREROLL
    source.release()


def test_all_patterns_render():
    for pattern in PATTERNS:
        assert render_pattern(pattern, 16, 16).size == (16, 16)


def test_pattern_source_rejects_bad_settings():
    with pytest.raises(SourceError):
        PatternSource("pattern", config={"pattern": "plaid"})
    with pytest.raises(SourceError):
        PatternSource("pattern", config={"width": 0})


def test_v4l2_missing_device(tmp_path):
    source = V4l2Source("cam", config={"device": str(tmp_path / "video9")})
    ret, bus = _open_with_bus(source)

    assert ret == StateChangeReturn.FAILURE
    assert source.state == State.NULL
    errors = bus.drain(MessageType.ERROR)
    assert len(errors) == 1
    assert errors[0].domain == ErrorDomain.RESOURCE
    assert errors[0].code == ErrorCode.NOT_FOUND
    assert "Cannot identify device" in errors[0].text


def test_v4l2_regular_file_is_not_a_device(tmp_path):
    fake_node = tmp_path / "video0"
    fake_node.write_bytes(b"")
    source = V4l2Source("cam", config={"device": str(fake_node)})
    ret, bus = _open_with_bus(source)

    assert ret == StateChangeReturn.FAILURE
    assert "isn't a device" in bus.pop(MessageType.ERROR).text


def test_v4l2_advertises_template_caps_before_open():
    source = V4l2Source("cam")
    assert source.get_caps().can_intersect(Caps.from_string("video/x-raw-yuv"))
    assert source.get_caps().can_intersect(Caps.from_string("image/jpeg"))


def test_screen_source_display_failure(mocker):
    mocker.patch("modules.sources.providers.screen_source.mss.mss", side_effect=RuntimeError("no display"))
    source = ScreenSource("screen")
    ret, bus = _open_with_bus(source)

    assert ret == StateChangeReturn.FAILURE
    error = bus.pop(MessageType.ERROR)
    assert error.code == ErrorCode.OPEN_READ
    assert error.debug == "no display"


def test_screen_source_missing_monitor(mocker):
    sct = mocker.Mock()
    sct.monitors = [{"left": 0, "top": 0, "width": 100, "height": 50}]
    mocker.patch("modules.sources.providers.screen_source.mss.mss", return_value=sct)
    source = ScreenSource("screen", config={"monitor": 1})
    ret, bus = _open_with_bus(source)

    assert ret == StateChangeReturn.FAILURE
    assert bus.pop(MessageType.ERROR).code == ErrorCode.NOT_FOUND
    sct.close.assert_called_once()


def test_screen_source_grabs_monitor(mocker):
    monitor = {"left": 0, "top": 0, "width": 4, "height": 2}
    shot = mocker.Mock()
    shot.size = (4, 2)
    shot.rgb = bytes([10, 20, 30]) * 8
    sct = mocker.Mock()
    sct.monitors = [monitor, monitor]
    sct.grab.return_value = shot
    mocker.patch("modules.sources.providers.screen_source.mss.mss", return_value=sct)

    source = ScreenSource("screen")
    assert source.set_state(State.PLAYING) == StateChangeReturn.NO_PREROLL
    assert source.get_caps() == Caps.from_string("video/x-raw-rgb, format=RGB, width=4, height=2")
    frame = source.create()
    assert frame.image.getpixel((3, 1)) == (10, 20, 30)
    assert frame.metadata["monitor"] == 1
    source.release()
    sct.close.assert_called_once()
