"""Tests for the message bus."""

from core.bus.message_bus import MessageBus
from core.interfaces.events import Message, MessageType


def _msg(msg_type, text):
    return Message(type=msg_type, source="src", text=text)


def test_drain_keeps_order_and_other_types():
    bus = MessageBus()
    bus.post(_msg(MessageType.ERROR, "first"))
    bus.post(_msg(MessageType.STATE_CHANGED, "NULL -> READY"))
    bus.post(_msg(MessageType.ERROR, "second"))

    errors = bus.drain(MessageType.ERROR)
    assert [m.text for m in errors] == ["first", "second"]
    assert bus.pending() == 1
    assert bus.pop().type == MessageType.STATE_CHANGED
    assert bus.pop() is None


def test_drain_all():
    bus = MessageBus()
    bus.post(_msg(MessageType.INFO, "a"))
    bus.post(_msg(MessageType.WARNING, "b"))
    assert len(bus.drain()) == 2
    assert bus.pending() == 0


def test_flushing_drops_messages():
    bus = MessageBus()
    bus.post(_msg(MessageType.ERROR, "queued"))
    bus.set_flushing(True)
    assert bus.pending() == 0
    assert not bus.post(_msg(MessageType.ERROR, "dropped"))
    bus.set_flushing(False)
    assert bus.post(_msg(MessageType.ERROR, "accepted"))


def test_handlers_called_and_failures_contained():
    bus = MessageBus()
    seen = []

    def broken(message):
        raise RuntimeError("boom")

    bus.subscribe(MessageType.WARNING, broken)
    bus.subscribe(MessageType.WARNING, seen.append)
    bus.subscribe(MessageType.WARNING, seen.append)
    assert bus.subscriber_count(MessageType.WARNING) == 2

    bus.post(_msg(MessageType.WARNING, "careful"))
    assert [m.text for m in seen] == ["careful"]
    assert bus.pending(MessageType.WARNING) == 1

    bus.unsubscribe(MessageType.WARNING, broken)
    assert bus.subscriber_count(MessageType.WARNING) == 1


def test_message_timestamp_and_str():
    message = Message(type=MessageType.ERROR, source="cam", text="gone", debug="ENOENT")
    assert message.timestamp is not None
    assert str(message) == "error from cam: gone (ENOENT)"
