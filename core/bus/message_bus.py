"""Message bus connecting a source to whoever observes it."""

import logging
from collections import deque
from typing import Callable, Deque, Dict, List, Optional
from core.interfaces.events import Message, MessageType

logger = logging.getLogger(__name__)


class MessageBus:
    """Queue of messages posted by sources.

    Unlike a process-wide bus, a MessageBus is owned by whoever creates it.
    A probe attempt creates one, attaches it to the instance under test and
    drains it afterwards, so messages of different attempts never mix.
    Handlers subscribed to a message type are called synchronously on post;
    the message is queued either way.

    Example:
        bus = MessageBus("probe")
        source.set_bus(bus)
        source.set_state(State.READY)
        errors = bus.drain(MessageType.ERROR)
    """

    def __init__(self, name: str = "bus"):
        """Initialize the message bus.

        Args:
            name: Bus name used in log output
        """
        self.name = name
        self._subscribers: Dict[MessageType, List[Callable]] = {}
        self._queue: Deque[Message] = deque()
        self._flushing = False

    def subscribe(self, msg_type: MessageType, handler: Callable[[Message], None]) -> None:
        """Subscribe a handler to a message type.

        Args:
            msg_type: Type of message to subscribe to
            handler: Function called with each posted message of that type
        """
        if msg_type not in self._subscribers:
            self._subscribers[msg_type] = []

        if handler not in self._subscribers[msg_type]:
            self._subscribers[msg_type].append(handler)
            logger.debug(f"Subscribed handler to {msg_type.value} on {self.name}")

    def unsubscribe(self, msg_type: MessageType, handler: Callable[[Message], None]) -> None:
        """Unsubscribe a handler from a message type."""
        if msg_type in self._subscribers:
            if handler in self._subscribers[msg_type]:
                self._subscribers[msg_type].remove(handler)
                logger.debug(f"Unsubscribed handler from {msg_type.value} on {self.name}")

    def post(self, message: Message) -> bool:
        """Post a message to the bus.

        Args:
            message: Message to post

        Returns:
            True if queued, False if the bus is flushing
        """
        if self._flushing:
            logger.debug(f"Dropping {message.type.value} from {message.source}: {self.name} is flushing")
            return False

        self._queue.append(message)
        logger.debug(f"Posted {message.type.value} from {message.source} on {self.name}")

        for handler in self._subscribers.get(message.type, []):
            try:
                handler(message)
            except Exception as e:
                logger.error(
                    f"Error in message handler for {message.type.value}: {e}",
                    exc_info=True
                )
        return True

    def pop(self, msg_type: Optional[MessageType] = None) -> Optional[Message]:
        """Remove and return the oldest message, optionally of a given type.

        Returns:
            The message, or None if no matching message is queued
        """
        for message in self._queue:
            if msg_type is None or message.type == msg_type:
                self._queue.remove(message)
                return message
        return None

    def drain(self, msg_type: Optional[MessageType] = None) -> List[Message]:
        """Remove and return all queued messages of a type in arrival order.

        Messages of other types stay queued.

        Args:
            msg_type: Type to drain (None = all messages)
        """
        drained = [m for m in self._queue if msg_type is None or m.type == msg_type]
        self._queue = deque(m for m in self._queue if msg_type is not None and m.type != msg_type)
        return drained

    def pending(self, msg_type: Optional[MessageType] = None) -> int:
        """Number of queued messages, optionally of a given type."""
        return sum(1 for m in self._queue if msg_type is None or m.type == msg_type)

    def set_flushing(self, flushing: bool) -> None:
        """Drop queued messages and refuse new ones while flushing."""
        self._flushing = flushing
        if flushing:
            self._queue.clear()

    def subscriber_count(self, msg_type: MessageType) -> int:
        """Get number of subscribers for a message type."""
        return len(self._subscribers.get(msg_type, []))
