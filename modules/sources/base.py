"""Common lifecycle handling for video source providers."""

import logging
from typing import Any, Dict, Optional

from core.bus.message_bus import MessageBus
from core.interfaces.events import ErrorCode, ErrorDomain, Message, MessageType
from core.interfaces.port import SourcePort
from core.interfaces.source import IVideoSource, SourceError
from core.models.caps import Caps
from core.models.frame import VideoFrame
from core.models.state import State, StateChangeReturn, transition_steps

logger = logging.getLogger(__name__)


def _norm_key(key: str) -> str:
    return key.replace("_", "-")


class BaseVideoSource(IVideoSource):
    """Base class implementing the source state machine.

    Subclasses describe themselves with class attributes and implement
    the hooks they need:

        _open()   NULL -> READY    acquire the device or connection
        _start()  READY -> PAUSED  prepare streaming
        _stop()   PAUSED -> READY
        _close()  READY -> NULL    release everything _open() acquired
        _create() produce one VideoFrame while PAUSED or PLAYING

    Hooks signal failure by raising SourceError. set_state() turns that
    into an ERROR message on the attached bus and returns FAILURE.
    """

    FACTORY_NAME = "basesrc"
    TEMPLATE_CAPS = "ANY"
    IS_LIVE = False
    PROPERTIES: Dict[str, Any] = {}

    def __init__(self, name: Optional[str] = None, config: Optional[dict] = None):
        """Initialize the source.

        Args:
            name: Instance name (None = "<factory>0")
            config: Initial property values; underscores in keys are
                    accepted in place of dashes
        """
        self._name = name or f"{self.FACTORY_NAME}0"
        self._state = State.NULL
        self._bus: Optional[MessageBus] = None
        self._properties: Dict[str, Any] = dict(self.PROPERTIES)
        self._sequence = 0
        self.src_port = SourcePort("src", self)

        for key, value in (config or {}).items():
            self.set_property(key, value)

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> State:
        return self._state

    @classmethod
    def template_caps(cls) -> Caps:
        return Caps.from_string(cls.TEMPLATE_CAPS)

    # Properties
    def has_property(self, key: str) -> bool:
        return _norm_key(key) in self._properties

    def get_property(self, key: str) -> Any:
        key = _norm_key(key)
        if key not in self._properties:
            raise SourceError(
                f"{self._name} has no property '{key}'",
                ErrorDomain.CORE, ErrorCode.SETTINGS
            )
        return self._properties[key]

    def set_property(self, key: str, value: Any) -> None:
        """Set a property value.

        Raises:
            SourceError: If the property does not exist or the value is invalid
        """
        key = _norm_key(key)
        if key not in self._properties:
            raise SourceError(
                f"{self._name} has no property '{key}'",
                ErrorDomain.CORE, ErrorCode.SETTINGS
            )
        self._properties[key] = self._validate_property(key, value)
        logger.debug(f"{self._name}: {key} = {self._properties[key]!r}")

    def _validate_property(self, key: str, value: Any) -> Any:
        return value

    # Messages
    def set_bus(self, bus: Optional[MessageBus]) -> None:
        self._bus = bus

    def get_bus(self) -> Optional[MessageBus]:
        return self._bus

    def post_message(self, message: Message) -> bool:
        if self._bus is None:
            logger.debug(f"{self._name} has no bus, dropping {message.type.value}: {message.text}")
            return False
        return self._bus.post(message)

    def post_error(self, error: SourceError) -> bool:
        logger.debug(f"{self._name} error: {error}")
        return self.post_message(Message(
            type=MessageType.ERROR,
            source=self._name,
            text=str(error),
            domain=error.domain,
            code=error.code,
            debug=error.debug
        ))

    def post_warning(
        self,
        text: str,
        domain: ErrorDomain = ErrorDomain.CORE,
        code: ErrorCode = ErrorCode.FAILED,
        debug: Optional[str] = None
    ) -> bool:
        logger.warning(f"{self._name}: {text}")
        return self.post_message(Message(
            type=MessageType.WARNING,
            source=self._name,
            text=text,
            domain=domain,
            code=code,
            debug=debug
        ))

    # State handling
    def set_state(self, state: State) -> StateChangeReturn:
        """Move through every intermediate state up or down to the target.

        Args:
            state: Target state

        Returns:
            FAILURE if a step failed (the source stays in the last state
            reached), NO_PREROLL if a live source reached PAUSED, SUCCESS
            otherwise
        """
        result = StateChangeReturn.SUCCESS
        for current, following in transition_steps(self._state, state):
            try:
                ret = self._change_state(current, following)
            except SourceError as e:
                logger.debug(f"{self._name}: {current.name} -> {following.name} failed: {e}")
                self.post_error(e)
                return StateChangeReturn.FAILURE

            if ret == StateChangeReturn.FAILURE:
                return ret
            if ret == StateChangeReturn.NO_PREROLL:
                result = ret

            self._state = following
            self.post_message(Message(
                type=MessageType.STATE_CHANGED,
                source=self._name,
                text=f"{current.name} -> {following.name}"
            ))
        return result

    def _change_state(self, current: State, following: State) -> StateChangeReturn:
        transition = (current, following)
        if transition == (State.NULL, State.READY):
            self._open()
        elif transition == (State.READY, State.PAUSED):
            self._sequence = 0
            self._start()
            if self.IS_LIVE:
                return StateChangeReturn.NO_PREROLL
        elif transition == (State.PLAYING, State.PAUSED):
            if self.IS_LIVE:
                return StateChangeReturn.NO_PREROLL
        elif transition == (State.PAUSED, State.READY):
            self._stop()
        elif transition == (State.READY, State.NULL):
            self._close()
        return StateChangeReturn.SUCCESS

    def _open(self) -> None:
        pass

    def _start(self) -> None:
        pass

    def _stop(self) -> None:
        pass

    def _close(self) -> None:
        pass

    # Data flow
    def get_caps(self) -> Caps:
        """Template caps while in NULL, the current caps afterwards."""
        if self._state == State.NULL:
            return self.template_caps()
        return self._current_caps()

    def _current_caps(self) -> Caps:
        return self.template_caps()

    def create(self) -> VideoFrame:
        if self._state < State.PAUSED:
            raise SourceError(
                f"{self._name} is not streaming (state {self._state.name})",
                ErrorDomain.STREAM, ErrorCode.FAILED
            )
        frame = self._create()
        self._sequence += 1
        return frame

    def _create(self) -> VideoFrame:
        raise NotImplementedError

    def release(self) -> None:
        """Bring the source down to NULL and detach its bus."""
        if self._state != State.NULL:
            if self.set_state(State.NULL) == StateChangeReturn.FAILURE:
                logger.warning(f"{self._name} did not shut down cleanly")
        self._bus = None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._name} {self._state.name}>"
