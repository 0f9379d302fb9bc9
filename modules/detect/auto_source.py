"""Video source that automatically detects a usable source."""

import logging
from typing import Any, Iterable, Optional

from core.bus.message_bus import MessageBus
from core.interfaces.events import ErrorCode, ErrorDomain, MessageType
from core.interfaces.port import GhostPort
from core.interfaces.source import SourceError
from core.models.caps import Caps, RAW_VIDEO_CAPS
from core.models.candidate import Rank, SelectionOutcome
from core.models.frame import VideoFrame
from core.models.state import State, StateChangeReturn
from core.registry.plugin_registry import ProviderRegistry
from modules.detect.candidates import AUTO_SOURCE_NAME, SOURCE_VIDEO_CLASSES
from modules.detect.selector import SourceSelector
from modules.sources.base import BaseVideoSource
from modules.sources.providers.fake_source import FakeSource

logger = logging.getLogger(__name__)

PLACEHOLDER_NAME = "tempsrc"


class AutoVideoSource(BaseVideoSource):
    """Wrapper video source for an automatically detected video source.

    On NULL -> READY it asks a SourceSelector for the best registered
    provider carrying the "Source" and "Video" class tags with at least
    marginal rank, installs it as its kid and points its ghost "src" port
    at the kid's port. Later state changes are forwarded to the kid.
    Going back to NULL replaces the kid with a placeholder FakeSource.

    The "filter-caps" property restricts candidates to those whose caps
    intersect it. It defaults to raw video and can only be changed in NULL.

    Example:
        src = AutoVideoSource("autovideosrc0")
        if src.set_state(State.PLAYING) != StateChangeReturn.FAILURE:
            frame = src.src_port.pull()
    """

    FACTORY_NAME = AUTO_SOURCE_NAME
    TEMPLATE_CAPS = "ANY"
    PROPERTIES = {
        "filter-caps": Caps.from_string(RAW_VIDEO_CAPS),
    }

    def __init__(
        self,
        name: Optional[str] = None,
        config: Optional[dict] = None,
        registry: Optional[ProviderRegistry] = None,
        classes: Iterable[str] = SOURCE_VIDEO_CLASSES,
        min_rank: int = Rank.MARGINAL
    ):
        """Initialize the auto source.

        Args:
            name: Instance name (None = "autovideosrc0")
            config: Initial property values (e.g., {"filter-caps": "video/x-raw-rgb"})
            registry: Provider registry (None = the global registry)
            classes: Class tags candidates must carry
            min_rank: Lowest rank considered
        """
        self._kid: Optional[BaseVideoSource] = None
        self._registry = registry
        self._classes = tuple(classes)
        self._min_rank = min_rank
        self.last_outcome: Optional[SelectionOutcome] = None
        super().__init__(name, config)
        self.src_port = GhostPort("src")
        self._reset()

    @property
    def kid(self):
        """The source currently installed behind the ghost port."""
        return self._kid

    @property
    def filter_caps(self) -> Optional[Caps]:
        return self.get_property("filter-caps")

    @filter_caps.setter
    def filter_caps(self, value) -> None:
        self.set_property("filter-caps", value)

    def _validate_property(self, key: str, value: Any) -> Any:
        if key == "filter-caps":
            if self._state != State.NULL:
                raise SourceError(
                    "filter-caps can only be set in the NULL state",
                    ErrorDomain.CORE, ErrorCode.STATE_CHANGE
                )
            return Caps.from_value(value)
        return value

    def set_bus(self, bus: Optional[MessageBus]) -> None:
        super().set_bus(bus)
        if self._kid is not None:
            self._kid.set_bus(bus)

    def _clear_kid(self) -> None:
        if self._kid is not None:
            self._kid.set_state(State.NULL)
            self._kid.release()
            self._kid = None
            self.src_port.set_target(None)

    def _reset(self) -> None:
        """Replace the kid with a disposable placeholder."""
        self._clear_kid()
        self._kid = FakeSource(PLACEHOLDER_NAME)
        self.src_port.set_target(self._kid.src_port)

    def _detect(self) -> None:
        """Run source selection and install the chosen source.

        Raises:
            SourceError: If no source, not even the fallback, could be
                         installed
        """
        self._clear_kid()

        logger.debug(f"{self.name}: creating new kid")
        selector = SourceSelector(
            self.name,
            registry=self._registry,
            filter_caps=self.filter_caps,
            classes=self._classes,
            min_rank=self._min_rank
        )
        try:
            outcome = selector.select()
        except SourceError:
            self._reset()
            raise
        self.last_outcome = outcome

        if outcome.first_error is not None:
            self.post_message(outcome.first_error)
        elif outcome.warning is not None:
            self.post_message(outcome.warning)

        self._kid = outcome.chosen
        self._kid.set_bus(self._bus)

        logger.debug(f"{self.name}: re-assigning ghost port")
        if not self.src_port.set_target(getattr(self._kid, "src_port", None)):
            self._reset()
            raise SourceError("Failed to set target port", ErrorDomain.LIBRARY, ErrorCode.INIT)

        logger.info(f"{self.name}: done changing auto video source to {self._kid.name}")

    def _change_state(self, current: State, following: State) -> StateChangeReturn:
        if (current, following) == (State.NULL, State.READY):
            self._detect()
            return StateChangeReturn.SUCCESS

        ret = self._kid.set_state(following)
        if ret == StateChangeReturn.FAILURE:
            raise SourceError(
                f"{self._kid.name} failed to change state to {following.name}",
                ErrorDomain.CORE, ErrorCode.STATE_CHANGE
            )

        if (current, following) == (State.READY, State.NULL):
            self._reset()
        return ret

    def get_caps(self) -> Caps:
        return self.src_port.get_caps()

    def create(self) -> VideoFrame:
        if self._state < State.PAUSED:
            raise SourceError(
                f"{self.name} is not streaming (state {self._state.name})",
                ErrorDomain.STREAM, ErrorCode.FAILED
            )
        return self.src_port.pull()

    def release(self) -> None:
        super().release()
        self._clear_kid()
