"""Selection of the best available video source."""

import logging
from typing import Callable, Iterable, List, Optional

from core.interfaces.events import ErrorCode, ErrorDomain, Message, MessageType
from core.interfaces.source import DetectionError
from core.models.caps import Caps
from core.models.candidate import Rank, SelectionOutcome, SourceDescriptor
from core.models.state import State, StateChangeReturn
from core.registry.plugin_registry import ProviderRegistry
from modules.detect.candidates import (
    AUTO_SOURCE_NAME,
    SOURCE_VIDEO_CLASSES,
    filter_candidates,
    sort_candidates,
)
from modules.detect.probe import ProbeRunner
from modules.sources.providers.fake_source import FakeSource

logger = logging.getLogger(__name__)

FALLBACK_NAME = "fake-video-src"


class SourceSelector:
    """Picks one video source for an auto source.

    Candidates are taken from the provider registry, filtered by class
    and rank, sorted and probed one after the other. The first one that
    reaches READY wins and the rest are never created. When none does, a
    placeholder FakeSource is returned together with the first error the
    candidates reported, or a "not found" warning if they reported none.

    Example:
        selector = SourceSelector("autovideosrc0", filter_caps=Caps.from_string("video/x-raw-rgb"))
        outcome = selector.select()
        outcome.chosen.set_state(State.PLAYING)
    """

    def __init__(
        self,
        owner_name: str,
        registry: Optional[ProviderRegistry] = None,
        filter_caps: Optional[Caps] = None,
        classes: Iterable[str] = SOURCE_VIDEO_CLASSES,
        min_rank: int = Rank.MARGINAL,
        fallback_factory: Callable = FakeSource
    ):
        """Initialize the selector.

        Args:
            owner_name: Name of the auto source, used to name instances
            registry: Provider registry (None = the global registry)
            filter_caps: Acceptable output caps (None = accept anything)
            classes: Class tags candidates must carry
            min_rank: Lowest rank considered
            fallback_factory: Callable creating the placeholder from a name
        """
        self._owner_name = owner_name
        self._registry = registry or ProviderRegistry()
        self._filter_caps = filter_caps
        self._classes = tuple(classes)
        self._min_rank = min_rank
        self._fallback_factory = fallback_factory

    def candidates(self) -> List[SourceDescriptor]:
        """Filtered candidates in probing order.

        The auto-detecting source is skipped whatever its rank, since
        probing it would start another detection pass.
        """
        tagged = [
            d for d in self._registry.sources_with_tags(self._classes)
            if d.name != AUTO_SOURCE_NAME
        ]
        return sort_candidates(filter_candidates(tagged, self._classes, self._min_rank))

    def select(self) -> SelectionOutcome:
        """Run one detection pass.

        Returns:
            SelectionOutcome with the chosen source at READY

        Raises:
            DetectionError: If even the fallback source cannot reach READY
        """
        runner = ProbeRunner(self._owner_name, self._filter_caps)
        errors: List[Message] = []
        tried: List[str] = []

        logger.debug("Trying to find usable video devices ...")

        for descriptor in self.candidates():
            tried.append(descriptor.name)
            result = runner.probe(descriptor)
            if result.succeeded:
                logger.info(f"Selected video source {descriptor.name} for {self._owner_name}")
                return SelectionOutcome(chosen=result.instance, tried=tried)
            errors.extend(result.errors)

        outcome = SelectionOutcome(chosen=None, used_fallback=True, tried=tried)

        # TODO: pick the most relevant error instead of the first one
        if errors:
            outcome.first_error = errors[0]
            logger.warning(f"No usable video source, first error: {errors[0]}")
        else:
            outcome.warning = Message(
                type=MessageType.WARNING,
                source=self._owner_name,
                text="Failed to find a usable video source",
                domain=ErrorDomain.RESOURCE,
                code=ErrorCode.NOT_FOUND
            )
            logger.warning("Failed to find a usable video source")

        outcome.chosen = self._create_fallback()
        return outcome

    def _create_fallback(self):
        """Create the placeholder source and bring it to READY.

        Raises:
            DetectionError: If it cannot be created or started
        """
        try:
            fallback = self._fallback_factory(FALLBACK_NAME)
        except Exception as e:
            raise DetectionError(debug=f"Could not create fallback source: {e}")
        if fallback is None:
            raise DetectionError(debug="Could not create fallback source")

        if fallback.has_property("sync"):
            fallback.set_property("sync", True)

        if fallback.set_state(State.READY) == StateChangeReturn.FAILURE:
            fallback.release()
            raise DetectionError(debug=f"{FALLBACK_NAME} failed to reach READY")

        logger.info(f"Using fallback source {FALLBACK_NAME} for {self._owner_name}")
        return fallback
