"""Probing of a single candidate source."""

import logging
from typing import Optional

from core.bus.message_bus import MessageBus
from core.interfaces.events import ErrorCode, ErrorDomain, Message, MessageType
from core.models.caps import Caps
from core.models.candidate import ProbeResult, SourceDescriptor
from core.models.state import State, StateChangeReturn
from modules.detect.matcher import caps_compatible
from modules.detect.naming import pretty_instance_name

logger = logging.getLogger(__name__)


class ProbeRunner:
    """Tries to bring one candidate to READY.

    Each probe creates the instance, checks its caps against the filter,
    attaches a bus owned by this attempt alone and requests READY. A
    successful instance is handed back alive; a failed or incompatible
    one is shut down and released before probe() returns. Any exception
    the candidate raises is recorded as an ERROR message instead of
    propagating.
    """

    def __init__(self, owner_name: str, filter_caps: Optional[Caps] = None):
        """Initialize the probe runner.

        Args:
            owner_name: Name of the auto source the instances are created for
            filter_caps: Acceptable output caps (None = accept anything)
        """
        self._owner_name = owner_name
        self._filter_caps = filter_caps

    def probe(self, descriptor: SourceDescriptor) -> ProbeResult:
        """Probe one candidate.

        Args:
            descriptor: Candidate to try

        Returns:
            ProbeResult holding the live instance on success, the collected
            ERROR messages on failure, or compatible=False when the caps
            filter rejected it
        """
        name = pretty_instance_name(self._owner_name, descriptor.name)

        try:
            instance = descriptor.create(name)
        except Exception as e:
            logger.warning(f"Could not create {descriptor.name}: {e}")
            return ProbeResult(candidate=descriptor)

        if instance is None:
            logger.warning(f"Factory {descriptor.name} produced no instance")
            return ProbeResult(candidate=descriptor)

        logger.debug(f"Testing {descriptor.name}")

        if self._filter_caps is not None:
            try:
                caps = instance.get_caps()
            except Exception as e:
                logger.warning(f"Could not query caps of {descriptor.name}: {e}", exc_info=True)
                self._teardown(instance)
                return ProbeResult(candidate=descriptor, errors=[self._unexpected_error(name, e)])

            logger.debug(f"Checking caps: {self._filter_caps} vs. {caps}")
            if not caps_compatible(self._filter_caps, caps):
                logger.debug("Incompatible caps")
                self._teardown(instance)
                return ProbeResult(candidate=descriptor, compatible=False)
            logger.debug("Found compatible caps")

        bus = MessageBus(f"{name}-probe")
        instance.set_bus(bus)

        raised = None
        try:
            ret = instance.set_state(State.READY)
        except Exception as e:
            logger.warning(f"{descriptor.name} raised while changing state to READY: {e}", exc_info=True)
            ret = StateChangeReturn.FAILURE
            raised = e

        if ret == StateChangeReturn.SUCCESS:
            logger.debug("This worked!")
            instance.set_bus(None)
            return ProbeResult(candidate=descriptor, instance=instance)

        errors = bus.drain(MessageType.ERROR)
        if raised is not None:
            errors.append(self._unexpected_error(name, raised))
        logger.debug(f"{descriptor.name} failed to reach READY with {len(errors)} error(s)")

        self._teardown(instance)
        bus.set_flushing(True)
        return ProbeResult(candidate=descriptor, errors=errors)

    @staticmethod
    def _unexpected_error(source_name: str, error: Exception) -> Message:
        return Message(
            type=MessageType.ERROR,
            source=source_name,
            text=f"Unexpected error: {error}",
            domain=ErrorDomain.CORE,
            code=ErrorCode.FAILED,
            debug=repr(error)
        )

    @staticmethod
    def _teardown(instance) -> None:
        """Bring a rejected instance down to NULL and release it."""
        try:
            instance.set_state(State.NULL)
        except Exception as e:
            logger.warning(f"Error shutting down {instance!r}: {e}", exc_info=True)
        try:
            instance.release()
        except Exception as e:
            logger.warning(f"Error releasing {instance!r}: {e}", exc_info=True)
