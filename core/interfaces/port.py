"""Output ports through which frames are pulled from sources."""

import logging
from typing import Optional

from core.interfaces.events import ErrorCode, ErrorDomain
from core.interfaces.source import SourceError
from core.models.caps import Caps

logger = logging.getLogger(__name__)


class SourcePort:
    """Output port owned by a source."""

    def __init__(self, name: str, owner):
        self.name = name
        self.owner = owner

    def get_caps(self) -> Caps:
        return self.owner.get_caps()

    def pull(self):
        """Pull the next frame from the owning source."""
        return self.owner.create()

    def __repr__(self) -> str:
        return f"<SourcePort {self.owner.name}:{self.name}>"


class GhostPort:
    """Port forwarding to the port of another source.

    A wrapper exposes a ghost port so callers keep one stable port while
    the source behind it is swapped.
    """

    def __init__(self, name: str):
        self.name = name
        self._target: Optional[SourcePort] = None

    @property
    def target(self) -> Optional[SourcePort]:
        return self._target

    def set_target(self, target: Optional[SourcePort]) -> bool:
        """Point the ghost port at a new target.

        Returns:
            True if the target was set, False if it is not a SourcePort
        """
        if target is not None and not isinstance(target, SourcePort):
            logger.error(f"Cannot target {target!r} from ghost port {self.name}")
            return False
        self._target = target
        logger.debug(f"Ghost port {self.name} now targets {target!r}")
        return True

    def get_caps(self) -> Caps:
        if self._target is None:
            return Caps.any()
        return self._target.get_caps()

    def pull(self):
        if self._target is None:
            raise SourceError(
                f"Ghost port {self.name} has no target",
                ErrorDomain.CORE, ErrorCode.NEGOTIATION
            )
        return self._target.pull()
