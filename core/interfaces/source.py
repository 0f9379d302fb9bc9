"""Interface for video source providers."""

from abc import ABC, abstractmethod
from typing import Any, Optional

from core.interfaces.events import ErrorCode, ErrorDomain
from core.models.caps import Caps
from core.models.state import State, StateChangeReturn


class IVideoSource(ABC):
    """Interface for video source providers.

    This abstract base class defines the contract the auto-detection logic
    relies on. Providers can use different backends (V4L2 devices, screen
    grabbing, generated patterns) to produce frames.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Instance name (e.g., 'autovideosrc0-actual-src-v4l2')."""
        pass

    @property
    @abstractmethod
    def state(self) -> State:
        """Current lifecycle state."""
        pass

    @abstractmethod
    def set_state(self, state: State) -> StateChangeReturn:
        """Move the source to a new lifecycle state.

        Args:
            state: Target state

        Returns:
            SUCCESS (or NO_PREROLL for live sources) when the target was
            reached, FAILURE otherwise. Failures post an ERROR message to
            the attached bus.
        """
        pass

    @abstractmethod
    def get_caps(self) -> Caps:
        """Caps the source can currently produce."""
        pass

    @abstractmethod
    def set_bus(self, bus) -> None:
        """Attach a MessageBus (None detaches)."""
        pass

    @abstractmethod
    def has_property(self, key: str) -> bool:
        pass

    @abstractmethod
    def get_property(self, key: str) -> Any:
        pass

    @abstractmethod
    def set_property(self, key: str, value: Any) -> None:
        pass

    @abstractmethod
    def create(self):
        """Produce the next VideoFrame.

        Raises:
            SourceError: If the source is not streaming or reading fails
        """
        pass

    @abstractmethod
    def release(self) -> None:
        """Shut the source down and drop its resources."""
        pass


class SourceError(Exception):
    """Exception raised when a video source operation fails.

    Attributes:
        domain: Error domain
        code: Error code within the domain
        debug: Additional debugging details
    """

    def __init__(
        self,
        message: str,
        domain: ErrorDomain = ErrorDomain.CORE,
        code: ErrorCode = ErrorCode.FAILED,
        debug: Optional[str] = None
    ):
        super().__init__(message)
        self.domain = domain
        self.code = code
        self.debug = debug


class DetectionError(SourceError):
    """Exception raised when not even the fallback source can be started."""

    def __init__(self, message: str = "Failed to find a supported video source", debug: Optional[str] = None):
        super().__init__(message, ErrorDomain.LIBRARY, ErrorCode.INIT, debug)
