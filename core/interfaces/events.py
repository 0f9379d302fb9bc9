"""Message definitions for source message buses."""

from enum import Enum
from dataclasses import dataclass
from typing import Optional
import time


class MessageType(Enum):
    """Enumeration of message types a source can post."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    STATE_CHANGED = "state-changed"


class ErrorDomain(Enum):
    """Broad area an error or warning belongs to."""

    CORE = "core"
    LIBRARY = "library"
    RESOURCE = "resource"
    STREAM = "stream"


class ErrorCode(Enum):
    """Specific error codes within the domains."""

    FAILED = "failed"
    STATE_CHANGE = "state-change"
    NEGOTIATION = "negotiation"
    INIT = "init"
    SETTINGS = "settings"
    NOT_FOUND = "not-found"
    BUSY = "busy"
    OPEN_READ = "open-read"
    OPEN_READ_WRITE = "open-read-write"
    READ = "read"


@dataclass
class Message:
    """Represents a message posted by a source.

    Attributes:
        type: The type of message
        source: Name of the source instance that posted it
        text: Human readable message
        domain: Error domain (errors and warnings)
        code: Error code within the domain
        debug: Additional debugging details
        timestamp: Unix timestamp when message was created
    """
    type: MessageType
    source: str
    text: str = ""
    domain: ErrorDomain = ErrorDomain.CORE
    code: ErrorCode = ErrorCode.FAILED
    debug: Optional[str] = None
    timestamp: float = None

    def __post_init__(self):
        """Set timestamp if not provided."""
        if self.timestamp is None:
            self.timestamp = time.time()

    def __str__(self) -> str:
        text = f"{self.type.value} from {self.source}: {self.text}"
        if self.debug:
            text += f" ({self.debug})"
        return text
