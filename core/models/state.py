"""Source state definitions."""

from enum import Enum, IntEnum


class State(IntEnum):
    """Lifecycle levels of a video source.

    NULL: Constructed, no resources held
    READY: Resources allocated (device opened), not streaming
    PAUSED: Streaming prepared, frames may be pulled
    PLAYING: Streaming
    """
    NULL = 1
    READY = 2
    PAUSED = 3
    PLAYING = 4


class StateChangeReturn(Enum):
    """Result of a state change request."""
    FAILURE = "failure"
    SUCCESS = "success"
    ASYNC = "async"
    NO_PREROLL = "no-preroll"


def transition_steps(current: State, target: State):
    """Yield the single-level (from, to) steps between two states."""
    step = 1 if target > current else -1
    level = current
    while level != target:
        following = State(level + step)
        yield level, following
        level = following
