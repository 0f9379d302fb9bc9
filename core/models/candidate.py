"""Data models for candidate providers and detection results."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, FrozenSet, List, Optional, Union

from core.interfaces.events import Message


class Rank(IntEnum):
    """Autoplugging ranks.

    Providers below MARGINAL are never picked automatically.
    """
    NONE = 0
    MARGINAL = 64
    SECONDARY = 128
    PRIMARY = 256


def parse_rank(value: Union[int, str]) -> int:
    """Convert a rank name ("primary") or number to an integer rank.

    Raises:
        ValueError: If the value is not a known rank name or an integer
    """
    if isinstance(value, int):
        return int(value)
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(Rank[text.upper()])
    except KeyError:
        raise ValueError(f"Unknown rank: {value!r}")


@dataclass(frozen=True)
class SourceDescriptor:
    """Registry entry describing a video source provider.

    Attributes:
        name: Unique factory name (e.g., "v4l2src")
        klass: Slash separated class string (e.g., "Source/Video")
        rank: Autoplugging rank
        factory: Callable taking an instance name and returning a source
        description: Human readable description
    """
    name: str
    klass: str
    rank: int
    factory: Callable[[str], Any] = field(compare=False, repr=False)
    description: str = ""

    @property
    def class_tags(self) -> FrozenSet[str]:
        return frozenset(tag.strip() for tag in self.klass.split("/") if tag.strip())

    def create(self, name: str):
        """Construct an instance of this provider.

        Returns:
            New source instance, or None if the factory produced nothing
        """
        return self.factory(name)


@dataclass
class ProbeResult:
    """Outcome of trying one candidate.

    Attributes:
        candidate: Descriptor that was probed
        instance: Source brought to READY, None on failure
        errors: ERROR messages posted during the attempt, in arrival order
        compatible: False when the caps filter rejected the candidate
    """
    candidate: SourceDescriptor
    instance: Any = None
    errors: List[Message] = field(default_factory=list)
    compatible: bool = True

    @property
    def succeeded(self) -> bool:
        return self.instance is not None


@dataclass
class SelectionOutcome:
    """Result of one detection pass.

    Attributes:
        chosen: The installed source (real or fallback)
        used_fallback: True if no real candidate could be used
        first_error: First error collected when every candidate failed
        warning: "Not found" warning when fallback was used without errors
        tried: Names of the candidates probed, in order
    """
    chosen: Any
    used_fallback: bool = False
    first_error: Optional[Message] = None
    warning: Optional[Message] = None
    tried: List[str] = field(default_factory=list)

    @property
    def diagnostic(self) -> Optional[Message]:
        return self.first_error or self.warning
