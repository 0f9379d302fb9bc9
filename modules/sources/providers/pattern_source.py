"""Test pattern video source."""

import logging
import time
from typing import Any, Dict, Optional, Tuple
from PIL import Image, ImageDraw

from core.interfaces.events import ErrorCode, ErrorDomain
from core.interfaces.source import SourceError
from core.models.caps import Caps
from core.models.frame import VideoFrame
from modules.sources.base import BaseVideoSource

logger = logging.getLogger(__name__)

# 75% SMPTE color bars, left to right
SMPTE_BARS = [
    (192, 192, 192),
    (192, 192, 0),
    (0, 192, 192),
    (0, 192, 0),
    (192, 0, 192),
    (192, 0, 0),
    (0, 0, 192),
]

SOLID_COLORS: Dict[str, Tuple[int, int, int]] = {
    "black": (0, 0, 0),
    "white": (255, 255, 255),
    "red": (255, 0, 0),
    "green": (0, 255, 0),
    "blue": (0, 0, 255),
}

PATTERNS = ["smpte", "checkers"] + list(SOLID_COLORS)


def render_pattern(pattern: str, width: int, height: int) -> Image.Image:
    """Render a test pattern.

    Args:
        pattern: One of PATTERNS
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        RGB PIL image
    """
    if pattern in SOLID_COLORS:
        return Image.new("RGB", (width, height), SOLID_COLORS[pattern])

    image = Image.new("RGB", (width, height))
    draw = ImageDraw.Draw(image)

    if pattern == "smpte":
        for i, color in enumerate(SMPTE_BARS):
            left = i * width // len(SMPTE_BARS)
            right = (i + 1) * width // len(SMPTE_BARS)
            draw.rectangle([left, 0, right - 1, height - 1], fill=color)
    elif pattern == "checkers":
        square = 8
        for y in range(0, height, square):
            for x in range(0, width, square):
                if (x // square + y // square) % 2 == 0:
                    draw.rectangle([x, y, x + square - 1, y + square - 1], fill=(255, 255, 255))
    else:
        raise ValueError(f"Unknown pattern: {pattern}")

    return image


class PatternSource(BaseVideoSource):
    """Source generating test patterns with Pillow.

    Always available, so it has no autoplugging rank by default; raise
    its rank in the configuration to use it as a detection candidate.
    """

    FACTORY_NAME = "videotestsrc"
    TEMPLATE_CAPS = (
        "video/x-raw-rgb, width=[ 1, 2147483647 ], height=[ 1, 2147483647 ]; "
        "video/x-raw-yuv, width=[ 1, 2147483647 ], height=[ 1, 2147483647 ]"
    )
    PROPERTIES = {
        "pattern": "smpte",
        "width": 320,
        "height": 240,
        "framerate": 30,
        "is-live": False,
    }

    def __init__(self, name=None, config=None):
        self._image: Optional[Image.Image] = None
        super().__init__(name, config)

    @property
    def IS_LIVE(self) -> bool:
        return bool(self.get_property("is-live"))

    def _validate_property(self, key: str, value: Any) -> Any:
        if key == "pattern" and value not in PATTERNS:
            raise SourceError(
                f"Unknown pattern '{value}', expected one of {', '.join(PATTERNS)}",
                ErrorDomain.CORE, ErrorCode.SETTINGS
            )
        if key in ("width", "height", "framerate"):
            value = int(value)
            if value <= 0:
                raise SourceError(f"Invalid {key}: {value}", ErrorDomain.CORE, ErrorCode.SETTINGS)
        return value

    def _open(self) -> None:
        self._image = render_pattern(
            self.get_property("pattern"),
            self.get_property("width"),
            self.get_property("height")
        )
        logger.debug(f"{self.name} rendered {self.get_property('pattern')} pattern")

    def _close(self) -> None:
        self._image = None

    def _current_caps(self) -> Caps:
        return Caps.from_string(
            f"video/x-raw-rgb, format=RGB, width={self.get_property('width')}, "
            f"height={self.get_property('height')}"
        )

    def _create(self) -> VideoFrame:
        return VideoFrame.from_image(
            self._image.copy(),
            timestamp=time.time(),
            sequence=self._sequence,
            provider=self.FACTORY_NAME,
            pattern=self.get_property("pattern"),
        )
