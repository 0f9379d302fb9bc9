"""Data models for video frames."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from PIL import Image

from core.models.caps import Caps


@dataclass
class VideoFrame:
    """A single frame produced by a video source.

    Attributes:
        data: Raw frame bytes as delivered by the source
        caps: Caps describing the frame format
        timestamp: Unix timestamp when the frame was produced
        sequence: Frame counter within the current streaming session
        image: Decoded PIL image, when the source produces one
        metadata: Additional metadata (provider, device, etc.)
    """
    data: bytes
    caps: Caps
    timestamp: float
    sequence: int = 0
    image: Optional[Image.Image] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.data)

    @classmethod
    def from_image(cls, image: Image.Image, timestamp: float, sequence: int = 0, **metadata) -> "VideoFrame":
        """Build an RGB frame from a PIL image."""
        if image.mode != "RGB":
            image = image.convert("RGB")
        caps = Caps.from_string(
            f"video/x-raw-rgb, format=RGB, width={image.width}, height={image.height}"
        )
        return cls(
            data=image.tobytes(),
            caps=caps,
            timestamp=timestamp,
            sequence=sequence,
            image=image,
            metadata=dict(metadata),
        )
