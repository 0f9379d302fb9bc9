"""Placeholder source producing empty frames."""

import logging
import time
from typing import Any

from core.interfaces.events import ErrorCode, ErrorDomain
from core.interfaces.source import SourceError
from core.models.caps import Caps
from core.models.frame import VideoFrame
from modules.sources.base import BaseVideoSource

logger = logging.getLogger(__name__)


class FakeSource(BaseVideoSource):
    """Source that needs no device and always starts.

    Used as the placeholder behind an auto-detecting source before
    detection and as the fallback when no real source works. With sync
    enabled, create() paces frames to the configured framerate.
    """

    FACTORY_NAME = "fakesrc"
    TEMPLATE_CAPS = "ANY"
    PROPERTIES = {
        "sync": False,
        "framerate": 30,
        "num-buffers": -1,
    }

    def __init__(self, name=None, config=None):
        self._stream_start = 0.0
        super().__init__(name, config)

    def _validate_property(self, key: str, value: Any) -> Any:
        if key == "framerate":
            value = int(value)
            if value <= 0:
                raise SourceError(f"Invalid framerate: {value}", ErrorDomain.CORE, ErrorCode.SETTINGS)
        elif key == "num-buffers":
            value = int(value)
        elif key == "sync":
            value = bool(value)
        return value

    def _start(self) -> None:
        self._stream_start = time.monotonic()

    def _create(self) -> VideoFrame:
        limit = self.get_property("num-buffers")
        if 0 <= limit <= self._sequence:
            raise SourceError(f"{self.name} reached end of stream", ErrorDomain.STREAM, ErrorCode.FAILED)

        if self.get_property("sync"):
            deadline = self._stream_start + self._sequence / self.get_property("framerate")
            delay = deadline - time.monotonic()
            if delay > 0:
                time.sleep(delay)

        return VideoFrame(
            data=b"",
            caps=Caps.any(),
            timestamp=time.time(),
            sequence=self._sequence,
            metadata={"provider": self.FACTORY_NAME},
        )
