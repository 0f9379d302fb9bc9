"""MSS-based screen capture source."""

import logging
import time
from typing import Any
from PIL import Image
import mss

from core.interfaces.events import ErrorCode, ErrorDomain
from core.interfaces.source import SourceError
from core.models.caps import Caps
from core.models.frame import VideoFrame
from modules.sources.base import BaseVideoSource

logger = logging.getLogger(__name__)


class ScreenSource(BaseVideoSource):
    """Source grabbing a monitor using the MSS library.

    MSS (Multiple Screen Shots) is a fast, cross-platform screen capture
    library that works on Linux, macOS, and Windows. Opening fails when
    no display can be reached or the configured monitor does not exist.
    """

    FACTORY_NAME = "screensrc"
    TEMPLATE_CAPS = "video/x-raw-rgb"
    IS_LIVE = True
    PROPERTIES = {
        "monitor": 1,
    }

    def __init__(self, name=None, config=None):
        self._sct = None
        self._monitor = None
        super().__init__(name, config)

    def _validate_property(self, key: str, value: Any) -> Any:
        if key == "monitor":
            value = int(value)
        return value

    def _open(self) -> None:
        try:
            self._sct = mss.mss()
        except Exception as e:
            raise SourceError(
                "Could not open display for screen capture.",
                ErrorDomain.RESOURCE, ErrorCode.OPEN_READ,
                debug=str(e)
            )

        # Monitor 0 is all monitors combined
        monitor_id = self.get_property("monitor")
        if monitor_id < 0 or monitor_id >= len(self._sct.monitors):
            available = len(self._sct.monitors) - 1
            self._close()
            raise SourceError(
                f"Monitor {monitor_id} not found ({available} available).",
                ErrorDomain.RESOURCE, ErrorCode.NOT_FOUND
            )

        self._monitor = self._sct.monitors[monitor_id]
        logger.info(
            f"Screen source opened monitor {monitor_id}: "
            f"{self._monitor['width']}x{self._monitor['height']}"
        )

    def _close(self) -> None:
        if self._sct is not None:
            try:
                self._sct.close()
            except Exception as e:
                logger.warning(f"Error during cleanup: {e}")
            finally:
                self._sct = None
                self._monitor = None

    def _current_caps(self) -> Caps:
        return Caps.from_string(
            f"video/x-raw-rgb, format=RGB, width={self._monitor['width']}, "
            f"height={self._monitor['height']}"
        )

    def _create(self) -> VideoFrame:
        try:
            sct_img = self._sct.grab(self._monitor)
        except Exception as e:
            raise SourceError(
                "Failed to grab screen.",
                ErrorDomain.RESOURCE, ErrorCode.READ,
                debug=str(e)
            )

        image = Image.frombytes("RGB", sct_img.size, sct_img.rgb)
        return VideoFrame.from_image(
            image,
            timestamp=time.time(),
            sequence=self._sequence,
            provider=self.FACTORY_NAME,
            monitor=self.get_property("monitor"),
        )
