"""Video4Linux2 camera source."""

import logging
import os
import select
import stat
import time
from pathlib import Path
from typing import Any, Optional

from core.interfaces.events import ErrorCode, ErrorDomain
from core.interfaces.source import SourceError
from core.models.caps import Caps
from core.models.frame import VideoFrame
from modules.sources.base import BaseVideoSource

logger = logging.getLogger(__name__)

SYSFS_VIDEO4LINUX = Path("/sys/class/video4linux")


class V4l2Source(BaseVideoSource):
    """Source reading frames from a V4L2 device node.

    Opening the device is what decides whether the source is usable: the
    node must exist, be a character device and be openable read/write.
    Frames are read with the read() I/O method, blocksize bytes at a time.
    """

    FACTORY_NAME = "v4l2src"
    TEMPLATE_CAPS = "video/x-raw-yuv; video/x-raw-rgb; image/jpeg"
    IS_LIVE = True
    PROPERTIES = {
        "device": "/dev/video0",
        "blocksize": 614400,
        "timeout": 2.0,
    }

    def __init__(self, name=None, config=None):
        self._fd: Optional[int] = None
        self.device_name: Optional[str] = None
        super().__init__(name, config)

    def _validate_property(self, key: str, value: Any) -> Any:
        if key == "blocksize":
            value = int(value)
            if value <= 0:
                raise SourceError(f"Invalid blocksize: {value}", ErrorDomain.CORE, ErrorCode.SETTINGS)
        elif key == "timeout":
            value = float(value)
        elif key == "device":
            value = str(value)
        return value

    def _open(self) -> None:
        device = Path(self.get_property("device"))

        try:
            st = device.stat()
        except OSError as e:
            raise SourceError(
                f"Cannot identify device '{device}'.",
                ErrorDomain.RESOURCE, ErrorCode.NOT_FOUND,
                debug=f"system error: {e.strerror}"
            )

        if not stat.S_ISCHR(st.st_mode):
            raise SourceError(
                f"This isn't a device '{device}'.",
                ErrorDomain.RESOURCE, ErrorCode.NOT_FOUND
            )

        try:
            self._fd = os.open(str(device), os.O_RDWR | os.O_NONBLOCK)
        except OSError as e:
            raise SourceError(
                f"Could not open device '{device}' for reading and writing.",
                ErrorDomain.RESOURCE, ErrorCode.OPEN_READ_WRITE,
                debug=f"system error: {e.strerror}"
            )

        self.device_name = self._read_device_name(device)
        logger.info(f"Opened V4L2 device {device} ({self.device_name or 'unknown'})")

    @staticmethod
    def _read_device_name(device: Path) -> Optional[str]:
        name_file = SYSFS_VIDEO4LINUX / device.name / "name"
        try:
            return name_file.read_text().strip()
        except OSError:
            return None

    def _close(self) -> None:
        if self._fd is not None:
            try:
                os.close(self._fd)
            except OSError as e:
                logger.warning(f"Error closing {self.get_property('device')}: {e}")
            finally:
                self._fd = None
                self.device_name = None

    def _create(self) -> VideoFrame:
        device = self.get_property("device")
        readable, _, _ = select.select([self._fd], [], [], self.get_property("timeout"))
        if not readable:
            raise SourceError(
                f"Timeout reading from device '{device}'.",
                ErrorDomain.RESOURCE, ErrorCode.READ
            )
        try:
            data = os.read(self._fd, self.get_property("blocksize"))
        except OSError as e:
            raise SourceError(
                f"Error reading {self.get_property('blocksize')} bytes from device '{device}'.",
                ErrorDomain.RESOURCE, ErrorCode.READ,
                debug=f"system error: {e.strerror}"
            )

        return VideoFrame(
            data=data,
            caps=Caps.from_string("video/x-raw-yuv"),
            timestamp=time.time(),
            sequence=self._sequence,
            metadata={"provider": self.FACTORY_NAME, "device": device, "device_name": self.device_name},
        )
