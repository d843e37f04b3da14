"""OpenCV capture and pyzbar decoding for the scan kiosk and image uploads."""

from __future__ import annotations

import io
import logging
from typing import Any, Optional

import cv2
from PIL import Image
from pyzbar.pyzbar import decode as pyzbar_decode

from .errors import CameraUnavailable

logger = logging.getLogger(__name__)


class OpenCVCamera:
    """Scoped access to a local capture device."""

    def __init__(self, index: int = 0) -> None:
        self.index = index
        self._capture: Optional[cv2.VideoCapture] = None

    def __enter__(self) -> "OpenCVCamera":
        capture = cv2.VideoCapture(self.index)
        if not capture.isOpened():
            capture.release()
            raise CameraUnavailable(f"Camera {self.index} is not available or permission was denied")
        self._capture = capture
        logger.info("Camera %s opened", self.index)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.info("Camera %s released", self.index)

    def read(self) -> Optional[Any]:
        if self._capture is None:
            return None
        ok, frame = self._capture.read()
        return frame if ok else None


def decode_frame(frame: Any) -> Optional[str]:
    """Return the payload of the first QR code in a frame, if any."""

    decoded = pyzbar_decode(frame)
    if not decoded:
        return None
    return decoded[0].data.decode("utf-8").strip() or None


def decode_image(data: bytes) -> Optional[str]:
    img = Image.open(io.BytesIO(data)).convert("RGB")
    return decode_frame(img)


__all__ = ["OpenCVCamera", "decode_frame", "decode_image"]
