"""
Camera capture through OpenCV.

Handles:
- Webcam acquisition
- Digital zoom (centre crop + resize)
- BGR -> RGBA conversion
"""

from __future__ import annotations

import time
import threading
from typing import Optional, Tuple
import numpy as np
from numpy.typing import NDArray
import cv2
from loguru import logger

from portrait_camera.capture.base import BaseCaptureSource
from portrait_camera.core.contracts import PixelBuffer
from portrait_camera.core.errors import CaptureUnavailable, CaptureTimeout


MAX_ZOOM_RATIO = 3.0


def digital_zoom(frame: NDArray[np.uint8], ratio: float) -> NDArray[np.uint8]:
    """
    Centre-crop a frame by 1 / ratio and scale it back to full size.

    Args:
        frame: H x W x C image
        ratio: Zoom ratio (>= 1.0)

    Returns:
        Zoomed frame with the same shape
    """
    if ratio <= 1.0:
        return frame

    h, w = frame.shape[:2]
    crop_w = max(1, int(round(w / ratio)))
    crop_h = max(1, int(round(h / ratio)))
    x0 = (w - crop_w) // 2
    y0 = (h - crop_h) // 2

    crop = frame[y0:y0 + crop_h, x0:x0 + crop_w]
    return cv2.resize(crop, (w, h), interpolation=cv2.INTER_LINEAR)


class CameraSource(BaseCaptureSource):
    """
    Still capture from a webcam.

    Guarantees:
    - RGBA PixelBuffer output
    - Thread-safe zoom updates
    - Failure signalled by exception, never by a stale frame
    """

    def __init__(
        self,
        device_index: int = 0,
        width: int = 1920,
        height: int = 1080,
        read_timeout_s: float = 2.0,
    ):
        """
        Initialize camera source.

        Args:
            device_index: Camera device index
            width: Requested capture width
            height: Requested capture height
            read_timeout_s: How long request_frame() retries failed reads
        """
        self.device_index = device_index
        self.width = width
        self.height = height
        self.read_timeout_s = read_timeout_s

        # State
        self._capture: Optional[cv2.VideoCapture] = None
        self._is_running = False
        self._lock = threading.Lock()

        self._zoom_ratio = 1.0
        self._frame_count = 0

    def start(self) -> bool:
        """
        Open the camera.

        Returns:
            True if started successfully
        """
        if self._is_running:
            return True

        try:
            self._capture = cv2.VideoCapture(self.device_index)

            if not self._capture.isOpened():
                logger.error(f"Failed to open camera {self.device_index}")
                return False

            self._capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
            self._capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
            # Keep the driver buffer small so a shutter press gets a fresh frame
            self._capture.set(cv2.CAP_PROP_BUFFERSIZE, 1)

            actual_width = int(self._capture.get(cv2.CAP_PROP_FRAME_WIDTH))
            actual_height = int(self._capture.get(cv2.CAP_PROP_FRAME_HEIGHT))
            logger.info(f"Camera {self.device_index} started: {actual_width}x{actual_height}")

            self._is_running = True
            return True

        except cv2.error as e:
            logger.error(f"Failed to start camera: {e}")
            return False

    def stop(self):
        """Release the camera."""
        self._is_running = False

        if self._capture is not None:
            self._capture.release()
            self._capture = None

        logger.info("Camera stopped")

    def request_frame(self) -> Optional[PixelBuffer]:
        """
        Read one frame, retrying failed reads until the timeout.

        Raises:
            CaptureUnavailable: If the camera is not started
            CaptureTimeout: If no frame could be read within read_timeout_s
        """
        if not self._is_running or self._capture is None:
            raise CaptureUnavailable(f"Camera {self.device_index} is not started")

        deadline = time.monotonic() + self.read_timeout_s
        while True:
            ret, frame = self._capture.read()
            if ret and frame is not None:
                break
            if time.monotonic() >= deadline:
                raise CaptureTimeout(
                    f"No frame from camera {self.device_index} within {self.read_timeout_s}s"
                )
            time.sleep(0.01)

        with self._lock:
            ratio = self._zoom_ratio
            self._frame_count += 1

        return PixelBuffer.from_bgr(digital_zoom(frame, ratio))

    @property
    def zoom_ratio(self) -> float:
        with self._lock:
            return self._zoom_ratio

    def set_zoom_ratio(self, ratio: float):
        """Clamp and apply a zoom ratio in [1.0, MAX_ZOOM_RATIO]."""
        with self._lock:
            self._zoom_ratio = float(min(max(ratio, 1.0), MAX_ZOOM_RATIO))
        logger.debug(f"Zoom ratio set to {self._zoom_ratio:.2f}")

    def set_zoom_from_slider(self, progress: int):
        """Map a 0-100 slider position to a zoom ratio of 1.0 to 3.0."""
        self.set_zoom_ratio(1.0 + progress / 50.0)

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def resolution(self) -> Tuple[int, int]:
        """Get actual frame size (width, height)."""
        if self._capture is not None:
            return (
                int(self._capture.get(cv2.CAP_PROP_FRAME_WIDTH)),
                int(self._capture.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            )
        return (self.width, self.height)

    def get_device_info(self) -> dict:
        return {
            "device": f"Camera {self.device_index}",
            "resolution": "{}x{}".format(*self.resolution),
            "frames_captured": self._frame_count,
        }
