"""
Still-image capture source.

Replays image files as if they were camera frames, for offline processing
of photos already on disk. Files are handed out in order and the sequence
repeats, so a single still can feed a three-frame stack.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
import cv2
from loguru import logger

from portrait_camera.capture.base import BaseCaptureSource
from portrait_camera.capture.camera_source import digital_zoom
from portrait_camera.core.contracts import PixelBuffer
from portrait_camera.core.errors import CaptureUnavailable


class ImageFileSource(BaseCaptureSource):
    """Capture source backed by image files."""

    def __init__(
        self,
        paths: Sequence[str | Path],
        zoom_ratio: float = 1.0,
        apply_zoom: bool = False,
    ):
        """
        Args:
            paths: Image files, delivered in this order
            zoom_ratio: Zoom ratio reported to the capture policy
            apply_zoom: Also crop the decoded images by the zoom ratio
        """
        self.paths: List[Path] = [Path(p) for p in paths]
        self.apply_zoom = apply_zoom

        self._zoom_ratio = max(1.0, float(zoom_ratio))
        self._index = 0
        self._lock = threading.Lock()
        self._is_running = False
        self._resolution = (0, 0)

    def start(self) -> bool:
        missing = [str(p) for p in self.paths if not p.is_file()]
        if not self.paths or missing:
            logger.error(f"Image source has no usable files (missing: {missing})")
            return False

        self._is_running = True
        logger.info(f"Image source started with {len(self.paths)} file(s)")
        return True

    def stop(self):
        self._is_running = False

    def request_frame(self) -> Optional[PixelBuffer]:
        """
        Decode the next file.

        Raises:
            CaptureUnavailable: If the source is not started or a file
                cannot be decoded
        """
        if not self._is_running:
            raise CaptureUnavailable("Image source is not started")

        with self._lock:
            path = self.paths[self._index % len(self.paths)]
            self._index += 1
            ratio = self._zoom_ratio

        frame = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if frame is None:
            raise CaptureUnavailable(f"Could not decode image {path}")

        if self.apply_zoom:
            frame = digital_zoom(frame, ratio)

        self._resolution = (frame.shape[1], frame.shape[0])
        logger.debug(f"Loaded {path.name} ({frame.shape[1]}x{frame.shape[0]})")
        return PixelBuffer.from_bgr(frame)

    @property
    def zoom_ratio(self) -> float:
        with self._lock:
            return self._zoom_ratio

    def set_zoom_ratio(self, ratio: float):
        with self._lock:
            self._zoom_ratio = max(1.0, float(ratio))

    @property
    def resolution(self) -> Tuple[int, int]:
        return self._resolution

    def get_device_info(self) -> dict:
        return {"device": "image files", "files": [str(p) for p in self.paths]}
