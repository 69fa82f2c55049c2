"""
Test doubles for the pipeline's external collaborators.
"""

from __future__ import annotations

import threading
import time
from types import SimpleNamespace
from typing import List, Optional, Sequence, Tuple
import numpy as np

from portrait_camera.capture.base import BaseCaptureSource
from portrait_camera.core.contracts import PixelBuffer, SegmentationMask
from portrait_camera.persistence.photo_writer import PhotoWriter
from portrait_camera.segmentation.base import BaseSegmenter


def solid(width: int, height: int, color=(0, 0, 0, 255)) -> PixelBuffer:
    return PixelBuffer.blank(width, height, color)


def random_image(width: int, height: int, seed: int = 0, opaque: bool = True) -> PixelBuffer:
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    if opaque:
        pixels[:, :, 3] = 255
    return PixelBuffer(pixels)


class FakeCaptureSource(BaseCaptureSource):
    """Hands out queued frames in order, then None."""

    def __init__(self, frames: Sequence[Optional[PixelBuffer]] = (), zoom_ratio: float = 1.0,
                 error: Optional[Exception] = None, start_ok: bool = True):
        self.frames: List[Optional[PixelBuffer]] = list(frames)
        self.error = error
        self.start_ok = start_ok
        self.requests = 0
        self.started = False
        self._zoom_ratio = zoom_ratio

    def start(self) -> bool:
        self.started = self.start_ok
        return self.start_ok

    def stop(self) -> None:
        self.started = False

    def request_frame(self) -> Optional[PixelBuffer]:
        self.requests += 1
        if self.error is not None:
            raise self.error
        if not self.frames:
            return None
        return self.frames.pop(0)

    @property
    def zoom_ratio(self) -> float:
        return self._zoom_ratio

    def set_zoom_ratio(self, ratio: float) -> None:
        self._zoom_ratio = ratio

    @property
    def resolution(self) -> Tuple[int, int]:
        return (0, 0)


class BlockingCaptureSource(FakeCaptureSource):
    """Delivers the first frame, then blocks until released."""

    def __init__(self, frame: PixelBuffer, zoom_ratio: float = 3.0):
        super().__init__([frame], zoom_ratio=zoom_ratio)
        self.blocked = threading.Event()
        self.release = threading.Event()

    def request_frame(self) -> Optional[PixelBuffer]:
        if self.requests == 0:
            self.requests += 1
            return self.frames[0]
        self.requests += 1
        self.blocked.set()
        self.release.wait(timeout=5.0)
        return self.frames[0]


class FakeSegmenter(BaseSegmenter):
    """Returns a constant mask, optionally at a fixed size."""

    def __init__(self, value: int = 255, mask_size: Optional[Tuple[int, int]] = None,
                 error: Optional[Exception] = None):
        self.value = value
        self.mask_size = mask_size
        self.error = error
        self.calls: List[Tuple[Tuple[int, int], int]] = []
        self.initialized = False
        self.closed = False

    def initialize(self) -> bool:
        self.initialized = True
        return True

    def shutdown(self) -> None:
        self.closed = True

    def segment(self, image: PixelBuffer, target_width: int) -> SegmentationMask:
        self.calls.append((image.size, target_width))
        if self.error is not None:
            raise self.error
        width, height = self.mask_size or image.size
        return SegmentationMask.filled(width, height, self.value)


class SlowPhotoWriter(PhotoWriter):
    """PhotoWriter whose staging step takes a while, with progress events."""

    def __init__(self, output_dir, delay_s: float = 0.3):
        super().__init__(output_dir)
        self.delay_s = delay_s
        self.staging_started = threading.Event()
        self.staging_done = threading.Event()

    def stage(self, image: PixelBuffer, filename: str):
        self.staging_started.set()
        try:
            time.sleep(self.delay_s)
            return super().stage(image, filename)
        finally:
            self.staging_done.set()


class FakeSelfieGraph:
    """Stands in for a MediaPipe graph and records overlapping process() calls."""

    def __init__(self, value: float = 1.0, delay_s: float = 0.05, mask_missing: bool = False,
                 error: Optional[Exception] = None):
        self.value = value
        self.delay_s = delay_s
        self.mask_missing = mask_missing
        self.error = error
        self.calls = 0
        self.active = 0
        self.max_active = 0
        self.closed = False
        self._guard = threading.Lock()

    def process(self, rgb):
        with self._guard:
            self.calls += 1
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            time.sleep(self.delay_s)
            if self.error is not None:
                raise self.error
            if self.mask_missing:
                return SimpleNamespace(segmentation_mask=None)
            mask = np.full(rgb.shape[:2], self.value, dtype=np.float32)
            return SimpleNamespace(segmentation_mask=mask)
        finally:
            with self._guard:
                self.active -= 1

    def close(self):
        self.closed = True
