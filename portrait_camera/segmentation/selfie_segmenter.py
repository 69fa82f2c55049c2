"""
Person segmentation using MediaPipe Selfie Segmentation.

Produces a foreground (person) score mask for portrait compositing. Images
wider than the requested target width are downscaled before inference, so
the mask comes back at that smaller resolution.
"""

from __future__ import annotations

import threading
import time
from typing import Optional, List
import numpy as np
import cv2
from loguru import logger

try:
    import mediapipe as mp
    MEDIAPIPE_AVAILABLE = True
except ImportError:
    MEDIAPIPE_AVAILABLE = False
    logger.warning("MediaPipe not available")

from portrait_camera.core.contracts import PixelBuffer, SegmentationMask
from portrait_camera.core.errors import SegmentationFailed
from portrait_camera.segmentation.base import BaseSegmenter


class SelfieSegmenter(BaseSegmenter):
    """
    Single-image person segmentation with MediaPipe.

    One instance owns one MediaPipe graph, which is not thread-safe. Calls to
    segment() from concurrent capture sessions are serialised by a lock.
    """

    def __init__(
        self,
        model_selection: int = 0,  # 0=general (256x256), 1=landscape (144x256)
    ):
        """
        Initialize selfie segmenter.

        Args:
            model_selection: MediaPipe selfie model variant
        """
        self.model_selection = model_selection

        self._selfie_segmentation = None
        self._is_initialized = False
        self._lock = threading.Lock()

        # Performance
        self._inference_times: List[float] = []

    def initialize(self) -> bool:
        """Initialize the MediaPipe model."""
        with self._lock:
            if self._is_initialized:
                return True

            if not MEDIAPIPE_AVAILABLE:
                logger.error("MediaPipe not available")
                return False

            try:
                self._selfie_segmentation = mp.solutions.selfie_segmentation.SelfieSegmentation(
                    model_selection=self.model_selection
                )
            except Exception as e:
                logger.error(f"Failed to initialize MediaPipe: {e}")
                return False

            self._is_initialized = True
        logger.info("Selfie segmentation initialized")
        return True

    def segment(self, image: PixelBuffer, target_width: int) -> SegmentationMask:
        """
        Segment the person in an image.

        Args:
            image: Image to segment
            target_width: Maximum width to run inference at

        Returns:
            Mask at inference resolution

        Raises:
            SegmentationFailed: If the model is unavailable or inference fails
        """
        if image.is_empty:
            raise SegmentationFailed("Cannot segment an empty image")

        if not self.initialize():
            raise SegmentationFailed("Segmenter not initialized")

        start_time = time.perf_counter()
        rgb = image.to_rgb()

        if target_width > 0 and image.width > target_width:
            target_height = max(1, round(target_width * image.height / image.width))
            rgb = cv2.resize(rgb, (target_width, target_height), interpolation=cv2.INTER_AREA)

        with self._lock:
            if self._selfie_segmentation is None:
                raise SegmentationFailed("Segmenter was shut down")
            try:
                results = self._selfie_segmentation.process(rgb)
            except Exception as e:
                raise SegmentationFailed(f"Selfie segmentation failed: {e}") from e

            if results.segmentation_mask is None:
                raise SegmentationFailed("Selfie segmentation returned no mask")

            mask = SegmentationMask.from_probabilities(results.segmentation_mask)

            inference_ms = (time.perf_counter() - start_time) * 1000
            self._inference_times.append(inference_ms)
            if len(self._inference_times) > 30:
                self._inference_times.pop(0)

        logger.debug(f"Segmented {mask.width}x{mask.height} mask in {inference_ms:.1f}ms")
        return mask

    def shutdown(self):
        """Release the MediaPipe graph."""
        with self._lock:
            if self._selfie_segmentation is not None:
                self._selfie_segmentation.close()
                self._selfie_segmentation = None
            self._is_initialized = False
        logger.info("Selfie segmenter shut down")

    @property
    def average_inference_ms(self) -> Optional[float]:
        with self._lock:
            if not self._inference_times:
                return None
            return float(np.mean(self._inference_times))
