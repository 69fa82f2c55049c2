"""
Portrait-mode background blur.

The background is a box-blurred copy of the image; foreground pixels (mask
score above the threshold) are copied back from the sharp source. The
selection is a hard threshold, so the foreground/background seam stays
visible: there is no feathering.
"""

from __future__ import annotations

import time
from typing import Optional, Tuple
import numpy as np
import cv2
from loguru import logger

from portrait_camera.core.contracts import PixelBuffer, SegmentationMask
from portrait_camera.core.errors import DimensionMismatch, SegmentationFailed
from portrait_camera.enhancement.box_blur import BoxBlurEngine
from portrait_camera.segmentation.base import BaseSegmenter
from portrait_camera.segmentation.mask_processor import MaskProcessor


class MaskCompositor:
    """
    Mask-guided foreground/background compositor.

    Blur uses the full 2-D separable box blur by default; pass
    separable_blur=False for the horizontal-only pass.
    """

    def __init__(
        self,
        segmenter: Optional[BaseSegmenter] = None,
        blur_engine: Optional[BoxBlurEngine] = None,
        mask_processor: Optional[MaskProcessor] = None,
        blur_radius: int = 15,
        segmentation_width: int = 640,
        separable_blur: bool = True,
    ):
        """
        Initialize compositor.

        Args:
            segmenter: Segmentation service used by render_portrait()
            blur_engine: Background blur
            mask_processor: Mask resampling and threshold (default threshold 128)
            blur_radius: Default background blur radius
            segmentation_width: Width the image is downscaled to before segmentation
            separable_blur: 2-D blur (True) or horizontal pass only (False)
        """
        self.segmenter = segmenter
        self.blur_engine = blur_engine or BoxBlurEngine()
        self.mask_processor = mask_processor or MaskProcessor()
        self.blur_radius = blur_radius
        self.segmentation_width = segmentation_width
        self.separable_blur = separable_blur

    def composite(
        self,
        src: PixelBuffer,
        mask: SegmentationMask,
        blur_radius: int,
        output_size: Optional[Tuple[int, int]] = None,
    ) -> PixelBuffer:
        """
        Composite the sharp foreground over a blurred background.

        Args:
            src: Image at compositing resolution
            mask: Foreground scores, any resolution
            blur_radius: Background blur radius (> 0)
            output_size: (width, height) to resample the result to, if it
                differs from the compositing resolution

        Returns:
            New composited buffer

        Raises:
            DimensionMismatch: If src or mask has a zero dimension
            InvalidRadius: If blur_radius is not positive
        """
        if src.is_empty:
            raise DimensionMismatch(f"Cannot composite an empty {src.width}x{src.height} image")

        start_time = time.perf_counter()

        scores = self.mask_processor.resample(mask, src.width, src.height)
        blurred = self.blur_engine.blur(src, blur_radius, separable=self.separable_blur)

        output = blurred.pixels.copy()
        foreground = self.mask_processor.foreground(scores)
        output[foreground] = src.pixels[foreground]

        if output_size is not None and output_size != src.size:
            width, height = output_size
            if width <= 0 or height <= 0:
                raise DimensionMismatch(f"Cannot resample output to {width}x{height}")
            output = cv2.resize(output, (width, height), interpolation=cv2.INTER_LINEAR)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            f"Composited {src.width}x{src.height} r={blur_radius} "
            f"foreground={self.mask_processor.coverage(scores):.1%} "
            f"bbox={self.mask_processor.mask_to_bbox(scores)} in {elapsed_ms:.1f}ms"
        )
        return PixelBuffer(np.ascontiguousarray(output))

    def render_portrait(
        self,
        src: PixelBuffer,
        blur_radius: Optional[int] = None,
    ) -> PixelBuffer:
        """
        Full portrait path: downscale, segment, composite, upscale.

        Blocks on the segmentation service; never call on the event loop.

        Args:
            src: Captured image at original resolution
            blur_radius: Overrides the default blur radius

        Returns:
            Portrait image at the original resolution

        Raises:
            SegmentationFailed: If no segmenter is configured or it fails
        """
        if self.segmenter is None:
            raise SegmentationFailed("No segmentation service configured")
        if src.is_empty:
            raise DimensionMismatch(f"Cannot composite an empty {src.width}x{src.height} image")

        radius = self.blur_radius if blur_radius is None else blur_radius
        working = self._downscale(src)

        mask = self.segmenter.segment(working, self.segmentation_width)
        logger.debug(f"Mask {mask.width}x{mask.height} for {working.width}x{working.height} image")

        return self.composite(working, mask, radius, output_size=src.size)

    def _downscale(self, src: PixelBuffer) -> PixelBuffer:
        """Scale src to the segmentation width, keeping aspect ratio."""
        if self.segmentation_width <= 0 or src.width <= self.segmentation_width:
            return src

        width = self.segmentation_width
        height = max(1, int(width * src.height / src.width))
        scaled = cv2.resize(np.ascontiguousarray(src.pixels), (width, height), interpolation=cv2.INTER_LINEAR)
        return PixelBuffer(scaled)
