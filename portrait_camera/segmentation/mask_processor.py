"""
Mask Processing Utilities.

Handles:
- Resampling masks to the compositing resolution
- Foreground selection by hard threshold
- Coverage and bounding box statistics for logging
"""

from __future__ import annotations

from typing import Optional, Tuple
import numpy as np
from numpy.typing import NDArray
import cv2
from loguru import logger

from portrait_camera.core.contracts import SegmentationMask
from portrait_camera.core.errors import DimensionMismatch


_INTERPOLATION = {
    "nearest": cv2.INTER_NEAREST,
    "bilinear": cv2.INTER_LINEAR,
}


class MaskProcessor:
    """
    Processor for segmentation masks.

    Masks arrive at the segmentation model's resolution and are resampled
    with ratio target_width / mask_width, target_height / mask_height.
    """

    def __init__(
        self,
        threshold: int = 128,
        interpolation: str = "bilinear",
    ):
        """
        Initialize mask processor.

        Args:
            threshold: Scores strictly above this are foreground
            interpolation: "nearest" or "bilinear" resampling
        """
        if interpolation not in _INTERPOLATION:
            available = ", ".join(_INTERPOLATION)
            raise ValueError(f"Unknown interpolation '{interpolation}'. Available: {available}")

        self.threshold = threshold
        self.interpolation = interpolation

    def resample(
        self,
        mask: SegmentationMask,
        width: int,
        height: int,
    ) -> NDArray[np.uint8]:
        """
        Resample a mask to width x height.

        Returns:
            height x width score array (a copy when no resampling is needed)

        Raises:
            DimensionMismatch: If the mask or the target has a zero dimension
        """
        if mask.width == 0 or mask.height == 0:
            raise DimensionMismatch(f"Cannot resample an empty {mask.width}x{mask.height} mask")
        if width <= 0 or height <= 0:
            raise DimensionMismatch(f"Cannot resample a mask to {width}x{height}")

        if mask.size == (width, height):
            return mask.values.copy()

        logger.debug(
            f"Resampling mask {mask.width}x{mask.height} -> {width}x{height} "
            f"({self.interpolation})"
        )
        return cv2.resize(
            mask.values,
            (width, height),
            interpolation=_INTERPOLATION[self.interpolation],
        )

    def foreground(self, scores: NDArray[np.uint8]) -> NDArray[np.bool_]:
        """Boolean foreground selection from a score array."""
        return scores > self.threshold

    def coverage(self, scores: NDArray[np.uint8]) -> float:
        """Fraction of pixels selected as foreground."""
        if scores.size == 0:
            return 0.0
        return float(np.count_nonzero(self.foreground(scores))) / scores.size

    def mask_to_bbox(
        self,
        scores: NDArray[np.uint8],
    ) -> Optional[Tuple[int, int, int, int]]:
        """
        Extract the foreground bounding box.

        Returns:
            Tuple of (x_min, y_min, x_max, y_max) or None if nothing is selected
        """
        selected = self.foreground(scores)
        rows = np.any(selected, axis=1)
        cols = np.any(selected, axis=0)

        if not rows.any() or not cols.any():
            return None

        y_min, y_max = np.where(rows)[0][[0, -1]]
        x_min, x_max = np.where(cols)[0][[0, -1]]

        return (int(x_min), int(y_min), int(x_max), int(y_max))
