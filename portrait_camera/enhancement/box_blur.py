"""
Sliding-window box blur.

Each output pixel is the integer mean of a (2 * radius + 1) window along one
axis. Pixels outside the image repeat the nearest edge pixel (clamp/extend).
Window sums come from prefix sums, so a pass costs O(width * height)
regardless of the radius.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from loguru import logger

from portrait_camera.core.contracts import PixelBuffer
from portrait_camera.core.errors import InvalidRadius


def _window_sums(values: NDArray[np.int64], radius: int) -> NDArray[np.int64]:
    """
    Sum each row's clamped window [x - radius, x + radius].

    Args:
        values: H x W x C channel values
        radius: Window radius (> 0)

    Returns:
        H x W x C window sums
    """
    width = values.shape[1]
    x = np.arange(width)

    prefix = np.zeros((values.shape[0], width + 1, values.shape[2]), dtype=np.int64)
    prefix[:, 1:] = np.cumsum(values, axis=1)

    # In-bounds part of each window
    hi = np.minimum(x + radius, width - 1)
    lo = np.maximum(x - radius, 0)
    sums = prefix[:, hi + 1] - prefix[:, lo]

    # Out-of-bounds positions replicate the edge pixels
    left_overhang = np.maximum(radius - x, 0)[None, :, None]
    right_overhang = np.maximum(x + radius - (width - 1), 0)[None, :, None]
    sums += left_overhang * values[:, :1] + right_overhang * values[:, -1:]

    return sums


class BoxBlurEngine:
    """
    Box blur over PixelBuffers.

    Guarantees:
    - Input is never modified; every pass returns a new buffer
    - Reads only the pre-blur snapshot of each row/column
    - Alpha is forced opaque in the output
    """

    def blur_rows(self, src: PixelBuffer, radius: int) -> PixelBuffer:
        """
        Horizontal pass.

        Args:
            src: Source image
            radius: Window radius in pixels (> 0)

        Returns:
            Blurred copy of src

        Raises:
            InvalidRadius: If radius is not a positive integer
        """
        self._check_radius(radius)
        if src.is_empty:
            return src.copy()
        return PixelBuffer(self._blur_axis(src.pixels, radius))

    def blur_columns(self, src: PixelBuffer, radius: int) -> PixelBuffer:
        """Vertical pass, same algorithm as blur_rows."""
        self._check_radius(radius)
        if src.is_empty:
            return src.copy()
        transposed = src.pixels.transpose(1, 0, 2)
        blurred = self._blur_axis(transposed, radius)
        return PixelBuffer(np.ascontiguousarray(blurred.transpose(1, 0, 2)))

    def blur(
        self,
        src: PixelBuffer,
        radius: int,
        separable: bool = True,
    ) -> PixelBuffer:
        """
        Blur an image.

        Args:
            src: Source image
            radius: Window radius in pixels (> 0)
            separable: Run the horizontal pass followed by the vertical one
                (full 2-D box blur). False runs the horizontal pass only.

        Returns:
            Blurred copy of src
        """
        rows = self.blur_rows(src, radius)
        if not separable:
            return rows
        result = self.blur_columns(rows, radius)
        logger.debug(f"Box blur {src.width}x{src.height} r={radius}")
        return result

    def _blur_axis(self, pixels: NDArray[np.uint8], radius: int) -> NDArray[np.uint8]:
        window = 2 * radius + 1
        sums = _window_sums(pixels[:, :, :3].astype(np.int64), radius)

        out = np.empty(pixels.shape, dtype=np.uint8)
        out[:, :, :3] = sums // window
        out[:, :, 3] = 255
        return out

    @staticmethod
    def _check_radius(radius: int):
        if isinstance(radius, bool) or not isinstance(radius, (int, np.integer)):
            raise InvalidRadius(f"Blur radius must be an integer, got {radius!r}")
        if radius <= 0:
            raise InvalidRadius(f"Blur radius must be positive, got {radius}")
