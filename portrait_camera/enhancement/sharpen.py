"""
Cheap unsharp-mask approximation.

The image is drawn over itself at reduced opacity with standard
(non-premultiplied) "over" compositing. This is a contrast adjustment, not a
frequency-domain sharpen: no edges are enhanced beyond what the blend gives.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from loguru import logger

from portrait_camera.core.contracts import PixelBuffer


def composite_over(
    bottom: NDArray[np.uint8],
    top: NDArray[np.uint8],
    opacity: float = 1.0,
) -> NDArray[np.uint8]:
    """
    Draw `top` over `bottom` with a layer opacity.

    Args:
        bottom: H x W x 4 RGBA destination
        top: H x W x 4 RGBA source
        opacity: Layer opacity in [0, 1]

    Returns:
        New H x W x 4 RGBA array
    """
    a_top = top[:, :, 3:].astype(np.float32) / 255.0 * opacity
    a_bottom = bottom[:, :, 3:].astype(np.float32) / 255.0
    a_out = a_top + a_bottom * (1.0 - a_top)

    color = (
        top[:, :, :3].astype(np.float32) * a_top
        + bottom[:, :, :3].astype(np.float32) * a_bottom * (1.0 - a_top)
    )
    # Fully transparent pixels stay black
    color = np.divide(color, a_out, out=np.zeros_like(color), where=a_out > 0)

    out = np.empty(bottom.shape, dtype=np.uint8)
    out[:, :, :3] = np.clip(np.rint(color), 0, 255)
    out[:, :, 3:] = np.clip(np.rint(a_out * 255.0), 0, 255)
    return out


class SharpenFilter:
    """
    Self-blend sharpening applied after frame stacking.

    Args:
        opacity: Alpha of the second layer on a 0-255 scale (default 200)
    """

    def __init__(self, opacity: int = 200):
        if not 0 <= opacity <= 255:
            raise ValueError(f"Opacity must be in [0, 255], got {opacity}")
        self.opacity = opacity

    def sharpen(self, src: PixelBuffer) -> PixelBuffer:
        """Return a new buffer of the same size with the self-blend applied."""
        base = src.pixels.copy()
        out = composite_over(base, src.pixels, self.opacity / 255.0)
        logger.debug(f"Sharpened {src.width}x{src.height} (alpha={self.opacity})")
        return PixelBuffer(out)
