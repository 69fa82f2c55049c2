"""
Multi-frame noise reduction.

Averages a burst of equally sized frames pixel by pixel. Frames are assumed
to be spatially aligned: there is no motion compensation, so subject motion
between frames shows up as ghosting.
"""

from __future__ import annotations

import time
from typing import Sequence
import numpy as np
from loguru import logger

from portrait_camera.core.contracts import PixelBuffer
from portrait_camera.core.errors import DimensionMismatch, EmptyInput


class FrameStackAccumulator:
    """
    Unweighted temporal average of a frame burst.

    Output channels are the per-channel mean rounded half up, alpha is
    always opaque.
    """

    def accumulate(self, frames: Sequence[PixelBuffer]) -> PixelBuffer:
        """
        Average frames into a new buffer.

        Args:
            frames: Ordered, non-empty sequence of frames of identical size

        Returns:
            Averaged frame

        Raises:
            EmptyInput: If frames is empty
            DimensionMismatch: If any frame size differs from the first
        """
        if not frames:
            raise EmptyInput("Cannot stack an empty frame sequence")

        start_time = time.perf_counter()
        first = frames[0]

        for index, frame in enumerate(frames[1:], start=1):
            if not frame.same_size(first):
                raise DimensionMismatch(
                    f"Frame {index} is {frame.width}x{frame.height}, "
                    f"expected {first.width}x{first.height}"
                )

        # Wide accumulator: n * 255 never overflows int64
        total = np.zeros((first.height, first.width, 3), dtype=np.int64)
        for frame in frames:
            total += frame.pixels[:, :, :3]

        n = len(frames)
        mean = (2 * total + n) // (2 * n)

        out = np.empty((first.height, first.width, 4), dtype=np.uint8)
        out[:, :, :3] = np.clip(mean, 0, 255)
        out[:, :, 3] = 255

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.debug(
            f"Stacked {n} frames {first.width}x{first.height} in {elapsed_ms:.1f}ms"
        )
        return PixelBuffer(out)
