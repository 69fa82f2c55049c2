"""
Capture Policy.

Chooses exactly one processing path per shutter action:

1. zoom >= 2x          -> STACKED:  3 frames, average, sharpen
2. portrait mode on    -> PORTRAIT: 1 frame, segment, blur background
3. otherwise           -> PLAIN:    1 frame, unchanged

Noise reduction and portrait blur are mutually exclusive: on the stacked
path the portrait flag is ignored.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional, Sequence
from loguru import logger

from portrait_camera.capture.base import BaseCaptureSource
from portrait_camera.config import PipelineConfig
from portrait_camera.core.contracts import (
    CapturePath,
    CaptureResult,
    CaptureSession,
    PixelBuffer,
)
from portrait_camera.core.errors import CaptureUnavailable, EmptyInput
from portrait_camera.enhancement.frame_stack import FrameStackAccumulator
from portrait_camera.enhancement.mask_compositor import MaskCompositor
from portrait_camera.enhancement.sharpen import SharpenFilter


class CapturePolicy:
    """
    Path selection and stage orchestration for one capture session.

    Guarantees:
    - Frames are acquired in order, exactly as many as the path needs
    - Blocking collaborator calls never run on the event loop
    - Cancelling run() discards every acquired frame
    - The caller gets a complete buffer or an exception, never a partial one
    """

    def __init__(
        self,
        source: BaseCaptureSource,
        compositor: MaskCompositor,
        config: Optional[PipelineConfig] = None,
        accumulator: Optional[FrameStackAccumulator] = None,
        sharpener: Optional[SharpenFilter] = None,
    ):
        """
        Args:
            source: Capture source frames are requested from
            compositor: Portrait compositor (owns the segmentation service)
            config: Pipeline configuration
            accumulator: Frame averaging stage
            sharpener: Post-stack sharpening stage
        """
        self.config = config or PipelineConfig()
        self._source = source
        self._compositor = compositor
        self._accumulator = accumulator or FrameStackAccumulator()
        self._sharpener = sharpener or SharpenFilter(self.config.sharpen_opacity)

    def select_path(self, session: CaptureSession) -> CapturePath:
        """Pick the processing path for a session."""
        if session.zoom_ratio >= self.config.stack_zoom_threshold:
            return CapturePath.STACKED
        if session.portrait_enabled:
            return CapturePath.PORTRAIT
        return CapturePath.PLAIN

    def frames_needed(self, path: CapturePath) -> int:
        if path == CapturePath.STACKED:
            return self.config.stack_frame_count
        return 1

    async def run(self, session: CaptureSession) -> CaptureResult:
        """
        Acquire frames and produce the final image for a session.

        Args:
            session: Shutter action to process

        Returns:
            CaptureResult with the output buffer

        Raises:
            CaptureUnavailable: If the source delivers no frame
            CaptureTimeout: Propagated from the source
            SegmentationFailed: Propagated from the segmentation service
            DimensionMismatch: If stacked frames differ in size
        """
        path = self.select_path(session)
        session.expected_frames = self.frames_needed(path)
        logger.info(
            f"Session {session.session_id}: {path.value} path "
            f"(zoom={session.zoom_ratio:.2f}, portrait={session.portrait_enabled})"
        )

        try:
            while not session.is_complete:
                frame = await asyncio.to_thread(self._source.request_frame)
                if frame is None:
                    raise CaptureUnavailable(
                        f"No frame for session {session.session_id} "
                        f"({len(session.frames)}/{session.expected_frames} acquired)"
                    )
                session.add_frame(frame)

            frames = list(session.frames)
            start_time = time.perf_counter()
            output = await asyncio.to_thread(self.process, path, frames)
            processing_ms = (time.perf_counter() - start_time) * 1000

        except asyncio.CancelledError:
            logger.warning(f"Session {session.session_id} cancelled, discarding frames")
            raise
        finally:
            session.discard()

        return CaptureResult(
            session_id=session.session_id,
            path=path,
            output=output,
            frames_used=len(frames),
            processing_time_ms=processing_ms,
        )

    def process(self, path: CapturePath, frames: Sequence[PixelBuffer]) -> PixelBuffer:
        """
        Run the stages of a path over already-acquired frames.

        CPU-bound; runs on a worker thread when called from run().
        """
        if not frames:
            raise EmptyInput(f"No frames to process on the {path.value} path")

        if path == CapturePath.STACKED:
            stacked = self._accumulator.accumulate(frames)
            return self._sharpener.sharpen(stacked)

        if path == CapturePath.PORTRAIT:
            return self._compositor.render_portrait(frames[0], self.config.blur_radius)

        # Plain path hands the captured buffer over unchanged
        return frames[0]
