"""
Pipeline Orchestrator.

Executes one shutter action in strict order:

1. Read the zoom ratio from the capture source
2. Build a CaptureSession
3. Run the capture policy (acquire frames, enhance)
4. Commit the final image to storage (once, after the pipeline completes)
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Optional
from loguru import logger

from portrait_camera.capture.base import BaseCaptureSource
from portrait_camera.config import PipelineConfig
from portrait_camera.core.contracts import (
    CaptureResult,
    CaptureSession,
    PipelineState,
)
from portrait_camera.core.errors import PipelineError
from portrait_camera.enhancement.box_blur import BoxBlurEngine
from portrait_camera.enhancement.mask_compositor import MaskCompositor
from portrait_camera.persistence.photo_writer import PhotoWriter
from portrait_camera.pipeline.capture_policy import CapturePolicy
from portrait_camera.segmentation.base import BaseSegmenter
from portrait_camera.segmentation.mask_processor import MaskProcessor


class PipelineOrchestrator:
    """
    Main pipeline orchestrator.

    Guarantees:
    - One CaptureSession per shutter action, no state shared between them
    - Failures are recorded, logged and re-raised; nothing is written
    - Storage is touched only with a fully processed image
    """

    def __init__(
        self,
        source: BaseCaptureSource,
        segmenter: Optional[BaseSegmenter] = None,
        config: Optional[PipelineConfig] = None,
        writer: Optional[PhotoWriter] = None,
    ):
        """
        Initialize pipeline orchestrator.

        Args:
            source: Capture source
            segmenter: Segmentation service for the portrait path
            config: Pipeline configuration
            writer: Persistence collaborator; None keeps results in memory
        """
        self.config = config or PipelineConfig()
        self._source = source
        self._segmenter = segmenter
        self._writer = writer

        self._state = PipelineState()

        compositor = MaskCompositor(
            segmenter=segmenter,
            blur_engine=BoxBlurEngine(),
            mask_processor=MaskProcessor(
                threshold=self.config.mask_threshold,
                interpolation=self.config.mask_interpolation,
            ),
            blur_radius=self.config.blur_radius,
            segmentation_width=self.config.segmentation_width,
            separable_blur=self.config.separable_blur,
        )
        self._policy = CapturePolicy(source, compositor, self.config)

        logger.info("Pipeline orchestrator initialized")

    def start(self) -> bool:
        """
        Start the capture source and segmentation service.

        Returns:
            True if the capture source started
        """
        if self._segmenter is not None and not self._segmenter.initialize():
            logger.warning("Segmentation service initialization failed, portrait mode will fail")

        if not self._source.start():
            logger.error("Failed to start capture source")
            return False

        logger.info("Pipeline started")
        return True

    def stop(self):
        """Stop the pipeline."""
        self._source.stop()
        if self._segmenter is not None:
            self._segmenter.shutdown()
        logger.info("Pipeline stopped")

    async def take_picture(self, portrait_enabled: bool = False) -> CaptureResult:
        """
        Run one shutter action.

        Args:
            portrait_enabled: Portrait mode toggle

        Returns:
            CaptureResult; saved_path is set when a writer is configured

        Raises:
            PipelineError: Any capture, segmentation or structural failure
            OSError: If the photo could not be written
            asyncio.CancelledError: If the caller abandoned the capture;
                nothing is written
        """
        start_time = time.perf_counter()

        try:
            session = CaptureSession(
                zoom_ratio=self._source.zoom_ratio,
                portrait_enabled=portrait_enabled,
            )
            result = await self._policy.run(session)

            if self._writer is not None:
                result.saved_path = str(await self._persist(result))

        except (PipelineError, OSError) as e:
            self._record_failure(f"{type(e).__name__}: {e}")
            raise
        except asyncio.CancelledError:
            self._record_failure("Cancelled")
            raise

        result.total_latency_ms = (time.perf_counter() - start_time) * 1000
        self._record_success(result)
        return result

    async def _persist(self, result: CaptureResult) -> Path:
        """
        Stage the photo on a worker thread, then commit it on the event loop.

        The commit has no suspension point, so a cancelled capture is either
        fully committed before the cancel lands or never committed at all.
        """
        filename = self._writer.filename_for(result.path)
        staging = asyncio.ensure_future(
            asyncio.to_thread(self._writer.stage, result.output, filename)
        )

        try:
            staged = await asyncio.shield(staging)
        except asyncio.CancelledError:
            # The worker thread cannot be interrupted; drop its file once it finishes
            staging.add_done_callback(self._discard_staged)
            raise

        return self._writer.commit(staged)

    def _discard_staged(self, staging: asyncio.Future):
        if staging.cancelled() or staging.exception() is not None:
            return
        self._writer.discard(staging.result())

    def take_picture_blocking(self, portrait_enabled: bool = False) -> CaptureResult:
        """Synchronous wrapper for callers without an event loop."""
        return asyncio.run(self.take_picture(portrait_enabled))

    def _record_success(self, result: CaptureResult):
        self._state.captures_completed += 1
        self._state.consecutive_failures = 0
        self._state.last_path = result.path
        self._state.last_latency_ms = result.total_latency_ms

        logger.info(
            f"Capture {result.session_id} done: {result.path.value}, "
            f"{result.frames_used} frame(s), {result.output.width}x{result.output.height}, "
            f"{result.total_latency_ms:.0f}ms"
        )

    def _record_failure(self, reason: str):
        self._state.captures_failed += 1
        self._state.consecutive_failures += 1
        self._state.last_failure_reason = reason
        logger.error(f"Capture failed: {reason}")

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def policy(self) -> CapturePolicy:
        return self._policy
