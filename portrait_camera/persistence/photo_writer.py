"""
JPEG persistence for finished photos.

Writes are atomic and happen in two steps. stage() encodes the image and
writes it to a temporary file next to the target; commit() renames it into
place. A capture that fails or is cancelled between the two steps is
discarded, so no partial or abandoned photo is left behind.
"""

from __future__ import annotations

import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import cv2
from loguru import logger

from portrait_camera.core.contracts import CapturePath, PixelBuffer


@dataclass
class StagedPhoto:
    """An encoded photo written to a temporary file, not yet committed."""
    temp_path: Path
    target: Path
    width: int
    height: int


class PhotoWriter:
    """Encodes final PixelBuffers to JPEG files."""

    def __init__(
        self,
        output_dir: str | Path = "photos",
        quality: int = 92,
        prefix: str = "PortraitCam",
    ):
        """
        Args:
            output_dir: Directory photos are written to (created on demand)
            quality: JPEG quality on a 0-100 scale
            prefix: Filename prefix
        """
        if not 0 <= quality <= 100:
            raise ValueError(f"JPEG quality must be in [0, 100], got {quality}")

        self.output_dir = Path(output_dir).expanduser()
        self.quality = quality
        self.prefix = prefix

    def filename_for(self, path: CapturePath, timestamp: Optional[float] = None) -> str:
        """Build PortraitCam_<ms>.jpg (stacked: PortraitCam_SR_<ms>.jpg)."""
        millis = int((time.time() if timestamp is None else timestamp) * 1000)
        if path == CapturePath.STACKED:
            return f"{self.prefix}_SR_{millis}.jpg"
        return f"{self.prefix}_{millis}.jpg"

    def stage(self, image: PixelBuffer, filename: str) -> StagedPhoto:
        """
        Encode an image and write it to a temporary file in output_dir.

        Blocking; the orchestrator runs it on a worker thread.

        Raises:
            OSError: If encoding or writing fails
        """
        ok, encoded = cv2.imencode(
            ".jpg", image.to_bgr(), [int(cv2.IMWRITE_JPEG_QUALITY), self.quality]
        )
        if not ok:
            raise OSError(f"JPEG encoding failed for {filename}")

        self.output_dir.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=self.output_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(encoded.tobytes())
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        return StagedPhoto(Path(tmp_name), self.output_dir / filename, image.width, image.height)

    def commit(self, staged: StagedPhoto) -> Path:
        """
        Rename a staged photo into place.

        Returns:
            Path of the committed file

        Raises:
            OSError: If the rename fails (the temporary file is removed)
        """
        try:
            os.replace(staged.temp_path, staged.target)
        except OSError:
            self.discard(staged)
            raise

        logger.info(f"Saved {staged.target} ({staged.width}x{staged.height}, q={self.quality})")
        return staged.target

    def discard(self, staged: StagedPhoto):
        """Remove a staged photo that will not be committed."""
        staged.temp_path.unlink(missing_ok=True)
        logger.debug(f"Discarded staged photo for {staged.target.name}")

    def save(self, image: PixelBuffer, filename: str) -> Path:
        """
        Encode and atomically write an image in one call.

        Args:
            image: Final image at original resolution
            filename: Target file name inside output_dir

        Returns:
            Path of the written file

        Raises:
            OSError: If encoding or writing fails
        """
        return self.commit(self.stage(image, filename))
