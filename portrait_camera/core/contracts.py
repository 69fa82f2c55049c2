"""
Core data contracts for the enhancement pipeline.

All components exchange these types:
- PixelBuffer: the RGBA image every stage reads and produces
- SegmentationMask: the foreground score map from the segmentation service
- CaptureSession: one shutter action and the frames it collected
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Sequence, Tuple
import numpy as np
from numpy.typing import NDArray

from portrait_camera.core.errors import DimensionMismatch, InvalidZoom


# ============================================================
# ENUMERATIONS
# ============================================================

class CapturePath(Enum):
    """Processing path selected for a shutter action."""
    STACKED = "stacked"
    PORTRAIT = "portrait"
    PLAIN = "plain"


# ============================================================
# CORE DATA STRUCTURES
# ============================================================

@dataclass
class PixelBuffer:
    """
    In-memory RGBA image.

    Pixels are stored row-major as an (H x W x 4) uint8 array, which is the
    same layout as a flat array of width * height RGBA pixels.

    Ownership: a buffer belongs to whichever stage currently holds it. Stages
    that return a "new" buffer never share storage with their input.
    """
    pixels: NDArray[np.uint8]  # H x W x 4 (R, G, B, A)

    def __post_init__(self):
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise DimensionMismatch(
                f"Expected H x W x 4 pixels, got shape {self.pixels.shape}"
            )
        if self.pixels.dtype != np.uint8:
            self.pixels = np.clip(self.pixels, 0, 255).astype(np.uint8)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        """Buffer size as (width, height)."""
        return (self.width, self.height)

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def same_size(self, other: PixelBuffer) -> bool:
        return self.size == other.size

    def copy(self) -> PixelBuffer:
        return PixelBuffer(self.pixels.copy())

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        color: Tuple[int, int, int, int] = (0, 0, 0, 255),
    ) -> PixelBuffer:
        """Allocate a buffer filled with a single RGBA color."""
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[:, :] = color
        return cls(pixels)

    @classmethod
    def from_flat(
        cls,
        width: int,
        height: int,
        flat: Sequence[Tuple[int, int, int, int]] | NDArray[np.uint8],
    ) -> PixelBuffer:
        """
        Build a buffer from a flat sequence of width * height RGBA pixels.

        Raises:
            DimensionMismatch: If the pixel count is not width * height
        """
        array = np.asarray(flat, dtype=np.uint8)
        if array.size != width * height * 4:
            raise DimensionMismatch(
                f"{array.size // 4} pixels given for a {width}x{height} buffer"
            )
        return cls(array.reshape(height, width, 4).copy())

    @classmethod
    def from_rgb(cls, rgb: NDArray[np.uint8]) -> PixelBuffer:
        """Wrap an RGB (H x W x 3) frame, adding an opaque alpha channel."""
        h, w = rgb.shape[:2]
        pixels = np.empty((h, w, 4), dtype=np.uint8)
        pixels[:, :, :3] = rgb
        pixels[:, :, 3] = 255
        return cls(pixels)

    @classmethod
    def from_bgr(cls, bgr: NDArray[np.uint8]) -> PixelBuffer:
        """Wrap an OpenCV BGR frame."""
        return cls.from_rgb(bgr[:, :, ::-1])

    def to_rgb(self) -> NDArray[np.uint8]:
        return np.ascontiguousarray(self.pixels[:, :, :3])

    def to_bgr(self) -> NDArray[np.uint8]:
        return np.ascontiguousarray(self.pixels[:, :, 2::-1])


@dataclass
class SegmentationMask:
    """
    Single-channel foreground score map.

    Higher values mean "foreground/person". The mask is usually produced at a
    downscaled resolution and must be resampled before compositing.
    """
    values: NDArray[np.uint8]  # mh x mw, 0-255

    def __post_init__(self):
        if self.values.ndim != 2:
            raise DimensionMismatch(
                f"Expected a 2-D mask, got shape {self.values.shape}"
            )
        if self.values.dtype != np.uint8:
            self.values = np.clip(self.values, 0, 255).astype(np.uint8)

    @property
    def width(self) -> int:
        return int(self.values.shape[1])

    @property
    def height(self) -> int:
        return int(self.values.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @classmethod
    def from_probabilities(cls, probabilities: NDArray[np.float32]) -> SegmentationMask:
        """Convert a [0, 1] confidence map to a 0-255 mask."""
        scaled = np.rint(np.clip(probabilities, 0.0, 1.0) * 255.0)
        return cls(scaled.astype(np.uint8))

    @classmethod
    def filled(cls, width: int, height: int, value: int) -> SegmentationMask:
        return cls(np.full((height, width), value, dtype=np.uint8))


@dataclass
class CaptureSession:
    """
    One shutter action.

    Lives only until the output buffer is produced; frames are dropped on
    completion or abandonment.
    """
    zoom_ratio: float
    portrait_enabled: bool = False

    # Ordered frames as they arrived from the capture source
    frames: List[PixelBuffer] = field(default_factory=list)
    expected_frames: int = 1

    session_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    started_at: float = field(default_factory=time.time)

    def __post_init__(self):
        if self.zoom_ratio < 1.0:
            raise InvalidZoom(f"Zoom ratio must be >= 1.0, got {self.zoom_ratio}")

    def add_frame(self, frame: PixelBuffer):
        """
        Append a captured frame.

        Raises:
            ValueError: If the session already holds all expected frames
        """
        if self.is_complete:
            raise ValueError(
                f"Session {self.session_id} already has {self.expected_frames} frames"
            )
        self.frames.append(frame)

    @property
    def is_complete(self) -> bool:
        return len(self.frames) >= self.expected_frames

    def discard(self):
        """Drop every frame held by the session."""
        self.frames.clear()


# ============================================================
# RESULT TYPES
# ============================================================

@dataclass
class CaptureResult:
    """Final output of one shutter action."""
    session_id: str
    path: CapturePath
    output: PixelBuffer
    frames_used: int

    # Performance
    processing_time_ms: float = 0.0
    total_latency_ms: float = 0.0

    # Set once the persistence collaborator committed the image
    saved_path: Optional[str] = None


@dataclass
class PipelineState:
    """Running counters kept by the orchestrator."""
    captures_completed: int = 0
    captures_failed: int = 0

    last_path: Optional[CapturePath] = None
    last_latency_ms: float = 0.0

    # Failure tracking
    consecutive_failures: int = 0
    last_failure_reason: Optional[str] = None
