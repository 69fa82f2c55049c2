"""
Core data contracts and error taxonomy.

Pipeline paths (selected per shutter action):
1. STACKED   - zoom >= 2x: average N frames, then sharpen
2. PORTRAIT  - portrait mode: segment, blur background, composite
3. PLAIN     - single frame passed through unchanged
"""

from .contracts import (
    PixelBuffer,
    SegmentationMask,
    CaptureSession,
    CapturePath,
    CaptureResult,
    PipelineState,
)
from .errors import (
    PipelineError,
    DimensionMismatch,
    EmptyInput,
    InvalidRadius,
    InvalidZoom,
    CaptureUnavailable,
    CaptureTimeout,
    SegmentationFailed,
)
