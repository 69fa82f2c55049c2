"""
Error taxonomy for the enhancement pipeline.

Structural errors (DimensionMismatch, EmptyInput, InvalidRadius, InvalidZoom)
are contract violations by the caller and abort the capture session.
Collaborator errors (CaptureUnavailable, CaptureTimeout, SegmentationFailed)
come from the camera or the segmentation model and are propagated as a
failed capture.
"""


class PipelineError(Exception):
    """Base class for every failure raised by the pipeline."""


# ============================================================
# STRUCTURAL ERRORS
# ============================================================

class DimensionMismatch(PipelineError, ValueError):
    """Buffers of unequal (or zero) size were passed to an operation."""


class EmptyInput(PipelineError, ValueError):
    """No frames were given to the accumulator."""


class InvalidRadius(PipelineError, ValueError):
    """Blur radius is not a positive integer."""


class InvalidZoom(PipelineError, ValueError):
    """Zoom ratio reported for a capture is below 1.0."""


# ============================================================
# COLLABORATOR ERRORS
# ============================================================

class CaptureUnavailable(PipelineError):
    """The capture source could not deliver a frame."""


class CaptureTimeout(PipelineError, TimeoutError):
    """The capture source gave up waiting for a frame."""


class SegmentationFailed(PipelineError):
    """The segmentation service could not produce a mask."""
