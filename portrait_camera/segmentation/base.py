"""
Base class for segmentation services.

To add a new segmentation backend:
1. Create a new file in the segmentation/ directory
2. Inherit from BaseSegmenter
3. Implement segment()
4. Register in segmentation/__init__.py SEGMENTERS dict

Calls to segment() may block for a long time and must never run on the
event loop; the capture policy always awaits them through a worker thread.
"""
from abc import ABC, abstractmethod

from portrait_camera.core.contracts import PixelBuffer, SegmentationMask


class BaseSegmenter(ABC):
    """Abstract foreground/background segmentation service."""

    def initialize(self) -> bool:
        """Load models. Returns True when the service is ready."""
        return True

    def shutdown(self) -> None:
        """Release model resources."""

    @abstractmethod
    def segment(self, image: PixelBuffer, target_width: int) -> SegmentationMask:
        """Produce a foreground mask for an image.

        The service may downscale internally; the returned mask carries its
        own dimensions, which can be smaller than the image.

        Args:
            image: Image to segment
            target_width: Width the caller composites at

        Returns:
            SegmentationMask with values 0-255 (higher = foreground)

        Raises:
            SegmentationFailed: If no mask could be produced
        """
        pass
