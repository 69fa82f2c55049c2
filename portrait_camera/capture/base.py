"""
Base class for capture sources.

To add a new capture source:
1. Create a new file in the capture/ directory
2. Inherit from BaseCaptureSource
3. Implement all abstract methods
4. Register in capture/__init__.py SOURCES dict

request_frame() is a blocking call. The capture policy awaits it through a
worker thread and may call it several times in immediate succession for a
stacked capture.
"""
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from portrait_camera.core.contracts import PixelBuffer


class BaseCaptureSource(ABC):
    """Abstract base class for frame sources.

    Attributes:
        zoom_ratio: Current zoom ratio, read before each shutter action
        resolution: Tuple of (width, height) of delivered frames
    """

    @abstractmethod
    def start(self) -> bool:
        """Open the device or input.

        Returns:
            True if started successfully, False otherwise
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """Release the device or input."""
        pass

    @abstractmethod
    def request_frame(self) -> Optional[PixelBuffer]:
        """Capture one frame.

        Returns:
            Captured frame, or None if the source produced nothing

        Raises:
            CaptureUnavailable: If the source is not usable
            CaptureTimeout: If the source gave up waiting for a frame
        """
        pass

    @property
    @abstractmethod
    def zoom_ratio(self) -> float:
        """Current zoom ratio (>= 1.0)."""
        pass

    @abstractmethod
    def set_zoom_ratio(self, ratio: float) -> None:
        """Set the zoom ratio used for subsequent frames."""
        pass

    @property
    @abstractmethod
    def resolution(self) -> Tuple[int, int]:
        """Get the frame resolution as (width, height)."""
        pass

    def get_device_info(self) -> dict:
        """Get information about the connected device."""
        return {"device": "unknown"}
