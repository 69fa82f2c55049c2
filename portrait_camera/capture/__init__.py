"""
Capture module.

Responsibilities:
- Frame acquisition from cameras or image files
- Zoom ratio reporting for the capture policy
- Conversion to RGBA PixelBuffers
"""

from .base import BaseCaptureSource
from .camera_source import CameraSource
from .file_source import ImageFileSource

# Registry of available sources
SOURCES = {
    "camera": CameraSource,
    "files": ImageFileSource,
}


def get_source(name: str, **kwargs) -> BaseCaptureSource:
    """Get a source instance by name.

    Args:
        name: Source type name ("camera" or "files")
        **kwargs: Passed to the source constructor

    Returns:
        Source instance (not started)

    Raises:
        ValueError: If source name is not registered
    """
    if name not in SOURCES:
        available = ", ".join(SOURCES.keys())
        raise ValueError(f"Unknown source '{name}'. Available: {available}")

    return SOURCES[name](**kwargs)


def list_sources() -> list:
    """List available source names."""
    return list(SOURCES.keys())


__all__ = ['BaseCaptureSource', 'CameraSource', 'ImageFileSource', 'get_source', 'list_sources']
