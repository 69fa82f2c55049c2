"""
Segmentation module.

Responsibilities:
- Person/background segmentation (MediaPipe)
- Mask resampling to the compositing resolution
- Foreground thresholding
"""

from .base import BaseSegmenter
from .mask_processor import MaskProcessor
from .selfie_segmenter import SelfieSegmenter

# Registry of available segmentation backends
SEGMENTERS = {
    "selfie": SelfieSegmenter,
}


def get_segmenter(name: str, **kwargs) -> BaseSegmenter:
    """Get a segmenter instance by name.

    Raises:
        ValueError: If segmenter name is not registered
    """
    if name not in SEGMENTERS:
        available = ", ".join(SEGMENTERS.keys())
        raise ValueError(f"Unknown segmenter '{name}'. Available: {available}")

    return SEGMENTERS[name](**kwargs)


__all__ = ['BaseSegmenter', 'MaskProcessor', 'SelfieSegmenter', 'get_segmenter']
