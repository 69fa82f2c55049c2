"""
Image enhancement stages.

Responsibilities:
- Multi-frame averaging (noise reduction)
- Self-blend sharpening
- Sliding-window box blur
- Mask-guided portrait compositing
"""

from .box_blur import BoxBlurEngine
from .frame_stack import FrameStackAccumulator
from .sharpen import SharpenFilter
from .mask_compositor import MaskCompositor
