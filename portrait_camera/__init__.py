"""
Portrait Camera Enhancement Pipeline

Captures photographs and enhances them through two image-processing paths:

1. Multi-frame noise reduction for high zoom shots (stack -> sharpen)
2. Background-blur portrait compositing driven by a segmentation mask

Camera access, the segmentation model and file persistence are external
collaborators; the pixel pipeline in between is what this package owns.
"""

__version__ = "0.1.0"
__author__ = "Portrait Camera Team"
