"""
Configuration for the enhancement pipeline.

Settings come from three layers, later ones winning:
1. PipelineConfig defaults
2. A YAML settings file (see config/settings.yaml)
3. A named preset from PRESETS

To add a new preset:
1. Add entry to PRESETS dict with your settings
2. Select it with `preset:` in the YAML file or --preset on the command line
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional
import yaml
from loguru import logger


# === QUALITY PRESETS ===
# Each preset trades portrait quality for processing time
PRESETS = {
    "QUALITY": {
        "segmentation_width": 640,   # Width the image is segmented at
        "blur_radius": 15,           # Background blur radius
        "separable_blur": True,      # 2-D blur instead of rows only
    },
    "BALANCED": {
        "segmentation_width": 480,
        "blur_radius": 11,
        "separable_blur": True,
    },
    "FAST": {
        "segmentation_width": 256,
        "blur_radius": 7,
        "separable_blur": False,
    },
}


@dataclass
class PipelineConfig:
    """Configuration for the capture pipeline.

    Attributes:
        stack_zoom_threshold: Zoom ratio at which the stacked path is used
        stack_frame_count: Frames captured and averaged on the stacked path
        sharpen_opacity: Opacity (0-255) of the sharpening self-blend
        blur_radius: Portrait background blur radius in pixels
        separable_blur: Portrait blur runs rows and columns (False: rows only)
        mask_threshold: Mask scores above this keep the sharp pixel
        mask_interpolation: Mask resampling, "bilinear" or "nearest"
        segmentation_width: Images are downscaled to this width for segmentation
        jpeg_quality: Output JPEG quality (0-100)
        output_dir: Directory finished photos are written to
        file_prefix: Output filename prefix
    """
    # Stacked path
    stack_zoom_threshold: float = 2.0
    stack_frame_count: int = 3
    sharpen_opacity: int = 200

    # Portrait path
    blur_radius: int = 15
    separable_blur: bool = True
    mask_threshold: int = 128
    mask_interpolation: str = "bilinear"
    segmentation_width: int = 640

    # Output
    jpeg_quality: int = 92
    output_dir: str = "photos"
    file_prefix: str = "PortraitCam"

    def apply_preset(self, name: str) -> PipelineConfig:
        """Override settings with a named preset.

        Raises:
            ValueError: If preset name is not registered
        """
        key = name.upper()
        if key not in PRESETS:
            available = ", ".join(PRESETS.keys())
            raise ValueError(f"Unknown preset '{name}'. Available: {available}")

        for attr, value in PRESETS[key].items():
            setattr(self, attr, value)
        logger.debug(f"Applied preset {key}")
        return self


# YAML section -> {yaml key: PipelineConfig attribute}
_YAML_KEYS = {
    "stacking": {
        "zoom_threshold": "stack_zoom_threshold",
        "frame_count": "stack_frame_count",
        "sharpen_opacity": "sharpen_opacity",
    },
    "portrait": {
        "blur_radius": "blur_radius",
        "separable_blur": "separable_blur",
        "mask_threshold": "mask_threshold",
        "mask_interpolation": "mask_interpolation",
        "segmentation_width": "segmentation_width",
    },
    "output": {
        "jpeg_quality": "jpeg_quality",
        "directory": "output_dir",
        "prefix": "file_prefix",
    },
}


def load_config(config_path: Optional[str | Path] = None, preset: Optional[str] = None) -> PipelineConfig:
    """
    Load configuration from a YAML file.

    Missing files fall back to the defaults. Unknown keys are ignored with a
    warning.

    Args:
        config_path: Path to a YAML settings file
        preset: Preset name, overrides the file's `preset:` entry

    Returns:
        PipelineConfig
    """
    config = PipelineConfig()
    data: dict = {}

    if config_path and Path(config_path).exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {config_path}")
    elif config_path:
        logger.warning(f"Config file {config_path} not found, using defaults")

    known = {f.name for f in fields(PipelineConfig)}
    for section, mapping in _YAML_KEYS.items():
        for key, value in (data.get(section) or {}).items():
            attr = mapping.get(key)
            if attr is None or attr not in known:
                logger.warning(f"Ignoring unknown setting {section}.{key}")
                continue
            setattr(config, attr, value)

    preset_name = preset or data.get("preset")
    if preset_name:
        config.apply_preset(preset_name)

    return config
