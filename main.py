#!/usr/bin/env python3
"""
Portrait Camera

Takes one enhanced photo, either from a webcam or from image files on disk.

Usage:
    python main.py --input IMAGE [IMAGE ...] [--zoom RATIO] [--portrait]
    python main.py --device DEVICE_INDEX [--zoom RATIO] [--portrait]

Paths:
    zoom >= 2.0     three frames are averaged and sharpened (noise reduction)
    --portrait      background is blurred behind the segmented person
    otherwise       the frame is saved unchanged

Examples:
    python main.py --input shot.jpg --portrait
    python main.py --input a.jpg b.jpg c.jpg --zoom 2.5
    python main.py --device 0 --zoom 2 --output-dir ~/Pictures
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from portrait_camera.capture import get_source
from portrait_camera.config import PRESETS, load_config
from portrait_camera.core.errors import PipelineError
from portrait_camera.persistence import PhotoWriter
from portrait_camera.pipeline import PipelineOrchestrator
from portrait_camera.segmentation import get_segmenter


# ============================================================
# LOGGING CONFIGURATION
# ============================================================

def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """Configure logging."""
    logger.remove()  # Remove default handler

    # Console output with colors
    logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>",
        colorize=True,
    )

    # File output
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {module}:{line} | {message}",
            rotation="10 MB",
            retention="7 days",
        )


# ============================================================
# ENTRY POINT
# ============================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Portrait Camera - multi-frame noise reduction and portrait blur",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input", "-i",
        nargs="+",
        metavar="IMAGE",
        help="Image file(s) used as captured frames",
    )
    source.add_argument(
        "--device", "-d",
        type=int,
        help="Webcam device index",
    )

    parser.add_argument(
        "--zoom", "-z",
        type=float,
        default=1.0,
        help="Zoom ratio, 1.0-3.0 (default: 1.0)",
    )

    parser.add_argument(
        "--portrait", "-p",
        action="store_true",
        help="Enable portrait background blur",
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=str(Path(__file__).parent / "config" / "settings.yaml"),
        help="Path to configuration file",
    )

    parser.add_argument(
        "--preset",
        type=str.upper,
        choices=list(PRESETS.keys()),
        default=None,
        help="Quality preset",
    )

    parser.add_argument(
        "--output-dir", "-o",
        type=str,
        default=None,
        help="Directory for saved photos (default: from config)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Optional log file path",
    )

    return parser


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_level, args.log_file)

    config = load_config(args.config, preset=args.preset)
    if args.output_dir:
        config.output_dir = args.output_dir

    if args.input:
        source = get_source("files", paths=args.input)
    else:
        source = get_source("camera", device_index=args.device)
    source.set_zoom_ratio(args.zoom)

    segmenter = get_segmenter("selfie") if args.portrait else None
    writer = PhotoWriter(config.output_dir, config.jpeg_quality, config.file_prefix)

    pipeline = PipelineOrchestrator(source, segmenter, config, writer)
    if not pipeline.start():
        pipeline.stop()
        return 1

    try:
        result = pipeline.take_picture_blocking(portrait_enabled=args.portrait)
    except (PipelineError, OSError) as e:
        logger.error(f"Capture failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1
    finally:
        pipeline.stop()

    print(result.saved_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
