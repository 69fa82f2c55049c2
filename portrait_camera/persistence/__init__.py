"""
Persistence module.

Responsibilities:
- JPEG encoding of finished photos
- Atomic commit to storage
"""

from .photo_writer import PhotoWriter, StagedPhoto
