"""
Pipeline module.

Responsibilities:
- Path selection per shutter action
- Frame acquisition and stage orchestration
- Failure tracking and persistence hand-off
"""

from .capture_policy import CapturePolicy
from .orchestrator import PipelineOrchestrator
