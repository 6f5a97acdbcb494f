"""
Pipeline - export orchestration

Submodules:
- stages: stage definitions and progress events
- executor: stage driver
- job_manager: in-memory job tracking and cancellation
- notifier: run outcome notification
"""

from .stages import DONE_STAGE, EXPORT_STAGES, PipelineStage, ProgressEvent, StageEnum
from .executor import ExportPipeline
from .job_manager import ExportJobManager
from .notifier import LoggingNotifier

__all__ = [
    "StageEnum",
    "PipelineStage",
    "ProgressEvent",
    "EXPORT_STAGES",
    "DONE_STAGE",
    "ExportPipeline",
    "ExportJobManager",
    "LoggingNotifier",
]
