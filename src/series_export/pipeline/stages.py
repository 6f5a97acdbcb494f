"""
Pipeline stage definitions

Responsibilities:
1. stage names (explicit state machine states)
2. progress range and user-facing label of every stage
3. progress event passed to observers

Test points:
- test_stage_order
- test_progress_ranges_monotonic
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class StageEnum(str, Enum):
    """Pipeline states"""
    IDLE = "idle"
    FETCHING_DATASET = "fetching_dataset"
    GENERATING_CODES = "generating_codes"
    FETCHING_BRANDING_ASSET = "fetching_branding_asset"
    MATERIALIZING_IMAGES = "materializing_images"
    COMPOSING_DOCUMENT = "composing_document"
    FINALIZING = "finalizing"
    DONE = "done"
    ERROR = "error"


@dataclass
class PipelineStage:
    """Pipeline stage"""
    stage: StageEnum
    progress_start: int  # percent emitted on entry (0-100)
    progress_end: int    # upper bound of in-stage progress
    label: str

    @property
    def name(self) -> str:
        return self.stage.value

    def interpolate(self, done: int, total: int) -> int:
        """Percent for in-stage progress `done/total`"""
        if total <= 0:
            return self.progress_end
        span = self.progress_end - self.progress_start
        return self.progress_start + span * min(done, total) // total


@dataclass
class ProgressEvent:
    """One observable progress step"""
    stage: StageEnum
    percent: int
    label: str
    details: dict[str, int | str] = field(default_factory=dict)


# Export run stages, in execution order
EXPORT_STAGES: list[PipelineStage] = [
    PipelineStage(StageEnum.FETCHING_DATASET, 10, 20, "Mengambil data portofolio..."),
    PipelineStage(StageEnum.GENERATING_CODES, 30, 40, "Membuat QR codes..."),
    PipelineStage(StageEnum.FETCHING_BRANDING_ASSET, 40, 50, "Mengambil logo..."),
    PipelineStage(StageEnum.MATERIALIZING_IMAGES, 50, 70, "Mengambil gambar..."),
    PipelineStage(StageEnum.COMPOSING_DOCUMENT, 70, 90, "Membuat dokumen PDF..."),
    PipelineStage(StageEnum.FINALIZING, 90, 99, "Menyiapkan download..."),
]

IDLE_STAGE = PipelineStage(StageEnum.IDLE, 0, 0, "")
DONE_STAGE = PipelineStage(StageEnum.DONE, 100, 100, "Selesai!")
