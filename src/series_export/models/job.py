"""
Export job model - state and lifecycle of one export run

Kept in memory only; a job lives as long as the process that started it.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from .scope import ExportScope


class JobStatus(str, Enum):
    """Job status"""
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class JobProgress(BaseModel):
    """Job progress"""
    stage: str = "idle"
    percent: int = 0
    message: str = ""
    details: dict[str, int | str | float] = Field(default_factory=dict)


class ExportJob(BaseModel):
    """Export run record"""
    job_id: str = Field(..., description="UUID")
    series_id: str
    scope: ExportScope = Field(default_factory=ExportScope)

    status: JobStatus = JobStatus.QUEUED
    progress: JobProgress = Field(default_factory=JobProgress)

    # result
    filename: str | None = None
    output_path: Path | None = None
    flags: list[str] = Field(default_factory=list, description="non-fatal warnings")
    errors: list[str] = Field(default_factory=list, description="fatal errors")

    created_at: datetime = Field(default_factory=datetime.now)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    model_config = {"arbitrary_types_allowed": True}

    @property
    def is_finished(self) -> bool:
        return self.status in (JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.CANCELLED)

    def mark_running(self, stage: str = "fetching_dataset") -> None:
        self.status = JobStatus.RUNNING
        self.started_at = datetime.now()
        self.progress.stage = stage

    def mark_succeeded(self) -> None:
        self.status = JobStatus.SUCCEEDED
        self.finished_at = datetime.now()
        self.progress.percent = 100

    def mark_failed(self, error: str) -> None:
        self.status = JobStatus.FAILED
        self.finished_at = datetime.now()
        self.errors.append(error)

    def mark_cancelled(self) -> None:
        self.status = JobStatus.CANCELLED
        self.finished_at = datetime.now()

    def add_flag(self, flag: str) -> None:
        """Record a non-fatal warning (deduplicated)"""
        if flag not in self.flags:
            self.flags.append(flag)

    def summary(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "series_id": self.series_id,
            "status": self.status.value,
            "stage": self.progress.stage,
            "percent": self.progress.percent,
            "filename": self.filename,
            "flags": list(self.flags),
            "errors": list(self.errors),
        }
