"""
Job manager - create / query / cancel export jobs

Responsibilities:
1. create jobs and assign IDs
2. keep one cancel token per job
3. run a job through an ExportPipeline
4. query jobs

Jobs live in memory only.

Test points:
- test_create_job
- test_cancel_queued_job
- test_cancel_running_job
- test_list_jobs
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from ..cancel import CancelToken
from ..interfaces import IJobManager
from ..models import ExportJob, ExportScope, JobStatus

if TYPE_CHECKING:
    from .executor import ExportPipeline


class ExportJobManager(IJobManager):
    """In-memory job manager"""

    def __init__(self):
        self._jobs: dict[str, ExportJob] = {}
        self._tokens: dict[str, CancelToken] = {}

    def create_job(self, series_id: str, scope: ExportScope | None = None) -> ExportJob:
        job_id = str(uuid.uuid4())
        job = ExportJob(job_id=job_id, series_id=series_id, scope=scope or ExportScope())
        self._jobs[job_id] = job
        self._tokens[job_id] = CancelToken()
        return job

    def get_job(self, job_id: str) -> ExportJob | None:
        return self._jobs.get(job_id)

    def get_cancel_token(self, job_id: str) -> CancelToken | None:
        return self._tokens.get(job_id)

    def cancel_job(self, job_id: str) -> bool:
        """Cancel a queued or running job (a running one stops at its next check)"""
        job = self.get_job(job_id)
        if not job:
            return False

        if job.status == JobStatus.QUEUED:
            self._tokens[job_id].cancel("cancelled before start")
            job.mark_cancelled()
            return True

        if job.status == JobStatus.RUNNING:
            self._tokens[job_id].cancel("cancelled by user")
            return True

        return False

    async def run_job(self, pipeline: ExportPipeline, job_id: str) -> ExportJob:
        """Run a created job"""
        job = self._jobs[job_id]
        if job.is_finished:
            return job
        return await pipeline.run(
            job.series_id,
            job.scope,
            job=job,
            cancel_token=self._tokens[job_id],
        )

    def list_jobs(
        self,
        status: JobStatus | None = None,
        limit: int = 100,
    ) -> list[ExportJob]:
        """Jobs, newest first"""
        jobs = list(self._jobs.values())

        if status:
            jobs = [j for j in jobs if j.status == status]

        jobs.sort(key=lambda j: j.created_at, reverse=True)

        return jobs[:limit]
