"""
Run outcome notification (one per run)
"""

from __future__ import annotations

import logging

from ..interfaces import INotifier
from ..models import ExportJob

logger = logging.getLogger(__name__)


class LoggingNotifier(INotifier):
    """Reports the outcome through the log"""

    def success(self, job: ExportJob) -> None:
        logger.info(f"[{job.job_id}] PDF berhasil di-download: {job.filename}")

    def failure(self, job: ExportJob, message: str) -> None:
        logger.error(f"[{job.job_id}] {message}")
