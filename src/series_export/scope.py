"""
Export scope selector - filter state and preview for one series

Responsibilities:
1. hold the major (jurusan) and class (kelas) filters
2. reset the class whenever the major changes
3. re-request the preview after every filter change
4. gate the export: no preview or zero portfolios -> cannot start

Test points:
- test_select_jurusan_resets_kelas
- test_preview_refreshed_on_change
- test_cannot_start_with_zero_portfolios
"""

from __future__ import annotations

import logging

from .interfaces import DatasetFetchError, IExportApi
from .models import ExportPreview, ExportScope, FilterOption

logger = logging.getLogger(__name__)


class ExportScopeSelector:
    """Filter state of the export dialog"""

    def __init__(self, api: IExportApi, series_id: str):
        self.api = api
        self.series_id = series_id
        self.jurusan_id: str | None = None
        self.kelas_id: str | None = None
        self.preview: ExportPreview | None = None
        self.majors: list[FilterOption] = []
        self.classes: list[FilterOption] = []

    @property
    def scope(self) -> ExportScope:
        return ExportScope(jurusan_id=self.jurusan_id, kelas_id=self.kelas_id)

    @property
    def can_start(self) -> bool:
        """An export may only start with a preview that has portfolios"""
        return self.preview is not None and self.preview.portfolio_count > 0

    async def reset(self) -> ExportPreview | None:
        """Back to "all majors, all classes" (dialog opened)"""
        self.jurusan_id = None
        self.kelas_id = None
        self.preview = None
        return await self.refresh_preview()

    async def select_jurusan(self, jurusan_id: str | None) -> ExportPreview | None:
        """Change the major; the class filter depends on it and is cleared"""
        self.jurusan_id = jurusan_id or None
        self.kelas_id = None
        await self._load_classes()
        return await self.refresh_preview()

    async def select_kelas(self, kelas_id: str | None) -> ExportPreview | None:
        self.kelas_id = kelas_id or None
        return await self.refresh_preview()

    async def refresh_preview(self) -> ExportPreview | None:
        """Ask the backend for the expected export size of the current scope"""
        try:
            self.preview = await self.api.get_export_preview(self.series_id, self.scope)
        except DatasetFetchError as e:
            logger.warning(f"Export preview failed for series {self.series_id}: {e}")
            self.preview = None
        return self.preview

    async def load_options(self) -> None:
        """Load selectable majors and the classes of the current major"""
        try:
            self.majors = await self.api.list_majors()
        except DatasetFetchError as e:
            logger.warning(f"Loading majors failed: {e}")
            self.majors = []
        await self._load_classes()

    async def _load_classes(self) -> None:
        try:
            self.classes = await self.api.list_classes(self.jurusan_id)
        except DatasetFetchError as e:
            logger.warning(f"Loading classes failed: {e}")
            self.classes = []
