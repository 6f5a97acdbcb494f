"""
Collaborator contracts - abstract interfaces between pipeline parts

Design rules:
1. stages talk to collaborators through these interfaces only
2. every interface has explicit input/output types
3. tests swap implementations freely (fake renderer, fake notifier, ...)

Usage:
    from series_export.interfaces import IDocumentRenderer

    class MyRenderer(IDocumentRenderer):
        def render(self, pages, series, branding) -> bytes:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import (
        CachedImage,
        ExportDataset,
        ExportJob,
        ExportPreview,
        ExportScope,
        FilterOption,
        Page,
        SeriesInfo,
    )


# ============================================================================
# Backend
# ============================================================================

class IExportApi(ABC):
    """Admin endpoints the export consumes"""

    @abstractmethod
    async def get_export_preview(self, series_id: str, scope: ExportScope) -> ExportPreview:
        """
        Expected export size for a scope

        Raises:
            DatasetFetchError: request failed
        """
        ...

    @abstractmethod
    async def get_export_dataset(self, series_id: str, scope: ExportScope) -> ExportDataset:
        """
        Full export dataset for a scope

        Order of `portfolios` is the final page order.

        Raises:
            DatasetFetchError: network error, non-2xx or invalid payload
        """
        ...

    @abstractmethod
    async def list_majors(self) -> list[FilterOption]:
        """Selectable majors (jurusan)"""
        ...

    @abstractmethod
    async def list_classes(self, jurusan_id: str | None = None) -> list[FilterOption]:
        """Selectable classes (kelas), optionally of one major"""
        ...


# ============================================================================
# Output
# ============================================================================

class IDocumentRenderer(ABC):
    """Turns composed pages into a binary document"""

    @abstractmethod
    def render(
        self,
        pages: list[Page],
        series: SeriesInfo,
        branding: CachedImage | None,
    ) -> bytes:
        """
        Render the document

        Args:
            pages: composed pages in final order
            series: exported series (page heading)
            branding: logo, None if it could not be fetched

        Returns:
            PDF bytes

        Raises:
            RenderError: rendering failed
        """
        ...


class IFileSaver(ABC):
    """Stores the finished document under a name"""

    @abstractmethod
    def save(self, data: bytes, filename: str) -> Path:
        """
        Save bytes as a named file

        Raises:
            DeliveryError: the file could not be written
        """
        ...


class INotifier(ABC):
    """User-facing outcome of a run (called exactly once per run)"""

    @abstractmethod
    def success(self, job: ExportJob) -> None:
        ...

    @abstractmethod
    def failure(self, job: ExportJob, message: str) -> None:
        ...


class IJobManager(ABC):
    """Job bookkeeping"""

    @abstractmethod
    def create_job(self, series_id: str, scope: ExportScope | None = None) -> ExportJob:
        ...

    @abstractmethod
    def get_job(self, job_id: str) -> ExportJob | None:
        ...

    @abstractmethod
    def cancel_job(self, job_id: str) -> bool:
        ...


# ============================================================================
# Exceptions
# ============================================================================

class SeriesExportError(Exception):
    """Base exception"""
    pass


class DatasetFetchError(SeriesExportError):
    """Preview or dataset request failed (fatal)"""
    pass


class EmptyDatasetError(SeriesExportError):
    """Dataset has no portfolios (fatal)"""
    pass


class ExportNotAllowedError(SeriesExportError):
    """Run requested while the preview forbids it"""
    pass


class RenderError(SeriesExportError):
    """Document rendering failed (fatal)"""
    pass


class DeliveryError(SeriesExportError):
    """Finished document could not be delivered (fatal)"""
    pass


class ExportCancelled(SeriesExportError):
    """Run cancelled between stages or batches"""
    pass
