"""
Data model layer - structures every stage exchanges

- ExportScope / ExportPreview: filters and advisory preview
- ExportDataset: series + portfolios snapshot (typed block payloads)
- ImageCache / CodeCache: per-run read-only caches
- Page: composed, render-ready page
- ExportJob: run state and progress
"""

from .cache import CachedImage, CodeCache, ImageCache, VerificationCode
from .dataset import (
    BlockPayload,
    ButtonPayload,
    ContentBlockExportItem,
    ExportDataset,
    ImagePayload,
    PortfolioExportItem,
    SeriesBlockTemplate,
    SeriesInfo,
    TablePayload,
    TextPayload,
    UnknownPayload,
    UserExportInfo,
    YoutubePayload,
)
from .job import ExportJob, JobProgress, JobStatus
from .page import (
    ComposedBlock,
    IdentityRegion,
    ImageElement,
    InfoRow,
    LinkElement,
    Page,
    PortfolioRegion,
    TableElement,
    TextElement,
    ThumbnailState,
    VideoElement,
)
from .scope import ExportPreview, ExportScope, FilterOption

__all__ = [
    "ExportScope",
    "ExportPreview",
    "FilterOption",
    "SeriesInfo",
    "SeriesBlockTemplate",
    "UserExportInfo",
    "PortfolioExportItem",
    "ContentBlockExportItem",
    "BlockPayload",
    "TextPayload",
    "ImagePayload",
    "YoutubePayload",
    "ButtonPayload",
    "TablePayload",
    "UnknownPayload",
    "ExportDataset",
    "CachedImage",
    "VerificationCode",
    "ImageCache",
    "CodeCache",
    "Page",
    "IdentityRegion",
    "PortfolioRegion",
    "InfoRow",
    "ThumbnailState",
    "ComposedBlock",
    "TextElement",
    "ImageElement",
    "VideoElement",
    "LinkElement",
    "TableElement",
    "ExportJob",
    "JobProgress",
    "JobStatus",
]
