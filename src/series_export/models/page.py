"""
Page model - the render-ready composition of one portfolio

Produced by DocumentComposer; the renderer only draws what is here and
makes no layout decisions of its own beyond coordinates.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

from pydantic import BaseModel, Field

from .cache import CachedImage, VerificationCode
from .dataset import PortfolioExportItem


class ThumbnailState(str, Enum):
    """What the thumbnail slot shows"""
    IMAGE = "image"
    PLACEHOLDER = "placeholder"
    NONE = "none"


class InfoRow(BaseModel):
    label: str
    value: str


class IdentityRegion(BaseModel):
    """Student identity column"""
    nama: str
    username: str
    avatar: CachedImage | None = None
    initial: str = ""
    info_rows: list[InfoRow] = Field(default_factory=list)
    verification_code: VerificationCode | None = None


class PortfolioRegion(BaseModel):
    """Portfolio title, date and thumbnail"""
    judul: str
    created_label: str
    thumbnail_state: ThumbnailState = ThumbnailState.NONE
    thumbnail: CachedImage | None = None


# ============================================================================
# Composed content blocks
# ============================================================================

class TextElement(BaseModel):
    text: str
    truncated: bool = False


class ImageElement(BaseModel):
    image: CachedImage | None = None
    placeholder_label: str = ""
    caption: str | None = None


class VideoElement(BaseModel):
    title: str
    reference: str


class LinkElement(BaseModel):
    text: str
    url: str


class TableElement(BaseModel):
    header: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)
    dropped_rows: int = 0


BlockElement = Union[TextElement, ImageElement, VideoElement, LinkElement, TableElement]


class ComposedBlock(BaseModel):
    """One content block with its optional series instruction"""
    block_id: str
    block_order: int
    instruction: str | None = None
    element: BlockElement


class Page(BaseModel):
    """One portfolio page of the export document"""
    portfolio: PortfolioExportItem
    page_number: int
    total_pages: int
    identity: IdentityRegion
    portfolio_region: PortfolioRegion
    blocks: list[ComposedBlock] = Field(default_factory=list)
