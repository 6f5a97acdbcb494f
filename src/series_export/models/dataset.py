"""
Export dataset model - the snapshot returned by the export endpoint

One dataset is fetched per run; its portfolio order is the page order.
Content block payloads are resolved into a closed set of payload classes
keyed by block_type, with UnknownPayload as the fallback arm. Loosely
typed fields of a known block_type fall back to their defaults rather
than demoting the block to UnknownPayload.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def _as_optional_text(value: Any) -> str | None:
    """Scalars become strings; None and containers become None"""
    if value is None or isinstance(value, (dict, list, tuple, set)):
        return None
    return str(value)


class SeriesBlockTemplate(BaseModel):
    """One block slot of the series template"""
    block_order: int
    instruksi: str | None = None

    model_config = {"frozen": True}


class SeriesInfo(BaseModel):
    """Series being exported"""
    id: str
    nama: str
    blocks: list[SeriesBlockTemplate] = Field(default_factory=list)

    model_config = {"frozen": True}

    def instruction_for(self, block_order: int) -> str | None:
        """Instruction caption of the template slot with exactly this block_order"""
        for block in self.blocks:
            if block.block_order == block_order:
                return block.instruksi or None
        return None


class UserExportInfo(BaseModel):
    """Portfolio owner"""
    username: str
    nama: str
    avatar_url: str | None = None
    kelas_nama: str | None = None
    jurusan_nama: str | None = None
    nisn: str | None = None
    nis: str | None = None

    model_config = {"frozen": True}


# ============================================================================
# Content block payloads
# ============================================================================

class TextPayload(BaseModel):
    content: str = ""

    model_config = {"frozen": True}

    @field_validator("content", mode="before")
    @classmethod
    def _coerce(cls, v: Any) -> str:
        return _as_text(v)


class ImagePayload(BaseModel):
    url: str | None = None
    caption: str | None = None

    model_config = {"frozen": True}

    @field_validator("url", "caption", mode="before")
    @classmethod
    def _coerce(cls, v: Any) -> str | None:
        return _as_optional_text(v)


class YoutubePayload(BaseModel):
    video_id: str = ""
    title: str | None = None

    model_config = {"frozen": True}

    @field_validator("video_id", mode="before")
    @classmethod
    def _coerce_video_id(cls, v: Any) -> str:
        return _as_optional_text(v) or ""

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str | None:
        return _as_optional_text(v)


class ButtonPayload(BaseModel):
    text: str | None = None
    url: str | None = None

    model_config = {"frozen": True}

    @field_validator("text", "url", mode="before")
    @classmethod
    def _coerce(cls, v: Any) -> str | None:
        return _as_optional_text(v)


class TablePayload(BaseModel):
    headers: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator("headers", mode="before")
    @classmethod
    def _coerce_headers(cls, v: Any) -> list[str]:
        if not isinstance(v, list):
            return []
        return [_as_text(h) for h in v]

    @field_validator("rows", mode="before")
    @classmethod
    def _coerce_rows(cls, v: Any) -> list[list[str]]:
        """Non-list rows are dropped; ragged rows are kept as they are"""
        if not isinstance(v, list):
            return []
        return [[_as_text(cell) for cell in row] for row in v if isinstance(row, list)]


class UnknownPayload(BaseModel):
    """Payload of a block_type the export has no rendering rule for"""
    raw: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


BlockPayload = Union[
    TextPayload,
    ImagePayload,
    YoutubePayload,
    ButtonPayload,
    TablePayload,
    UnknownPayload,
]

PAYLOAD_TYPES: dict[str, type[BaseModel]] = {
    "text": TextPayload,
    "image": ImagePayload,
    "youtube": YoutubePayload,
    "button": ButtonPayload,
    "table": TablePayload,
}


class ContentBlockExportItem(BaseModel):
    """One content block of a portfolio"""
    id: str
    block_type: str
    block_order: int
    payload: BlockPayload

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _resolve_payload(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        payload = data.get("payload")
        if isinstance(payload, BaseModel):
            return data

        raw = payload if isinstance(payload, dict) else {}
        payload_cls = PAYLOAD_TYPES.get(str(data.get("block_type")))
        resolved: BaseModel
        if payload_cls is None:
            resolved = UnknownPayload(raw=raw)
        else:
            try:
                resolved = payload_cls(**raw)
            except ValidationError as e:
                logger.warning(f"Malformed {data.get('block_type')} payload in block {data.get('id')}: {e}")
                resolved = UnknownPayload(raw=raw)

        return {**data, "payload": resolved}


class PortfolioExportItem(BaseModel):
    """One published portfolio (read-only snapshot)"""
    id: str
    judul: str
    created_at: datetime
    thumbnail_url: str | None = None
    user: UserExportInfo
    content_blocks: list[ContentBlockExportItem] = Field(default_factory=list)

    model_config = {"frozen": True}

    def image_urls(self) -> list[str]:
        """Avatar, thumbnail and image block URLs referenced by this portfolio"""
        urls = []
        if self.user.avatar_url:
            urls.append(self.user.avatar_url)
        if self.thumbnail_url:
            urls.append(self.thumbnail_url)
        for block in self.content_blocks:
            if isinstance(block.payload, ImagePayload) and block.payload.url:
                urls.append(block.payload.url)
        return urls


class ExportDataset(BaseModel):
    """Everything one export run renders"""
    series: SeriesInfo
    portfolios: list[PortfolioExportItem] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return not self.portfolios

    def distinct_usernames(self) -> list[str]:
        """Usernames in order of first appearance"""
        return list(dict.fromkeys(p.user.username for p in self.portfolios))
