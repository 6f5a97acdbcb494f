"""
Document composer - maps the dataset onto render-ready pages

Responsibilities:
1. one Page per portfolio, dataset order, page_number = index + 1
2. identity region (avatar or initial, student fields, verification code)
3. portfolio region (title, date, thumbnail / placeholder / nothing)
4. content blocks sorted by block_order with their series instruction
5. per-variant truncation rules; unknown variants are skipped

Depends on:
- resources/layout.yaml: text/table limits, labels, month names

Test points:
- test_pages_follow_dataset_order
- test_text_truncated_at_limit
- test_table_keeps_first_rows
- test_unknown_block_skipped
- test_missing_cache_entries_use_placeholders
"""

from __future__ import annotations

import logging

from ..config import LayoutSpec, RuntimeConfig, get_config, load_layout
from ..models import (
    ButtonPayload,
    CodeCache,
    ComposedBlock,
    ContentBlockExportItem,
    ExportDataset,
    IdentityRegion,
    ImageCache,
    ImageElement,
    ImagePayload,
    InfoRow,
    LinkElement,
    Page,
    PortfolioExportItem,
    PortfolioRegion,
    TableElement,
    TablePayload,
    TextElement,
    TextPayload,
    ThumbnailState,
    UnknownPayload,
    VideoElement,
    YoutubePayload,
)
from ..models.page import BlockElement

logger = logging.getLogger(__name__)


def truncate_text(text: str, limit: int, ellipsis: str = "...") -> tuple[str, bool]:
    """First `limit` characters plus the ellipsis if longer than `limit`"""
    if len(text) > limit:
        return text[:limit] + ellipsis, True
    return text, False


class DocumentComposer:
    """Dataset + caches -> pages"""

    def __init__(
        self,
        layout: LayoutSpec | None = None,
        config: RuntimeConfig | None = None,
    ):
        self.layout = layout or load_layout()
        self.config = config or get_config()

    def compose(
        self,
        dataset: ExportDataset,
        image_cache: ImageCache,
        code_cache: CodeCache,
    ) -> list[Page]:
        """Compose every portfolio, keeping dataset order"""
        total = len(dataset.portfolios)
        pages = [
            self.compose_page(dataset, portfolio, index + 1, total, image_cache, code_cache)
            for index, portfolio in enumerate(dataset.portfolios)
        ]
        logger.info(f"Composed {len(pages)} pages for series {dataset.series.nama}")
        return pages

    def compose_page(
        self,
        dataset: ExportDataset,
        portfolio: PortfolioExportItem,
        page_number: int,
        total_pages: int,
        image_cache: ImageCache,
        code_cache: CodeCache,
    ) -> Page:
        return Page(
            portfolio=portfolio,
            page_number=page_number,
            total_pages=total_pages,
            identity=self._identity(portfolio, image_cache, code_cache),
            portfolio_region=self._portfolio_region(portfolio, image_cache),
            blocks=self._blocks(dataset, portfolio, image_cache),
        )

    # ========================================================================
    # Regions
    # ========================================================================

    def _identity(
        self,
        portfolio: PortfolioExportItem,
        image_cache: ImageCache,
        code_cache: CodeCache,
    ) -> IdentityRegion:
        user = portfolio.user
        labels = self.layout.labels

        rows = []
        for label, value in (
            (labels.kelas, user.kelas_nama),
            (labels.jurusan, user.jurusan_nama),
            (labels.nisn, user.nisn),
            (labels.nis, user.nis),
        ):
            if value:
                rows.append(InfoRow(label=label, value=value))
        profile_url = self.config.verification.profile_url_template.format(username=user.username)
        rows.append(InfoRow(label=labels.profile, value=profile_url.split("://", 1)[-1]))

        return IdentityRegion(
            nama=user.nama,
            username=user.username,
            avatar=image_cache.lookup(user.avatar_url),
            initial=user.nama[:1].upper(),
            info_rows=rows,
            verification_code=code_cache.get(user.username),
        )

    def _portfolio_region(self, portfolio: PortfolioExportItem, image_cache: ImageCache) -> PortfolioRegion:
        thumbnail = image_cache.lookup(portfolio.thumbnail_url)
        if thumbnail is not None:
            state = ThumbnailState.IMAGE
        elif portfolio.thumbnail_url:
            state = ThumbnailState.PLACEHOLDER
        else:
            state = ThumbnailState.NONE

        return PortfolioRegion(
            judul=portfolio.judul,
            created_label=self.layout.format_date(portfolio.created_at),
            thumbnail_state=state,
            thumbnail=thumbnail,
        )

    def _blocks(
        self,
        dataset: ExportDataset,
        portfolio: PortfolioExportItem,
        image_cache: ImageCache,
    ) -> list[ComposedBlock]:
        composed = []
        for block in sorted(portfolio.content_blocks, key=lambda b: b.block_order):
            element = self.compose_block(block, image_cache)
            if element is None:
                continue
            composed.append(
                ComposedBlock(
                    block_id=block.id,
                    block_order=block.block_order,
                    instruction=dataset.series.instruction_for(block.block_order),
                    element=element,
                )
            )
        return composed

    # ========================================================================
    # Block variants
    # ========================================================================

    def compose_block(self, block: ContentBlockExportItem, image_cache: ImageCache) -> BlockElement | None:
        """Element for one block; None for variants without a rule"""
        limits = self.layout.limits
        labels = self.layout.labels

        match block.payload:
            case TextPayload(content=content):
                text, truncated = truncate_text(content, limits.text_max_chars, limits.ellipsis)
                return TextElement(text=text, truncated=truncated)

            case ImagePayload(url=url, caption=caption):
                return ImageElement(
                    image=image_cache.lookup(url),
                    placeholder_label=labels.image_placeholder,
                    caption=caption or None,
                )

            case YoutubePayload(video_id=video_id, title=title):
                return VideoElement(
                    title=title or labels.youtube_default_title,
                    reference=labels.youtube_reference.format(video_id=video_id),
                )

            case ButtonPayload(text=text, url=url):
                return LinkElement(text=text or labels.button_default_text, url=url or "")

            case TablePayload(headers=headers, rows=rows):
                kept = rows[:limits.table_max_rows]
                return TableElement(
                    header=list(headers),
                    rows=[list(row) for row in kept],
                    dropped_rows=len(rows) - len(kept),
                )

            case UnknownPayload():
                logger.debug(f"Skipping block {block.id} of type {block.block_type}")
                return None

        return None
