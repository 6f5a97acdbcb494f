"""
PDF renderer - draws composed pages with reportlab

Responsibilities:
1. one A4 page per composed Page (header, series title, two columns, footer)
2. embed cached images and verification QR codes
3. keep content inside the page: blocks that no longer fit are dropped

Depends on:
- reportlab: canvas drawing, QR drawings (renderPDF)
- resources/layout.yaml: page geometry and labels

Test points:
- test_render_returns_pdf_bytes
- test_render_with_images_and_codes
- test_render_overflowing_blocks
- test_undrawable_image_uses_placeholder
"""

from __future__ import annotations

import logging
from io import BytesIO

from reportlab.graphics import renderPDF
from reportlab.lib import colors
from reportlab.lib.pagesizes import A3, A4, A5, letter
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from ..config import LayoutSpec, RuntimeConfig, get_config, load_layout
from ..interfaces import IDocumentRenderer, RenderError
from ..models import (
    CachedImage,
    ComposedBlock,
    ImageElement,
    LinkElement,
    Page,
    SeriesInfo,
    TableElement,
    TextElement,
    ThumbnailState,
    VideoElement,
)

logger = logging.getLogger(__name__)

PAGE_SIZES = {
    "A3": A3,
    "A4": A4,
    "A5": A5,
    "LETTER": letter,
}

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"

LIGHT_BG = colors.HexColor("#f5f5f5")
INSTRUCTION_BG = colors.HexColor("#fff3cd")
TABLE_HEADER_BG = colors.HexColor("#f0f0f0")

LINE_HEIGHT = 9.0
BLOCK_PADDING = 4.0
IMAGE_BLOCK_HEIGHT = 60.0
TABLE_ROW_HEIGHT = 12.0
FOOTER_SPACE = 30.0


class PDFRenderer(IDocumentRenderer):
    """reportlab implementation of the document renderer"""

    def __init__(
        self,
        layout: LayoutSpec | None = None,
        config: RuntimeConfig | None = None,
    ):
        self.layout = layout or load_layout()
        self.config = config or get_config()
        self.pagesize = PAGE_SIZES.get(self.layout.page.size.upper(), A4)

    def render(
        self,
        pages: list[Page],
        series: SeriesInfo,
        branding: CachedImage | None,
    ) -> bytes:
        buffer = BytesIO()
        try:
            c = canvas.Canvas(buffer, pagesize=self.pagesize)
            c.setTitle(series.nama)
            c.setAuthor(self.config.branding.name)
            for page in pages:
                self._draw_page(c, page, series, branding)
                c.showPage()
            c.save()
        except Exception as e:
            raise RenderError(f"PDF rendering failed for series {series.nama}: {e}") from e

        data = buffer.getvalue()
        logger.info(f"Rendered {len(pages)} pages ({len(data)} bytes)")
        return data

    # ========================================================================
    # Page
    # ========================================================================

    def _draw_page(self, c: canvas.Canvas, page: Page, series: SeriesInfo, branding: CachedImage | None) -> None:
        width, height = self.pagesize
        margin = self.layout.page.margin
        top = height - margin

        y = self._draw_header(c, page, branding, top)

        c.setFont(FONT_BOLD, 14)
        c.setFillColor(colors.black)
        c.drawCentredString(width / 2, y - 14, series.nama)
        y -= 26

        content_width = width - 2 * margin
        gap = self.layout.page.column_gap
        left_width = content_width * self.layout.page.left_column_ratio - gap / 2
        right_x = margin + left_width + gap
        right_width = content_width - left_width - gap

        self._draw_left_column(c, page, margin, y, left_width)
        self._draw_right_column(c, page, right_x, y, right_width, bottom=margin + FOOTER_SPACE)

        c.setFont(FONT, 7)
        c.setFillColor(colors.grey)
        footer = self.layout.labels.footer.format(
            page_number=page.page_number, total_pages=page.total_pages
        )
        c.drawCentredString(width / 2, 15, footer)

    def _draw_header(self, c: canvas.Canvas, page: Page, branding: CachedImage | None, top: float) -> float:
        width, _ = self.pagesize
        margin = self.layout.page.margin
        x = margin

        if branding is not None:
            self._draw_image(c, branding, x, top - 24, 24, 24)
            x += 30

        c.setFont(FONT_BOLD, 12)
        c.setFillColor(colors.black)
        c.drawString(x, top - 12, self.config.branding.name)
        c.setFont(FONT, 7)
        c.setFillColor(colors.grey)
        c.drawString(x, top - 22, self.config.branding.tagline)

        code = page.identity.verification_code
        qr_size = self.config.verification.qr_size
        if code is not None:
            renderPDF.draw(code.drawing, c, width - margin - qr_size, top - qr_size)

        header_bottom = top - max(qr_size, 24) - 4
        c.setStrokeColor(colors.lightgrey)
        c.setLineWidth(1)
        c.line(margin, header_bottom, width - margin, header_bottom)
        return header_bottom - 6

    # ========================================================================
    # Left column: identity + portfolio
    # ========================================================================

    def _draw_left_column(self, c: canvas.Canvas, page: Page, x: float, y: float, width: float) -> None:
        identity = page.identity

        if identity.avatar is not None:
            self._draw_image(c, identity.avatar, x, y - 40, 40, 40)
        else:
            c.setFillColor(colors.lightgrey)
            c.circle(x + 20, y - 20, 20, stroke=0, fill=1)
            c.setFillColor(colors.grey)
            c.setFont(FONT, 16)
            c.drawCentredString(x + 20, y - 26, identity.initial)

        c.setFillColor(colors.black)
        c.setFont(FONT_BOLD, 11)
        name_lines = simpleSplit(identity.nama, FONT_BOLD, 11, width - 48)
        c.drawString(x + 48, y - 16, name_lines[0] if name_lines else "")
        c.setFont(FONT, 8)
        c.setFillColor(colors.grey)
        c.drawString(x + 48, y - 28, f"@{identity.username}")
        y -= 48

        # student data
        box_height = 6 + 10 + 10 * len(identity.info_rows) + 2
        c.setFillColor(LIGHT_BG)
        c.rect(x, y - box_height, width, box_height, stroke=0, fill=1)
        c.setFillColor(colors.grey)
        c.setFont(FONT_BOLD, 7)
        c.drawString(x + 6, y - 12, self.layout.labels.student_data)
        row_y = y - 22
        for row in identity.info_rows:
            c.setFont(FONT, 7)
            c.setFillColor(colors.grey)
            c.drawString(x + 6, row_y, row.label)
            c.setFillColor(colors.black)
            value_lines = simpleSplit(row.value, FONT, 7, width - 57)
            c.drawString(x + 51, row_y, value_lines[0] if value_lines else "")
            row_y -= 10
        y -= box_height + 6

        # portfolio info
        region = page.portfolio_region
        title_lines = simpleSplit(region.judul, FONT_BOLD, 10, width - 12)
        box_height = 6 + 12 * len(title_lines) + 12
        c.setFillColor(LIGHT_BG)
        c.rect(x, y - box_height, width, box_height, stroke=0, fill=1)
        c.setFillColor(colors.black)
        c.setFont(FONT_BOLD, 10)
        line_y = y - 14
        for line in title_lines:
            c.drawString(x + 6, line_y, line)
            line_y -= 12
        c.setFont(FONT, 7)
        c.setFillColor(colors.grey)
        c.drawString(x + 6, line_y + 2, region.created_label)
        y -= box_height + 6

        # thumbnail
        if region.thumbnail_state == ThumbnailState.IMAGE and region.thumbnail is not None:
            self._draw_image(
                c, region.thumbnail, x, y - 80, width, 80, self.layout.labels.thumbnail_placeholder
            )
        elif region.thumbnail_state == ThumbnailState.PLACEHOLDER:
            self._draw_placeholder(c, x, y - 80, width, 80, self.layout.labels.thumbnail_placeholder)

    # ========================================================================
    # Right column: content blocks
    # ========================================================================

    def _draw_right_column(
        self,
        c: canvas.Canvas,
        page: Page,
        x: float,
        y: float,
        width: float,
        bottom: float,
    ) -> None:
        c.setFont(FONT_BOLD, 8)
        c.setFillColor(colors.grey)
        c.drawString(x, y - 8, self.layout.labels.content_title)
        y -= 14

        for index, block in enumerate(page.blocks):
            needed = self._block_height(block, width)
            if y - needed < bottom:
                logger.debug(
                    f"Page {page.page_number}: {len(page.blocks) - index} blocks do not fit, dropped"
                )
                break
            self._draw_block(c, block, x, y, width, needed)
            y -= needed + 4

    def _instruction_lines(self, block: ComposedBlock, width: float) -> list[str]:
        if not block.instruction:
            return []
        return simpleSplit(block.instruction, FONT, 7, width - 2 * BLOCK_PADDING)

    def _content_lines(self, block: ComposedBlock, width: float) -> list[str]:
        element = block.element
        if isinstance(element, TextElement):
            return simpleSplit(element.text, FONT, 7, width - 2 * BLOCK_PADDING)
        return []

    def _block_height(self, block: ComposedBlock, width: float) -> float:
        height = 0.0
        instruction_lines = self._instruction_lines(block, width)
        if instruction_lines:
            height += len(instruction_lines) * LINE_HEIGHT + 2 * BLOCK_PADDING

        element = block.element
        if isinstance(element, TextElement):
            body = len(self._content_lines(block, width)) * LINE_HEIGHT
        elif isinstance(element, ImageElement):
            body = IMAGE_BLOCK_HEIGHT + (LINE_HEIGHT if element.caption else 0)
        elif isinstance(element, (VideoElement, LinkElement)):
            body = 2 * LINE_HEIGHT
        elif isinstance(element, TableElement):
            row_count = len(element.rows) + (1 if element.header else 0)
            body = row_count * TABLE_ROW_HEIGHT
        else:
            body = 0
        return height + body + 2 * BLOCK_PADDING

    def _draw_block(
        self,
        c: canvas.Canvas,
        block: ComposedBlock,
        x: float,
        y: float,
        width: float,
        height: float,
    ) -> None:
        top = y
        instruction_lines = self._instruction_lines(block, width)
        if instruction_lines:
            header_height = len(instruction_lines) * LINE_HEIGHT + 2 * BLOCK_PADDING
            c.setFillColor(INSTRUCTION_BG)
            c.rect(x, y - header_height, width, header_height, stroke=0, fill=1)
            c.setFillColor(colors.brown)
            c.setFont(FONT, 7)
            line_y = y - BLOCK_PADDING - 7
            for line in instruction_lines:
                c.drawString(x + BLOCK_PADDING, line_y, line)
                line_y -= LINE_HEIGHT
            y -= header_height

        y -= BLOCK_PADDING
        inner_x = x + BLOCK_PADDING
        inner_width = width - 2 * BLOCK_PADDING
        element = block.element

        if isinstance(element, TextElement):
            c.setFillColor(colors.black)
            c.setFont(FONT, 7)
            for line in self._content_lines(block, width):
                c.drawString(inner_x, y - 7, line)
                y -= LINE_HEIGHT

        elif isinstance(element, ImageElement):
            if element.image is not None:
                self._draw_image(
                    c, element.image, inner_x, y - IMAGE_BLOCK_HEIGHT, inner_width, IMAGE_BLOCK_HEIGHT,
                    element.placeholder_label,
                )
            else:
                self._draw_placeholder(
                    c, inner_x, y - IMAGE_BLOCK_HEIGHT, inner_width, IMAGE_BLOCK_HEIGHT,
                    element.placeholder_label,
                )
            y -= IMAGE_BLOCK_HEIGHT
            if element.caption:
                c.setFont(FONT, 6)
                c.setFillColor(colors.grey)
                c.drawCentredString(inner_x + inner_width / 2, y - 7, element.caption)

        elif isinstance(element, VideoElement):
            self._draw_label_pair(c, inner_x, y, inner_width, element.title, element.reference, bold=False)

        elif isinstance(element, LinkElement):
            self._draw_label_pair(c, inner_x, y, inner_width, element.text, element.url, bold=True)

        elif isinstance(element, TableElement):
            self._draw_table(c, element, inner_x, y, inner_width)

        c.setStrokeColor(colors.lightgrey)
        c.setLineWidth(1)
        c.rect(x, top - height, width, height, stroke=1, fill=0)

    def _draw_label_pair(
        self,
        c: canvas.Canvas,
        x: float,
        y: float,
        width: float,
        label: str,
        detail: str,
        bold: bool,
    ) -> None:
        font = FONT_BOLD if bold else FONT
        c.setFont(font, 7)
        c.setFillColor(colors.black)
        label_lines = simpleSplit(label, font, 7, width)
        c.drawString(x, y - 7, label_lines[0] if label_lines else "")
        c.setFont(FONT, 6)
        c.setFillColor(colors.grey)
        detail_lines = simpleSplit(detail, FONT, 6, width)
        c.drawString(x, y - 7 - LINE_HEIGHT, detail_lines[0] if detail_lines else "")

    def _draw_table(self, c: canvas.Canvas, table: TableElement, x: float, y: float, width: float) -> None:
        column_count = max([len(table.header)] + [len(row) for row in table.rows] + [1])
        cell_width = width / column_count

        rows: list[tuple[list[str], bool]] = []
        if table.header:
            rows.append((table.header, True))
        rows.extend((row, False) for row in table.rows)

        c.setStrokeColor(colors.lightgrey)
        c.setLineWidth(0.5)
        for cells, is_header in rows:
            if is_header:
                c.setFillColor(TABLE_HEADER_BG)
                c.rect(x, y - TABLE_ROW_HEIGHT, width, TABLE_ROW_HEIGHT, stroke=0, fill=1)
            font = FONT_BOLD if is_header else FONT
            c.setFont(font, 6)
            c.setFillColor(colors.black)
            for index, cell in enumerate(cells):
                cell_lines = simpleSplit(cell, font, 6, cell_width - 6)
                c.drawString(x + index * cell_width + 3, y - 8, cell_lines[0] if cell_lines else "")
            c.line(x, y - TABLE_ROW_HEIGHT, x + width, y - TABLE_ROW_HEIGHT)
            y -= TABLE_ROW_HEIGHT

    # ========================================================================
    # Primitives
    # ========================================================================

    def _draw_image(
        self,
        c: canvas.Canvas,
        image: CachedImage,
        x: float,
        y: float,
        width: float,
        height: float,
        placeholder_label: str = "",
    ) -> None:
        """Draw a cached image; an image reportlab cannot read gets a placeholder"""
        try:
            c.drawImage(
                ImageReader(BytesIO(image.data)),
                x, y, width, height,
                preserveAspectRatio=True,
                anchor="c",
                mask="auto",
            )
        except Exception as e:
            logger.warning(f"Image not drawable, using placeholder: {image.url}: {e}")
            self._draw_placeholder(c, x, y, width, height, placeholder_label)

    def _draw_placeholder(self, c: canvas.Canvas, x: float, y: float, width: float, height: float, label: str) -> None:
        c.setFillColor(colors.lightgrey)
        c.rect(x, y, width, height, stroke=0, fill=1)
        c.setFillColor(colors.grey)
        c.setFont(FONT, 7)
        c.drawCentredString(x + width / 2, y + height / 2 - 3, label)
