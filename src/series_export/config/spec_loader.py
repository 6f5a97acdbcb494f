"""
Layout spec loader - reads resources/layout.yaml

Responsibilities:
- parse the YAML into typed models
- page geometry, truncation limits, labels, month names
- cache the result (parsed once per path)

Usage:
    layout = SpecLoader.load()
    layout.limits.text_max_chars   # 200
    layout.format_date(created_at)  # "5 Jan 2024"
"""

from __future__ import annotations

from datetime import date, datetime
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

DEFAULT_LAYOUT_PATH = Path(__file__).resolve().parent.parent / "resources" / "layout.yaml"


class PageGeometry(BaseModel):
    """Page size and margins in points"""
    size: str = "A4"
    margin: float = 25.0
    left_column_ratio: float = 0.35
    column_gap: float = 10.0


class LayoutLimits(BaseModel):
    """Truncation rules"""
    text_max_chars: int = 200
    ellipsis: str = "..."
    table_max_rows: int = 3


class LayoutLabels(BaseModel):
    """Fixed page texts"""
    student_data: str = "DATA SISWA"
    content_title: str = "KONTEN PORTOFOLIO"
    kelas: str = "Kelas"
    jurusan: str = "Jurusan"
    nisn: str = "NISN"
    nis: str = "NIS"
    profile: str = "Profil"
    thumbnail_placeholder: str = "Thumbnail"
    image_placeholder: str = "Gambar"
    youtube_default_title: str = "Video YouTube"
    button_default_text: str = "Link"
    youtube_reference: str = "youtube.com/watch?v={video_id}"
    footer: str = "Halaman {page_number} dari {total_pages}"


class LayoutSpec(BaseModel):
    """Structured form of layout.yaml"""
    schema_version: str
    page: PageGeometry = Field(default_factory=PageGeometry)
    limits: LayoutLimits = Field(default_factory=LayoutLimits)
    labels: LayoutLabels = Field(default_factory=LayoutLabels)
    month_abbr: list[str] = Field(default_factory=list)

    def format_date(self, value: date | datetime) -> str:
        """Day, abbreviated month, year (e.g. 5 Jan 2024)"""
        if len(self.month_abbr) == 12:
            month = self.month_abbr[value.month - 1]
        else:
            month = value.strftime("%b")
        return f"{value.day} {month} {value.year}"


class SpecLoader:
    """Layout spec loader (cached)"""

    @classmethod
    @lru_cache(maxsize=4)
    def load(cls, spec_path: str | Path = DEFAULT_LAYOUT_PATH) -> LayoutSpec:
        """Load and cache the layout spec"""
        path = Path(spec_path)
        if not path.exists():
            raise FileNotFoundError(f"Layout spec not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        return LayoutSpec(**data)

    @classmethod
    def reload(cls, spec_path: str | Path = DEFAULT_LAYOUT_PATH) -> LayoutSpec:
        """Force a reload (clears the cache)"""
        cls.load.cache_clear()
        return cls.load(spec_path)


def load_layout(spec_path: str | Path = DEFAULT_LAYOUT_PATH) -> LayoutSpec:
    """Load the layout spec"""
    return SpecLoader.load(spec_path)
