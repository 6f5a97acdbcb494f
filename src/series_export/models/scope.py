"""
Export scope model - filters narrowing which portfolios qualify

The preview is computed by the backend and is advisory only.
"""

from __future__ import annotations

from pydantic import BaseModel


class ExportScope(BaseModel):
    """Major/class filter pair (None means all)"""
    jurusan_id: str | None = None
    kelas_id: str | None = None

    model_config = {"frozen": True}

    def to_params(self) -> dict[str, str]:
        """Query parameters for the set filters only"""
        params = {}
        if self.jurusan_id:
            params["jurusan_id"] = self.jurusan_id
        if self.kelas_id:
            params["kelas_id"] = self.kelas_id
        return params


class ExportPreview(BaseModel):
    """Expected export size"""
    portfolio_count: int = 0
    user_count: int = 0
    estimated_pages: int = 0


class FilterOption(BaseModel):
    """A selectable major or class"""
    id: str
    nama: str
