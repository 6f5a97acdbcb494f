"""
Per-run caches - images by URL, verification codes by username

Both are built by exactly one stage of one run and are read-only afterwards.
A missing key is the failure signal; there is no error value.
"""

from __future__ import annotations

import base64
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel


class CachedImage(BaseModel):
    """A fetched and decodable image"""
    url: str
    content_type: str
    data: bytes
    width: int
    height: int

    model_config = {"frozen": True}

    @property
    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


class VerificationCode(BaseModel):
    """QR code pointing at a student's public profile"""
    username: str
    target_url: str
    drawing: Any  # reportlab.graphics.shapes.Drawing

    model_config = {"frozen": True, "arbitrary_types_allowed": True}


class _FrozenCache(Mapping):
    def __init__(self, entries: dict | None = None):
        self._entries = MappingProxyType(dict(entries or {}))

    def __getitem__(self, key):
        return self._entries[key]

    def __iter__(self) -> Iterator:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self)} entries)"


class ImageCache(_FrozenCache):
    """url -> CachedImage"""

    def __getitem__(self, key: str) -> CachedImage:
        return self._entries[key]

    def lookup(self, url: str | None) -> CachedImage | None:
        return self._entries.get(url) if url else None


class CodeCache(_FrozenCache):
    """username -> VerificationCode"""

    def __getitem__(self, key: str) -> VerificationCode:
        return self._entries[key]
