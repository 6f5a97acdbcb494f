"""
pytest configuration and shared fixtures

Usage:
    def test_something(runtime_config, make_dataset):
        dataset = make_dataset([...])
"""

from __future__ import annotations

from collections import Counter
from io import BytesIO
from pathlib import Path
from typing import Any, Callable

import anyio
import httpx
import pytest
from PIL import Image

from series_export.config import LayoutSpec, RuntimeConfig, SpecLoader
from series_export.interfaces import DatasetFetchError, IDocumentRenderer, IExportApi, INotifier
from series_export.models import (
    CachedImage,
    ExportDataset,
    ExportJob,
    ExportPreview,
    ExportScope,
    FilterOption,
    Page,
    SeriesInfo,
)

AVATAR_URL = "https://cdn.test/avatars/shared.png"


# ============================================================================
# Async
# ============================================================================

@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


# ============================================================================
# Config fixtures
# ============================================================================

@pytest.fixture(scope="session")
def layout() -> LayoutSpec:
    """Packaged layout spec"""
    return SpecLoader.load()


@pytest.fixture
def runtime_config(tmp_path: Path) -> RuntimeConfig:
    """Runtime config writing into a temp directory"""
    config = RuntimeConfig()
    config.output.output_dir = tmp_path / "exports"
    config.assets.branding_url = "https://cdn.test/logo.png"
    return config


# ============================================================================
# Image fixtures
# ============================================================================

def make_png(color: str = "red", size: tuple[int, int] = (8, 8)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_jpeg(size: tuple[int, int] = (256, 256)) -> bytes:
    """Noisy JPEG, large enough that truncation loses scan data"""
    buffer = BytesIO()
    Image.effect_noise(size, 64).convert("RGB").save(buffer, format="JPEG", quality=90)
    return buffer.getvalue()


def truncated(data: bytes) -> bytes:
    return data[: len(data) * 2 // 3]


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def cached_image(png_bytes: bytes) -> Callable[[str], CachedImage]:
    def _make(url: str) -> CachedImage:
        return CachedImage(url=url, content_type="image/png", data=png_bytes, width=8, height=8)
    return _make


# ============================================================================
# Dataset fixtures
# ============================================================================

def portfolio_dict(
    portfolio_id: str,
    username: str,
    nama: str | None = None,
    *,
    avatar_url: str | None = None,
    thumbnail_url: str | None = None,
    blocks: list[dict[str, Any]] | None = None,
    **user_fields: Any,
) -> dict[str, Any]:
    """Raw portfolio as returned by the export endpoint"""
    return {
        "id": portfolio_id,
        "judul": f"Karya {portfolio_id}",
        "created_at": "2024-01-05T08:30:00Z",
        "thumbnail_url": thumbnail_url,
        "user": {
            "username": username,
            "nama": nama or username.capitalize(),
            "avatar_url": avatar_url,
            **user_fields,
        },
        "content_blocks": blocks or [],
    }


def block_dict(block_id: str, block_type: str, order: int, **payload: Any) -> dict[str, Any]:
    return {"id": block_id, "block_type": block_type, "block_order": order, "payload": payload}


@pytest.fixture
def make_dataset() -> Callable[..., ExportDataset]:
    def _make(portfolios: list[dict[str, Any]], nama: str = "Demo Day 2024", blocks=None) -> ExportDataset:
        return ExportDataset.model_validate({
            "series": {"id": "series-1", "nama": nama, "blocks": blocks or []},
            "portfolios": portfolios,
        })
    return _make


@pytest.fixture
def demo_day_dataset(make_dataset) -> ExportDataset:
    """Two students sharing one avatar URL"""
    return make_dataset(
        [
            portfolio_dict(
                "p-alice", "alice", "Alice Wijaya",
                avatar_url=AVATAR_URL,
                thumbnail_url="https://cdn.test/thumbs/alice.png",
                kelas_nama="XII DKV 1",
                blocks=[
                    block_dict("b1", "text", 1, content="Proses desain poster"),
                    block_dict("b2", "image", 2, url="https://cdn.test/blocks/poster.png", caption="Poster"),
                ],
            ),
            portfolio_dict(
                "p-bob", "bob", "Bob Santoso",
                avatar_url=AVATAR_URL,
                thumbnail_url="https://cdn.test/thumbs/bob.png",
                blocks=[block_dict("b3", "youtube", 1, video_id="abc123", title="Showreel")],
            ),
        ],
        blocks=[
            {"block_order": 1, "instruksi": "Ceritakan proses kerjamu"},
            {"block_order": 2, "instruksi": "Unggah hasil akhir"},
        ],
    )


# ============================================================================
# Fake collaborators
# ============================================================================

class AssetServer:
    """MockTransport backend counting requests and concurrency"""

    def __init__(self, routes: dict[str, tuple[int, bytes]] | None = None, delay: float = 0.01):
        self.routes = routes or {}
        self.delay = delay
        self.calls: Counter[str] = Counter()
        self.events: list[tuple[str, str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def serve(self, url: str, body: bytes, status: int = 200) -> None:
        self.routes[url] = (status, body)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls[url] += 1
        self.events.append(("start", url))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await anyio.sleep(self.delay)
        finally:
            self.in_flight -= 1
            self.events.append(("end", url))
        status, body = self.routes.get(url, (404, b"not found"))
        return httpx.Response(status, content=body, headers={"content-type": "image/png"})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def asset_server() -> AssetServer:
    return AssetServer()


class FakeExportApi(IExportApi):
    """In-memory export endpoints"""

    def __init__(
        self,
        dataset: ExportDataset | None = None,
        preview: ExportPreview | None = None,
        fail_dataset: bool = False,
    ):
        self.dataset = dataset
        self.preview = preview or ExportPreview(portfolio_count=1, user_count=1, estimated_pages=1)
        self.fail_dataset = fail_dataset
        self.preview_calls: list[ExportScope] = []
        self.dataset_calls: list[ExportScope] = []
        self.class_calls: list[str | None] = []

    async def get_export_preview(self, series_id: str, scope: ExportScope) -> ExportPreview:
        self.preview_calls.append(scope)
        return self.preview

    async def get_export_dataset(self, series_id: str, scope: ExportScope) -> ExportDataset:
        self.dataset_calls.append(scope)
        if self.fail_dataset:
            raise DatasetFetchError("connection refused")
        return self.dataset

    async def list_majors(self) -> list[FilterOption]:
        return [FilterOption(id="j-dkv", nama="DKV")]

    async def list_classes(self, jurusan_id: str | None = None) -> list[FilterOption]:
        self.class_calls.append(jurusan_id)
        return [FilterOption(id="k-1", nama="XII DKV 1")]


class FakeRenderer(IDocumentRenderer):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[list[Page]] = []

    def render(self, pages: list[Page], series: SeriesInfo, branding: CachedImage | None) -> bytes:
        self.calls.append(pages)
        if self.fail:
            raise RuntimeError("font missing")
        return b"%PDF-1.4 fake"


class RecordingNotifier(INotifier):
    def __init__(self):
        self.successes: list[ExportJob] = []
        self.failures: list[str] = []

    def success(self, job: ExportJob) -> None:
        self.successes.append(job)

    def failure(self, job: ExportJob, message: str) -> None:
        self.failures.append(message)
