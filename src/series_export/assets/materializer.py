"""
Asset materializer - deduplicated, batch-bounded image fetching

Responsibilities:
1. collect the distinct image URLs of a dataset (avatars, thumbnails, image blocks)
2. fetch them in sequential batches of `assets.batch_size` (default 5)
3. decode-check every result with Pillow
4. build a read-only ImageCache holding successes only

Failure policy: a failed URL (transport error, non-2xx, undecodable bytes)
is logged and reported through `on_missing`, never raised. Callers treat a
missing cache key as the failure signal.

Test points:
- test_duplicate_url_fetched_once
- test_batches_bounded
- test_http_404_is_missing
- test_undecodable_is_missing
- test_truncated_jpeg_is_missing
- test_prefetched_url_not_fetched_again
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable, Mapping, Sequence
from contextlib import asynccontextmanager
from io import BytesIO
from typing import TypeVar

import anyio
import httpx
from PIL import Image

from ..cancel import CancelToken
from ..config import RuntimeConfig, get_config
from ..models import CachedImage, ExportDataset, ImageCache

logger = logging.getLogger(__name__)

T = TypeVar("T")


def collect_image_urls(dataset: ExportDataset) -> list[str]:
    """Distinct image URLs in order of first appearance"""
    urls: dict[str, None] = {}
    for portfolio in dataset.portfolios:
        for url in portfolio.image_urls():
            urls.setdefault(url, None)
    return list(urls)


def batched(items: Sequence[T], size: int) -> list[list[T]]:
    """Split into consecutive chunks of at most `size`"""
    if size < 1:
        raise ValueError("batch size must be >= 1")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def decode_image(url: str, data: bytes, content_type: str | None = None) -> CachedImage | None:
    """Check that the bytes fully decode as an image; None if not"""
    try:
        with Image.open(BytesIO(data)) as img:
            img.verify()
        # verify() is a no-op for some formats (JPEG) and leaves the image unusable
        with Image.open(BytesIO(data)) as img:
            img.load()
            width, height = img.size
            fmt = img.format
    except Exception as e:
        logger.warning(f"Image decode failed: {url}: {e}")
        return None

    mime = Image.MIME.get(fmt or "") or (content_type or "").split(";")[0] or "application/octet-stream"
    return CachedImage(url=url, content_type=mime, data=data, width=width, height=height)


class AssetMaterializer:
    """Image cache builder"""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        config: RuntimeConfig | None = None,
        batch_size: int | None = None,
    ):
        self.config = config or get_config()
        self.client = client
        self.batch_size = batch_size or self.config.assets.batch_size

    @asynccontextmanager
    async def _client_scope(self) -> AsyncIterator[httpx.AsyncClient]:
        if self.client is not None:
            yield self.client
            return
        async with httpx.AsyncClient(timeout=self.config.assets.fetch_timeout_sec) as client:
            yield client

    async def materialize(
        self,
        dataset: ExportDataset,
        *,
        cancel_token: CancelToken | None = None,
        on_missing: Callable[[str], None] | None = None,
        on_batch: Callable[[int, int], None] | None = None,
        prefetched: Mapping[str, CachedImage | None] | None = None,
    ) -> ImageCache:
        """
        Fetch every distinct image URL of the dataset

        Args:
            dataset: export dataset
            cancel_token: checked before each batch
            on_missing: called with each URL that could not be materialized
            on_batch: called with (done_batches, total_batches) after each batch
            prefetched: results already fetched in this run (e.g. the branding
                asset); these URLs are not requested again

        Returns:
            ImageCache with one entry per successfully fetched URL
        """
        prefetched = prefetched or {}
        urls: list[str] = []
        entries: dict[str, CachedImage] = {}
        for url in collect_image_urls(dataset):
            if url not in prefetched:
                urls.append(url)
            elif prefetched[url] is not None:
                entries[url] = prefetched[url]
            elif on_missing is not None:
                on_missing(url)
        batches = batched(urls, self.batch_size)

        logger.info(f"Materializing {len(urls)} images in {len(batches)} batches of {self.batch_size}")

        async with self._client_scope() as client:
            for index, batch in enumerate(batches, start=1):
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()

                results: dict[str, CachedImage | None] = {}
                async with anyio.create_task_group() as tg:
                    for url in batch:
                        tg.start_soon(self._fetch_into, client, url, results)

                for url in batch:
                    image = results.get(url)
                    if image is not None:
                        entries[url] = image
                    elif on_missing is not None:
                        on_missing(url)

                if on_batch is not None:
                    on_batch(index, len(batches))

        logger.info(f"Materialized {len(entries)} images ({len(urls)} fetched)")
        return ImageCache(entries)

    async def fetch_branding(self) -> CachedImage | None:
        """Fixed branding asset (logo); None if unset or unavailable"""
        url = self.config.assets.branding_url
        if not url:
            return None
        async with self._client_scope() as client:
            return await self.fetch_image(client, url)

    async def fetch_image(self, client: httpx.AsyncClient, url: str) -> CachedImage | None:
        """One image; None on any failure"""
        try:
            response = await client.get(url, follow_redirects=True)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Image fetch failed: {url}: {e}")
            return None
        return decode_image(url, response.content, response.headers.get("content-type"))

    async def _fetch_into(
        self,
        client: httpx.AsyncClient,
        url: str,
        results: dict[str, CachedImage | None],
    ) -> None:
        results[url] = await self.fetch_image(client, url)
