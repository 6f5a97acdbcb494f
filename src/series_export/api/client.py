"""
Admin API client - export preview, export dataset, filter options

Responsibilities:
1. GET /admin/series/{id}/export/preview
2. GET /admin/series/{id}/export
3. GET /admin/majors, /admin/classes (filter choices)
4. unwrap the {"data": ...} envelope, map failures to DatasetFetchError

Test points:
- test_get_export_dataset: envelope unwrapped, scope sent as params
- test_dataset_http_error: non-2xx -> DatasetFetchError
- test_dataset_invalid_payload: missing data -> DatasetFetchError
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from ..config import RuntimeConfig, get_config
from ..interfaces import DatasetFetchError, IExportApi
from ..models import ExportDataset, ExportPreview, ExportScope, FilterOption

logger = logging.getLogger(__name__)


class SeriesExportApi(IExportApi):
    """httpx implementation of the export endpoints"""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        config: RuntimeConfig | None = None,
    ):
        self.config = config or get_config()
        self._owns_client = client is None
        self.client = client or self._build_client()

    def _build_client(self) -> httpx.AsyncClient:
        headers = {"Accept": "application/json"}
        if self.config.api.token:
            headers["Authorization"] = f"Bearer {self.config.api.token}"
        return httpx.AsyncClient(
            base_url=self.config.api.base_url,
            headers=headers,
            timeout=self.config.api.timeout_sec,
        )

    async def __aenter__(self) -> SeriesExportApi:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def get_export_preview(self, series_id: str, scope: ExportScope) -> ExportPreview:
        data = await self._get_data(f"/admin/series/{series_id}/export/preview", scope.to_params())
        try:
            return ExportPreview.model_validate(data)
        except ValidationError as e:
            raise DatasetFetchError(f"Invalid export preview for series {series_id}: {e}") from e

    async def get_export_dataset(self, series_id: str, scope: ExportScope) -> ExportDataset:
        data = await self._get_data(f"/admin/series/{series_id}/export", scope.to_params())
        try:
            dataset = ExportDataset.model_validate(data)
        except ValidationError as e:
            raise DatasetFetchError(f"Invalid export dataset for series {series_id}: {e}") from e

        logger.info(
            f"Fetched export dataset for series {series_id}: "
            f"{len(dataset.portfolios)} portfolios, scope={scope.to_params()}"
        )
        return dataset

    async def list_majors(self) -> list[FilterOption]:
        data = await self._get_data("/admin/majors", {"limit": 100})
        return [FilterOption.model_validate(item) for item in data or []]

    async def list_classes(self, jurusan_id: str | None = None) -> list[FilterOption]:
        params: dict[str, Any] = {"limit": 100}
        if jurusan_id:
            params["jurusan_id"] = jurusan_id
        data = await self._get_data("/admin/classes", params)
        return [FilterOption.model_validate(item) for item in data or []]

    async def _get_data(self, path: str, params: dict[str, Any]) -> Any:
        """GET and unwrap the response envelope"""
        try:
            response = await self.client.get(path, params=params)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise DatasetFetchError(
                f"GET {path} failed with HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise DatasetFetchError(f"GET {path} failed: {e}") from e
        except ValueError as e:
            raise DatasetFetchError(f"GET {path} returned invalid JSON") from e

        if not isinstance(body, dict) or body.get("data") is None:
            raise DatasetFetchError(f"GET {path} returned no data")
        return body["data"]
