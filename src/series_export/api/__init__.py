"""
Admin REST client

- client: preview / dataset / filter option endpoints (httpx)
"""

from .client import SeriesExportApi

__all__ = ["SeriesExportApi"]
