"""
Asset materialization - every referenced image fetched once per run
"""

from .materializer import AssetMaterializer, batched, collect_image_urls, decode_image

__all__ = ["AssetMaterializer", "batched", "collect_image_urls", "decode_image"]
