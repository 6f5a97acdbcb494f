"""
Rendering - composed pages to PDF bytes

- pdf_renderer: reportlab canvas renderer
"""

from .pdf_renderer import PDFRenderer

__all__ = ["PDFRenderer"]
