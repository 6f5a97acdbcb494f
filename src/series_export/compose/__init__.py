"""
Document composition - dataset + caches -> ordered pages
"""

from .composer import DocumentComposer, truncate_text

__all__ = ["DocumentComposer", "truncate_text"]
