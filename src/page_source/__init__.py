"""
Page sources (document -> per-page 8-bit grayscale rasters).

This package is intentionally limited to rendering:
- It renders each page to a fixed pixel width.
- It performs NO pagination, trimming, or content analysis.
- It is the ONLY package allowed to open input documents.
"""

from .contracts import PageSourceConfig, PageSourceName, RenderError
from .engines import ImageSequencePageSource, PageSource, PdfPageSource
from .module import guess_engine, open_page_source
from .selection import canonical_page_selection, parse_page_selection

__all__ = [
    "ImageSequencePageSource",
    "PageSource",
    "PageSourceConfig",
    "PageSourceName",
    "PdfPageSource",
    "RenderError",
    "canonical_page_selection",
    "guess_engine",
    "open_page_source",
    "parse_page_selection",
]
