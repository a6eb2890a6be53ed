"""
PDF export for Bedtime Books stories.
"""

from .builder import (
    DEFAULT_LAYOUT,
    PageLayoutConfig,
    StorybookPDFBuilder,
    story_pdf_filename,
)
from .image_sources import ImageSource, ImageSourceKind, classify_image_reference

__all__ = [
    "DEFAULT_LAYOUT",
    "ImageSource",
    "ImageSourceKind",
    "PageLayoutConfig",
    "StorybookPDFBuilder",
    "classify_image_reference",
    "story_pdf_filename",
]
