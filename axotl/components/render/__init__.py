"""
Render component - publication to PDF.
"""

from .component import DocumentRenderer, slugify_filename
from .layout import ApproxMeasurer, DocumentData, LayoutEngine, Page, TextLine
from .models import (
    RenderDocumentInput,
    RenderedDocument,
    build_content_disposition,
)
from .richtext import TextBlock, blocks_to_text, html_to_blocks

__all__ = [
    "DocumentRenderer",
    "slugify_filename",
    # Layout
    "ApproxMeasurer",
    "DocumentData",
    "LayoutEngine",
    "Page",
    "TextLine",
    # Content transform
    "TextBlock",
    "html_to_blocks",
    "blocks_to_text",
    # Models
    "RenderDocumentInput",
    "RenderedDocument",
    "build_content_disposition",
]
