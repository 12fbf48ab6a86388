"""
Render component - published publication to paginated document.

Pipeline: fetch (public visibility only) -> HTML to text blocks -> page
layout -> backend stream.

Invariants:
- Only publicly visible publications are rendered.
- A missing cover image or logo omits that element; it never fails a render.
- The disposition flag changes headers only, never the bytes.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from axotl.domain.entities import PublicationView
from axotl.domain.errors import NotFoundError
from axotl.rules.models import RenderRules

from .layout import DocumentData, LayoutEngine, Page
from .models import RenderDocumentInput, RenderedDocument
from .ports import DocumentBackendPort, FileStorePort, PublicationRepoPort
from .richtext import html_to_blocks

logger = logging.getLogger(__name__)

FILENAME_MAX = 50
DEFAULT_FILENAME = "publicacion"


def slugify_filename(title: str) -> str:
    """Lowercase, non-alphanumerics to "_", collapse repeats, cut to 50, add ".pdf"."""
    slug = re.sub(r"[^a-z0-9]", "_", (title or "").lower())
    slug = re.sub(r"_+", "_", slug)[:FILENAME_MAX]
    return f"{slug or DEFAULT_FILENAME}.pdf"


class DocumentRenderer:
    def __init__(
        self,
        publications: PublicationRepoPort,
        filestore: FileStorePort,
        backend: DocumentBackendPort,
        rules: RenderRules,
        asset_root: Path | None = None,
    ):
        self.publications = publications
        self.filestore = filestore
        self.backend = backend
        self.rules = rules
        self.asset_root = asset_root or Path.cwd()
        self.layout_engine = LayoutEngine(rules, backend.measurer)

    def fetch(self, publication_id: int) -> PublicationView:
        view = self.publications.get_view(publication_id, public_only=True)
        if view is None:
            raise NotFoundError(
                "Publicación no encontrada o no disponible", code="publication_not_found"
            )
        return view

    def build_pages(self, publication: PublicationView) -> list[Page]:
        doc = DocumentData(
            title=publication.title,
            author=publication.author_name,
            type_name=publication.type_name,
            published_at=publication.published_at,
            summary=publication.summary,
            blocks=html_to_blocks(publication.content),
            references=publication.references,
            cover=self._load_cover(publication.cover_image_path),
            logo=self._load_logo(),
        )
        return self.layout_engine.layout(doc)

    def render(self, inp: RenderDocumentInput) -> RenderedDocument:
        """Fetch and lay out eagerly so lookup errors surface before streaming starts."""
        publication = self.fetch(inp.publication_id)
        pages = self.build_pages(publication)
        logger.info(
            "Rendering publication %s (%d pages, %s)",
            publication.id,
            len(pages),
            "inline" if inp.view else "attachment",
        )
        return RenderedDocument(
            filename=slugify_filename(publication.title),
            media_type=self.backend.media_type,
            disposition="inline" if inp.view else "attachment",
            chunks=self.backend.stream(pages),
        )

    # --- Assets ---

    def _load_cover(self, path: str | None) -> bytes | None:
        if not path:
            return None
        try:
            if self.filestore.exists(path):
                return self.filestore.get(path)
        except (OSError, ValueError):
            pass
        logger.warning("Cover image missing, rendering without it: %s", path)
        return None

    def _load_logo(self) -> bytes | None:
        if not self.rules.logo_path:
            return None
        logo = Path(self.rules.logo_path)
        if not logo.is_absolute():
            logo = self.asset_root / logo
        if not logo.is_file():
            logger.warning("Logo not found, rendering without it: %s", logo)
            return None
        return logo.read_bytes()
