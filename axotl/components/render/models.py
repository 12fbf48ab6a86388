"""
Render component input/output models.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Literal

Disposition = Literal["inline", "attachment"]


@dataclass(frozen=True)
class RenderDocumentInput:
    publication_id: int
    view: bool = False  # True: show inline, False: download as attachment


@dataclass(frozen=True)
class RenderedDocument:
    filename: str
    media_type: str
    disposition: Disposition
    chunks: Iterator[bytes]

    @property
    def content_disposition(self) -> str:
        return build_content_disposition(self.filename, self.disposition)


def build_content_disposition(filename: str, disposition: Disposition) -> str:
    safe_filename = filename.replace('"', '\\"').replace("\n", "_")
    return f'{disposition}; filename="{safe_filename}"'
