"""
Render component port definitions.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Protocol

from axotl.ports.filestore import FileStorePort
from axotl.ports.repo import PublicationRepoPort

from .layout import Page, TextMeasurer


class DocumentBackendPort(Protocol):
    media_type: str
    measurer: TextMeasurer

    def stream(self, pages: list[Page]) -> Iterator[bytes]:
        """Encode pages, yielding output as each page completes."""
        ...


__all__ = ["DocumentBackendPort", "FileStorePort", "PublicationRepoPort"]
