"""
PDF backend drawing the page model with matplotlib.

One matplotlib Figure per page, sized in points (dpi 72), written through
PdfPages. Output is yielded page by page so callers can stream it.
"""

from __future__ import annotations

import io
import logging
import threading
from collections.abc import Iterator
from pathlib import Path

import matplotlib
import matplotlib.figure
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.font_manager import FontProperties
from matplotlib.ft2font import FT2Font
from matplotlib.lines import Line2D
from matplotlib.patches import Rectangle
from PIL import Image, UnidentifiedImageError

from axotl.components.render.layout import (
    LOGO_PLATE_PADDING,
    FontStyle,
    ImageBox,
    Page,
    TextLine,
)
from axotl.rules.models import FontFiles, RenderRules

logger = logging.getLogger(__name__)

DPI = 72
MPL_PREFIX = "mpl:"


def resolve_font_path(path: str) -> Path:
    """Paths starting with "mpl:" point into matplotlib's bundled data directory."""
    if path.startswith(MPL_PREFIX):
        return Path(matplotlib.get_data_path()) / path[len(MPL_PREFIX) :]
    return Path(path)


def check_font_assets(fonts: FontFiles) -> dict[FontStyle, Path]:
    """
    Verify every font file exists. Run once at startup.

    Raises FileNotFoundError naming the first missing font.
    """
    resolved: dict[FontStyle, Path] = {
        "regular": resolve_font_path(fonts.regular),
        "bold": resolve_font_path(fonts.bold),
        "italic": resolve_font_path(fonts.italic),
    }
    for style, path in resolved.items():
        if not path.is_file():
            logger.error("Required %s font not found: %s", style, path)
            raise FileNotFoundError(f"Required font not found: {path.name}")
    return resolved


class FontMeasurer:
    """
    Measures text advance widths with FreeType, in points.

    FT2Font keeps the size and laid-out text as object state, so the
    set_size/set_text/get_width_height sequence runs under a lock.
    """

    def __init__(self, font_paths: dict[FontStyle, Path]):
        self._fonts = {style: FT2Font(str(path)) for style, path in font_paths.items()}
        self._lock = threading.Lock()

    def width(self, text: str, font: FontStyle, size: float) -> float:
        if not text:
            return 0.0
        ft = self._fonts[font]
        with self._lock:
            ft.set_size(size, DPI)
            ft.set_text(text, 0.0)
            w, _ = ft.get_width_height()
        return float(w) / 64.0


class MatplotlibPdfBackend:
    media_type = "application/pdf"

    def __init__(self, rules: RenderRules, font_paths: dict[FontStyle, Path] | None = None):
        self.rules = rules
        self.font_paths = font_paths or check_font_assets(rules.fonts)
        self.measurer = FontMeasurer(self.font_paths)
        self._props = {
            style: FontProperties(fname=str(path)) for style, path in self.font_paths.items()
        }

    def stream(self, pages: list[Page]) -> Iterator[bytes]:
        """Yield PDF bytes as each page is written."""
        buf = io.BytesIO()
        sent = 0
        with PdfPages(buf) as pdf:
            for page in pages:
                fig = self._draw(page)
                pdf.savefig(fig)
                data = buf.getvalue()
                if len(data) > sent:
                    yield data[sent:]
                    sent = len(data)
        data = buf.getvalue()
        if len(data) > sent:
            yield data[sent:]

    def render(self, pages: list[Page]) -> bytes:
        return b"".join(self.stream(pages))

    # --- Drawing ---

    def _draw(self, page: Page) -> matplotlib.figure.Figure:
        width, height = self.rules.page_width, self.rules.page_height
        fig = matplotlib.figure.Figure(figsize=(width / DPI, height / DPI), dpi=DPI)

        for box in page.images:
            self._draw_image(fig, box)

        for rule in page.rules:
            fig.add_artist(
                Line2D(
                    [rule.x0 / width, rule.x1 / width],
                    [1 - rule.y / height, 1 - rule.y / height],
                    transform=fig.transFigure,
                    color="#888888",
                    linewidth=0.8,
                )
            )

        for line in page.lines:
            self._draw_line(fig, line)
        return fig

    def _draw_line(self, fig: matplotlib.figure.Figure, line: TextLine) -> None:
        width, height = self.rules.page_width, self.rules.page_height
        props = self._props[line.font].copy()
        props.set_size(line.size)
        y = 1 - line.y / height

        if len(line.words) == 1 or line.word_spacing <= 0:
            fig.text(line.x / width, y, line.text, fontproperties=props, va="baseline", ha="left")
            return

        # one text artist per word so the layout's word spacing is kept exactly
        x = line.x
        for word in line.words:
            fig.text(x / width, y, word, fontproperties=props, va="baseline", ha="left")
            x += self.measurer.width(word, line.font, line.size) + line.word_spacing

    def _draw_image(self, fig: matplotlib.figure.Figure, box: ImageBox) -> None:
        width, height = self.rules.page_width, self.rules.page_height
        try:
            image = Image.open(io.BytesIO(box.data))
            image.load()
        except (UnidentifiedImageError, OSError):
            logger.warning("Skipping unreadable image on rendered page")
            return

        if box.plate_alpha is not None:
            pad = LOGO_PLATE_PADDING
            fig.add_artist(
                Rectangle(
                    ((box.x - pad) / width, 1 - (box.y + box.height + pad) / height),
                    (box.width + 2 * pad) / width,
                    (box.height + 2 * pad) / height,
                    transform=fig.transFigure,
                    facecolor="white",
                    edgecolor="none",
                    alpha=box.plate_alpha,
                    zorder=0.5,
                )
            )

        ax = fig.add_axes(
            (
                box.x / width,
                1 - (box.y + box.height) / height,
                box.width / width,
                box.height / height,
            )
        )
        ax.set_axis_off()
        ax.set_zorder(1 if box.plate_alpha is not None else 0)
        ax.imshow(image.convert("RGBA"), aspect="auto" if box.fill else "equal")
        if not box.fill:
            ax.set_anchor("SE")
