"""
Page layout for rendered publications.

Produces a backend-independent page model: positioned text lines, images and
rules on letter-sized pages. Coordinates are points measured from the top-left
corner; a line's y is its baseline.

Page order: cover, metadata, summary, content (as many pages as needed),
references (only when there are references).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Protocol

from axotl.rules.models import RenderRules

from .richtext import TextBlock

PageKind = Literal["cover", "metadata", "summary", "content", "references"]
FontStyle = Literal["regular", "bold", "italic"]
Align = Literal["left", "center", "justify"]

LEADING = 1.4
HEADING_SIZES = {1: 22.0, 2: 19.0, 3: 16.0, 4: 14.0, 5: 13.0, 6: 12.0}
TITLE_SIZE = 24.0
META_SIZE = 14.0
SECTION_SIZE = 16.0
CODE_SIZE = 10.0
TABLE_SIZE = 11.0
SUMMARY_INDENT = 20.0
LIST_INDENT = 18.0
QUOTE_INDENT = 20.0
LOGO_WIDTH = 250.0
LOGO_HEIGHT = 100.0
LOGO_RIGHT_GAP = 30.0
LOGO_PLATE_PADDING = 5.0
LOGO_PLATE_ALPHA = 0.7

AUTHOR_LABEL = "Autor:"
DATE_LABEL = "Fecha de publicación:"
TYPE_LABEL = "Tipo de publicación:"
SUMMARY_HEADING = "Resumen"
REFERENCES_HEADING = "Referencias"


class TextMeasurer(Protocol):
    def width(self, text: str, font: FontStyle, size: float) -> float:
        """Advance width of text in points."""
        ...


class ApproxMeasurer:
    """Fixed-ratio measurer; every character is ratio * size wide."""

    def __init__(self, ratio: float = 0.5):
        self.ratio = ratio

    def width(self, text: str, font: FontStyle, size: float) -> float:
        return len(text) * size * self.ratio


# --- Page model ---


@dataclass(frozen=True)
class TextLine:
    words: tuple[str, ...]
    x: float
    y: float
    font: FontStyle
    size: float
    word_spacing: float

    @property
    def text(self) -> str:
        return " ".join(self.words)


@dataclass(frozen=True)
class ImageBox:
    data: bytes
    x: float
    y: float
    width: float
    height: float
    fill: bool = False  # stretch to the box instead of keeping the aspect ratio
    plate_alpha: float | None = None  # white backing plate behind the image


@dataclass(frozen=True)
class RuleLine:
    x0: float
    x1: float
    y: float


@dataclass
class Page:
    kind: PageKind
    lines: list[TextLine] = field(default_factory=list)
    images: list[ImageBox] = field(default_factory=list)
    rules: list[RuleLine] = field(default_factory=list)

    def text(self) -> str:
        return "\n".join(line.text for line in self.lines)


@dataclass(frozen=True)
class DocumentData:
    title: str
    author: str
    type_name: str
    published_at: datetime | None
    summary: str
    blocks: list[TextBlock]
    references: str
    cover: bytes | None = None
    logo: bytes | None = None


# --- Layout ---


class LayoutEngine:
    def __init__(self, rules: RenderRules, measurer: TextMeasurer):
        self.rules = rules
        self.measurer = measurer
        self.width = rules.page_width
        self.height = rules.page_height
        self.margin = rules.margin
        self.body_size = rules.body_font_size
        self._pages: list[Page] = []
        self._y = 0.0

    def layout(self, doc: DocumentData) -> list[Page]:
        self._pages = []
        self._cover(doc)
        self._metadata(doc)
        self._summary(doc)
        self._content(doc)
        if doc.references.strip():
            self._references(doc)
        return self._pages

    # --- Sections ---

    def _cover(self, doc: DocumentData) -> None:
        page = self._new_page("cover")
        if doc.cover:
            page.images.append(ImageBox(doc.cover, 0, 0, self.width, self.height, fill=True))
        if doc.logo:
            page.images.append(
                ImageBox(
                    doc.logo,
                    self.width - LOGO_WIDTH - LOGO_RIGHT_GAP,
                    self.height - LOGO_HEIGHT,
                    LOGO_WIDTH,
                    LOGO_HEIGHT,
                    plate_alpha=LOGO_PLATE_ALPHA,
                )
            )

    def _metadata(self, doc: DocumentData) -> None:
        self._new_page("metadata")
        date = doc.published_at.strftime(self.rules.date_format) if doc.published_at else ""
        entries: list[tuple[str, FontStyle, float, float]] = [
            (doc.title, "bold", TITLE_SIZE, 2.0),
            (f"{AUTHOR_LABEL} {doc.author}", "regular", META_SIZE, 1.0),
            (f"{DATE_LABEL} {date}".rstrip(), "regular", META_SIZE, 1.0),
            (f"{TYPE_LABEL} {doc.type_name}", "regular", META_SIZE, 0.0),
        ]
        usable = self.width - 2 * self.margin

        wrapped = [
            (self._wrap(text, font, size, usable), font, size, gap)
            for text, font, size, gap in entries
        ]
        block_height = sum(
            len(lines) * size * LEADING + gap * size * LEADING for lines, _, size, gap in wrapped
        )
        self._y = max(self.margin, (self.height - block_height) / 2)
        for lines, font, size, gap in wrapped:
            for words in lines:
                self._centered(words, font, size)
            self._y += gap * size * LEADING

    def _summary(self, doc: DocumentData) -> None:
        self._new_page("summary")
        self._section_heading(SUMMARY_HEADING)
        self._paragraph(
            doc.summary,
            "regular",
            self.body_size,
            x=self.margin,
            width=self.width - 3 * self.margin,
            align="justify",
            first_indent=SUMMARY_INDENT,
        )

    def _content(self, doc: DocumentData) -> None:
        self._new_page("content")
        usable = self.width - 2 * self.margin
        for block in doc.blocks:
            if block.kind == "heading":
                size = HEADING_SIZES.get(block.level, self.body_size)
                self._space(0.5 * size)
                self._paragraph(block.text, "bold", size, self.margin, usable, "left")
            elif block.kind == "paragraph":
                self._paragraph(block.text, "regular", self.body_size, self.margin, usable, "justify")
            elif block.kind == "list_item":
                indent = LIST_INDENT * max(1, block.level)
                self._paragraph(
                    block.text, "regular", self.body_size, self.margin + indent, usable - indent, "left"
                )
            elif block.kind == "blockquote":
                self._paragraph(
                    block.text,
                    "italic",
                    self.body_size,
                    self.margin + QUOTE_INDENT,
                    usable - QUOTE_INDENT,
                    "justify",
                )
            elif block.kind == "code":
                self._code(block.text, usable)
            elif block.kind == "rule":
                self._rule()
            elif block.kind == "table_row":
                self._paragraph(block.text, "regular", TABLE_SIZE, self.margin, usable, "left")
            self._space(0.4 * self.body_size)

    def _references(self, doc: DocumentData) -> None:
        self._new_page("references")
        self._section_heading(REFERENCES_HEADING)
        usable = self.width - 2 * self.margin
        self._paragraph(doc.references.strip(), "regular", self.body_size, self.margin, usable, "left")

    # --- Flow primitives ---

    def _new_page(self, kind: PageKind) -> Page:
        page = Page(kind=kind)
        self._pages.append(page)
        self._y = self.margin
        return page

    @property
    def _page(self) -> Page:
        return self._pages[-1]

    def _space(self, amount: float) -> None:
        self._y += amount

    def _ensure_room(self, height: float) -> None:
        if self._y + height > self.height - self.margin and self._y > self.margin:
            self._new_page(self._page.kind)

    def _section_heading(self, text: str) -> None:
        for words in self._wrap(text, "bold", SECTION_SIZE, self.width - 2 * self.margin):
            self._centered(words, "bold", SECTION_SIZE)
        self._space(SECTION_SIZE * LEADING)

    def _centered(self, words: list[str], font: FontStyle, size: float) -> None:
        space = self.measurer.width(" ", font, size)
        line_width = self._words_width(words, font, size) + space * max(0, len(words) - 1)
        self._ensure_room(size * LEADING)
        self._page.lines.append(
            TextLine(tuple(words), (self.width - line_width) / 2, self._y + size, font, size, space)
        )
        self._y += size * LEADING

    def _paragraph(
        self,
        text: str,
        font: FontStyle,
        size: float,
        x: float,
        width: float,
        align: Align,
        first_indent: float = 0.0,
    ) -> None:
        space = self.measurer.width(" ", font, size)
        for hard_line in text.split("\n"):
            lines = self._wrap(hard_line, font, size, width, first_indent)
            for i, words in enumerate(lines):
                indent = first_indent if i == 0 else 0.0
                spacing = space
                # the last line of a paragraph is never stretched
                if align == "justify" and i < len(lines) - 1 and len(words) > 1:
                    free = width - indent - self._words_width(words, font, size)
                    spacing = max(space, free / (len(words) - 1))
                self._ensure_room(size * LEADING)
                self._page.lines.append(
                    TextLine(tuple(words), x + indent, self._y + size, font, size, spacing)
                )
                self._y += size * LEADING
            first_indent = 0.0

    def _code(self, text: str, width: float) -> None:
        char_width = self.measurer.width("M", "regular", CODE_SIZE) or 1.0
        max_chars = max(1, int(width // char_width))
        for source_line in text.split("\n"):
            chunks = [source_line[i : i + max_chars] for i in range(0, len(source_line), max_chars)]
            for chunk in chunks or [""]:
                self._ensure_room(CODE_SIZE * LEADING)
                if chunk:
                    self._page.lines.append(
                        TextLine((chunk,), self.margin, self._y + CODE_SIZE, "regular", CODE_SIZE, 0.0)
                    )
                self._y += CODE_SIZE * LEADING

    def _rule(self) -> None:
        self._ensure_room(self.body_size * LEADING)
        y = self._y + self.body_size * LEADING / 2
        self._page.rules.append(RuleLine(self.margin, self.width - self.margin, y))
        self._y += self.body_size * LEADING

    # --- Measuring ---

    def _words_width(self, words: list[str], font: FontStyle, size: float) -> float:
        return sum(self.measurer.width(w, font, size) for w in words)

    def _wrap(
        self, text: str, font: FontStyle, size: float, width: float, first_indent: float = 0.0
    ) -> list[list[str]]:
        """Greedy word wrap. A word wider than the line gets a line of its own."""
        words = text.split()
        if not words:
            return []
        space = self.measurer.width(" ", font, size)
        lines: list[list[str]] = []
        current: list[str] = []
        current_width = 0.0
        available = width - first_indent
        for word in words:
            w = self.measurer.width(word, font, size)
            needed = w if not current else current_width + space + w
            if current and needed > available:
                lines.append(current)
                current, current_width = [word], w
                available = width
            else:
                current.append(word)
                current_width = needed
        lines.append(current)
        return lines
