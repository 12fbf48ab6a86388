"""
Rich-text HTML to text blocks.

The editor stores content as HTML. The document layout works on a flat list
of blocks whose text keeps inline formatting as plain-text markers:

    **bold**  _italic_  __underline__  ~~strike~~  `code`  ==highlight==
    ^sup^  ~sub~  text [href]

Block prefixes: ordered items "N. ", bullets "• ", task items "[x] "/"[ ] ",
quotes "> ". Table cells are joined with " | ".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Literal

BlockKind = Literal[
    "heading", "paragraph", "list_item", "blockquote", "code", "rule", "table_row"
]

INLINE_MARKERS: dict[str, str] = {
    "strong": "**",
    "b": "**",
    "em": "_",
    "i": "_",
    "u": "__",
    "s": "~~",
    "strike": "~~",
    "del": "~~",
    "code": "`",
    "mark": "==",
    "sup": "^",
    "sub": "~",
}

HEADINGS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}

# Containers that only separate text when nested inside a list item or table cell
SOFT_BLOCKS = {"p", "div", "label"}

BULLET = "• "
RULE_TEXT = "---"
CELL_SEPARATOR = " | "

_LINE_BREAK = "\x00"
_WS = re.compile(r"\s+")


@dataclass(frozen=True)
class TextBlock:
    kind: BlockKind
    text: str
    level: int = 0  # heading level, or list nesting depth starting at 1


class _BlockBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.blocks: list[TextBlock] = []
        self._buf: list[str] = []
        self._kind: BlockKind = "paragraph"
        self._level = 0
        self._prefix = ""
        self._quote_depth = 0
        self._in_pre = False
        self._lists: list[list[str | int]] = []  # [list tag, next number]
        self._li_depth = 0
        self._links: list[str | None] = []
        self._cells: list[str] | None = None

    # --- Parser callbacks ---

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        attr = dict(attrs)

        if tag in HEADINGS:
            self._flush()
            self._kind, self._level = "heading", HEADINGS[tag]
        elif tag in SOFT_BLOCKS:
            if self._li_depth or self._cells is not None:
                self._buf.append(" ")
            else:
                self._flush()
        elif tag == "blockquote":
            self._flush()
            self._quote_depth += 1
        elif tag in ("ul", "ol"):
            self._flush()
            self._lists.append([tag, int(attr.get("start") or 1)])
        elif tag == "li":
            self._flush()
            self._li_depth += 1
            self._kind, self._level = "list_item", len(self._lists) or 1
            self._prefix = self._item_prefix(attr)
        elif tag == "pre":
            self._flush()
            self._in_pre = True
            self._kind = "code"
        elif tag == "hr":
            self._flush()
            self.blocks.append(TextBlock("rule", RULE_TEXT))
        elif tag == "br":
            self._buf.append("\n" if self._in_pre else _LINE_BREAK)
        elif tag == "tr":
            self._flush()
            self._cells = []
        elif tag in ("td", "th"):
            self._buf = []
        elif tag == "a":
            self._links.append(attr.get("href"))
        elif tag == "input" and attr.get("type") == "checkbox":
            pass
        elif tag in INLINE_MARKERS and not (tag == "code" and self._in_pre):
            self._buf.append(INLINE_MARKERS[tag])

    def handle_endtag(self, tag: str) -> None:
        if tag in HEADINGS:
            self._flush()
        elif tag in SOFT_BLOCKS:
            if not (self._li_depth or self._cells is not None):
                self._flush()
        elif tag == "blockquote":
            self._flush()
            self._quote_depth = max(0, self._quote_depth - 1)
        elif tag in ("ul", "ol"):
            self._flush()
            if self._lists:
                self._lists.pop()
            self._resume_item()
        elif tag == "li":
            self._flush()
            self._li_depth = max(0, self._li_depth - 1)
            self._resume_item()
        elif tag == "pre":
            self._flush()
            self._in_pre = False
        elif tag in ("td", "th"):
            if self._cells is not None:
                self._cells.append(self._normalize("".join(self._buf)))
            self._buf = []
        elif tag == "tr":
            if self._cells is not None:
                row = CELL_SEPARATOR.join(self._cells)
                if row.strip(" |"):
                    self.blocks.append(TextBlock("table_row", row))
            self._cells = None
            self._buf = []
        elif tag == "a":
            href = self._links.pop() if self._links else None
            if href:
                self._buf.append(f" [{href}]")
        elif tag in INLINE_MARKERS and not (tag == "code" and self._in_pre):
            self._buf.append(INLINE_MARKERS[tag])

    def handle_data(self, data: str) -> None:
        self._buf.append(data)

    def close(self) -> None:
        super().close()
        self._flush()

    # --- Internals ---

    def _item_prefix(self, attr: dict[str, str | None]) -> str:
        if attr.get("data-type") == "taskItem" or "data-checked" in attr:
            return "[x] " if attr.get("data-checked") == "true" else "[ ] "
        if self._lists and self._lists[-1][0] == "ol":
            number = int(self._lists[-1][1])
            self._lists[-1][1] = number + 1
            return f"{number}. "
        return BULLET

    def _resume_item(self) -> None:
        # text after a nested list still belongs to the enclosing item
        if self._li_depth:
            self._kind, self._level, self._prefix = "list_item", len(self._lists) or 1, ""

    def _normalize(self, text: str) -> str:
        text = _WS.sub(" ", text)
        text = re.sub(rf" ?{_LINE_BREAK} ?", "\n", text)
        return text.strip()

    def _flush(self) -> None:
        raw = "".join(self._buf)
        kind, level, prefix = self._kind, self._level, self._prefix
        self._buf = []
        self._kind, self._level, self._prefix = "paragraph", 0, ""

        if kind == "code":
            text = raw.strip("\n")
            if text.strip():
                self.blocks.append(TextBlock("code", text))
            return

        text = self._normalize(raw)
        if not text:
            return
        if kind == "list_item":
            self.blocks.append(TextBlock("list_item", prefix + text, level))
        elif kind == "heading":
            self.blocks.append(TextBlock("heading", text, level))
        elif self._quote_depth:
            self.blocks.append(TextBlock("blockquote", "> " + text))
        else:
            self.blocks.append(TextBlock("paragraph", text))


def html_to_blocks(html: str | None) -> list[TextBlock]:
    """Convert stored rich-text HTML into an ordered list of text blocks."""
    if not html:
        return []
    builder = _BlockBuilder()
    builder.feed(html)
    builder.close()
    return builder.blocks


def blocks_to_text(blocks: list[TextBlock]) -> str:
    """Plain-text rendition, one block per paragraph."""
    return "\n\n".join(b.text for b in blocks)
