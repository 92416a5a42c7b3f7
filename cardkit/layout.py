"""Line breaking for card bodies.

:func:`layout_nodes` is the only place where text is wrapped. The measurement
oracle reads ``TextLayout.height`` and the renderer draws ``TextLayout.lines``,
so a page measured to fit is drawn exactly as measured.

Wrapping follows the card body's CSS-like rules:

* whitespace and hard line breaks are preserved (``pre-wrap``)
* lines break between words and between any two CJK characters
* a word wider than the line breaks between characters (``break-word``)
* trailing whitespace hangs past the right edge and never forces a break
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from .markdown import BoldRun, LINE_BREAK, ListBlock, MarkdownNode, PlainRun
from .typography import Typography

CJK_RANGES = "\u2e80-\u9fff\uac00-\ud7af\uf900-\ufaff\ufe30-\ufe4f\uff00-\uffef"
SEGMENT_PATTERN = re.compile(rf"\s+|[{CJK_RANGES}]|[^\s{CJK_RANGES}]+")

Run = Tuple[str, bool]


@dataclass
class Fragment:
    text: str
    bold: bool
    x: float
    width: float


@dataclass
class LayoutLine:
    top: float
    height: float
    indent: float = 0.0
    fragments: List[Fragment] = field(default_factory=list)
    # Width up to the last non-space glyph; hanging spaces are excluded.
    ink_width: float = 0.0
    justify: bool = False
    bullet: bool = False

    @property
    def text(self) -> str:
        return "".join(fragment.text for fragment in self.fragments)


@dataclass
class TextLayout:
    font_size: float
    content_width: float
    lines: List[LayoutLine]
    height: float


class _LineFiller:
    def __init__(self, meter, font_size: float, max_width: float, line_height: float,
                 indent: float = 0.0) -> None:
        self.meter = meter
        self.font_size = font_size
        self.max_width = max_width
        self.line_height = line_height
        self.indent = indent
        self.lines: List[LayoutLine] = []
        self._cursor = 0.0
        self._top = 0.0
        self._line = None

    def start(self, top: float, bullet: bool = False) -> None:
        self._top = top
        self._line = LayoutLine(top=top, height=self.line_height, indent=self.indent,
                                bullet=bullet)
        self._cursor = 0.0

    def _wrap(self) -> None:
        self._line.justify = True
        self.lines.append(self._line)
        self.start(self._top + self.line_height)

    def _place(self, text: str, bold: bool, width: float, ink: bool) -> None:
        fragments = self._line.fragments
        if fragments and fragments[-1].bold == bold:
            fragments[-1].text += text
            fragments[-1].width += width
        else:
            fragments.append(Fragment(text=text, bold=bold, x=self._cursor, width=width))
        self._cursor += width
        if ink:
            self._line.ink_width = self._cursor

    def add(self, text: str, bold: bool) -> None:
        for segment in SEGMENT_PATTERN.findall(text):
            width = self.meter.text_width(segment, bold, self.font_size)
            if segment.isspace():
                self._place(segment, bold, width, ink=False)
                continue
            if self._cursor + width <= self.max_width:
                self._place(segment, bold, width, ink=True)
                continue
            if self._cursor > 0:
                self._wrap()
            if width <= self.max_width:
                self._place(segment, bold, width, ink=True)
                continue
            for char in segment:
                advance = self.meter.text_width(char, bold, self.font_size)
                if self._cursor + advance > self.max_width and self._cursor > 0:
                    self._wrap()
                self._place(char, bold, advance, ink=True)

    def finish(self) -> float:
        """Close the current hard line and return the top of the next one."""
        self.lines.append(self._line)
        return self._top + self.line_height


def _hard_lines(runs: Sequence[Run]) -> List[List[Run]]:
    hard_lines: List[List[Run]] = [[]]
    for text, bold in runs:
        pieces = text.split(LINE_BREAK)
        for index, piece in enumerate(pieces):
            if index:
                hard_lines.append([])
            if piece:
                hard_lines[-1].append((piece, bold))
    if runs and runs[-1][0].endswith(LINE_BREAK):
        hard_lines.pop()
    return hard_lines


def layout_nodes(
    nodes: Sequence[MarkdownNode],
    font_size: float,
    content_width: float,
    typography: Typography,
    meter,
) -> TextLayout:
    line_height = typography.line_box(font_size)
    lines: List[LayoutLine] = []
    top = 0.0
    pending: List[Run] = []

    def flush_inline(top: float) -> float:
        if not pending:
            return top
        filler = _LineFiller(meter, font_size, content_width, line_height)
        for hard_line in _hard_lines(pending):
            filler.start(top)
            for text, bold in hard_line:
                filler.add(text, bold)
            top = filler.finish()
        lines.extend(filler.lines)
        pending.clear()
        return top

    for node in nodes:
        if isinstance(node, ListBlock):
            top = flush_inline(top)
            top += font_size * typography.list_margin_em
            indent = font_size * typography.list_indent_em
            filler = _LineFiller(meter, font_size, content_width - indent, line_height,
                                 indent=indent)
            for index, item in enumerate(node.items):
                if index:
                    top += font_size * typography.list_item_gap_em
                filler.start(top, bullet=True)
                filler.add(item, False)
                top = filler.finish()
            lines.extend(filler.lines)
            top += font_size * typography.list_margin_em
        elif isinstance(node, BoldRun):
            pending.append((node.text, True))
        elif isinstance(node, PlainRun):
            pending.append((node.text, False))

    top = flush_inline(top)
    return TextLayout(font_size=font_size, content_width=content_width, lines=lines,
                      height=top)
