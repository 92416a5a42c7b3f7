"""Height measurement against the production typography.

The oracle lays text out on a detached 1x1 Pillow surface that is created on
first use and reused for every later call. Because that surface and the glyph
cache are mutated in place, only one run may measure at a time: callers take
the oracle with :meth:`MeasurementOracle.acquire` (or ``with oracle.session()``)
for the duration of a pagination run and release it afterwards.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Tuple

from PIL import Image, ImageDraw

from .fonts import FontFaces, load_font_faces
from .layout import TextLayout, layout_nodes
from .markdown import tokenize
from .typography import CONTENT_WIDTH, DEFAULT_TYPOGRAPHY, Typography


class MeasurementOracle:
    def __init__(
        self,
        faces: FontFaces,
        content_width: float = CONTENT_WIDTH,
        typography: Typography = DEFAULT_TYPOGRAPHY,
    ) -> None:
        self.faces = faces
        self.content_width = content_width
        self.typography = typography
        self._surface: Optional[ImageDraw.ImageDraw] = None
        self._advances: Dict[Tuple[str, bool, float], float] = {}
        self._lock = threading.Lock()

    def acquire(self, blocking: bool = True) -> bool:
        return self._lock.acquire(blocking)

    def release(self) -> None:
        self._lock.release()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def session(self) -> Iterator["MeasurementOracle"]:
        self.acquire()
        try:
            yield self
        finally:
            self.release()

    def _scratch(self) -> ImageDraw.ImageDraw:
        if self._surface is None:
            self._surface = ImageDraw.Draw(Image.new("L", (1, 1)))
        return self._surface

    def advance(self, char: str, bold: bool, font_size: float) -> float:
        """Horizontal advance of one character, letter spacing included."""
        key = (char, bold, font_size)
        cached = self._advances.get(key)
        if cached is None:
            font = self.faces.face(bold, font_size)
            cached = self._scratch().textlength(char, font=font)
            cached += self.typography.letter_spacing(font_size)
            self._advances[key] = cached
        return cached

    def text_width(self, text: str, bold: bool, font_size: float) -> float:
        return sum(self.advance(char, bold, font_size) for char in text)

    def layout(self, text: str, font_size: float) -> TextLayout:
        return layout_nodes(
            tokenize(text),
            font_size,
            self.content_width,
            self.typography,
            meter=self,
        )

    def measure(self, text: str, font_size: float) -> float:
        return self.layout(text, font_size).height


_default_oracle: Optional[MeasurementOracle] = None
_default_lock = threading.Lock()


def default_oracle(debug: bool = False) -> MeasurementOracle:
    """Process-wide oracle built from the default font stack."""
    global _default_oracle
    with _default_lock:
        if _default_oracle is None:
            if debug:
                print("[DEBUG] Creating shared measurement oracle")
            _default_oracle = MeasurementOracle(load_font_faces(debug=debug))
        return _default_oracle
