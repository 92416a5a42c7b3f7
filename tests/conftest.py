"""Shared fixtures.

``FixedWidthOracle`` runs the real layout code with a fixed glyph advance
(half the font size, full size for CJK) so heights are exact and predictable:
at 20px with ``line_height=1.0`` every line is 20px tall and a 100px box holds
ten Latin glyphs per line.
"""

import re

import pytest

from cardkit.fonts import FontFaces
from cardkit.layout import CJK_RANGES
from cardkit.measure import MeasurementOracle
from cardkit.typography import ShrinkPolicy, Typography

CJK_CHAR = re.compile(f"[{CJK_RANGES}]")


class FixedWidthOracle(MeasurementOracle):
    def __init__(self, content_width=100):
        super().__init__(
            faces=None,
            content_width=content_width,
            typography=Typography(
                font_size=20,
                line_height=1.0,
                letter_spacing_em=0.0,
                list_margin_em=0.5,
                list_indent_em=1.0,
                list_item_gap_em=0.0,
            ),
        )
        self.measured = []
        self.held_during_measure = []

    def advance(self, char, bold, font_size):
        if CJK_CHAR.match(char):
            return float(font_size)
        return font_size * 0.5

    def measure(self, text, font_size):
        self.measured.append((text, font_size))
        self.held_during_measure.append(self.busy)
        return super().measure(text, font_size)


@pytest.fixture
def oracle():
    return FixedWidthOracle()


@pytest.fixture
def policy():
    return ShrinkPolicy(default_size=20, step=2, min_size=10, tolerance=0.10)


@pytest.fixture(scope="session")
def builtin_faces():
    return FontFaces.builtin(28)


@pytest.fixture
def font_oracle(builtin_faces):
    return MeasurementOracle(builtin_faces)


def words(count, word="abcd"):
    """``count`` copies of ``word`` separated by single spaces.

    With :class:`FixedWidthOracle` at 20px, two four-letter words fit per line.
    """
    return " ".join([word] * count)
