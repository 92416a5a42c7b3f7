"""Typography contract shared by the measurement oracle and the card renderer.

Every value here feeds both :mod:`cardkit.measure` and :mod:`cardkit.render`
through :mod:`cardkit.layout`. Changing one without the other would let a page
that "fits" overflow once drawn, so they live in a single place.
"""

from __future__ import annotations

from dataclasses import dataclass, field


CARD_SIZE = (600, 800)
CARD_PADDING = 60
CONTENT_WIDTH = CARD_SIZE[0] - CARD_PADDING * 2
# Body height for oracles without Pillow faces, whose chrome cannot be measured.
DEFAULT_SAFE_HEIGHT = 520

FONT_FAMILY = "Noto Sans SC"
BASE_FONT_SIZE = 28
LINE_HEIGHT = 1.8
LETTER_SPACING_EM = 0.025
FONT_WEIGHT = 500

MIN_FONT_SIZE = 20
FONT_SIZE_STEP = 2
OVERFLOW_TOLERANCE = 0.10

LIST_MARGIN_EM = 0.5
LIST_INDENT_EM = 1.2
LIST_ITEM_GAP_EM = 0.25
BULLET = "•"


@dataclass(frozen=True)
class Typography:
    font_family: str = FONT_FAMILY
    font_size: int = BASE_FONT_SIZE
    line_height: float = LINE_HEIGHT
    letter_spacing_em: float = LETTER_SPACING_EM
    font_weight: int = FONT_WEIGHT
    list_margin_em: float = LIST_MARGIN_EM
    list_indent_em: float = LIST_INDENT_EM
    list_item_gap_em: float = LIST_ITEM_GAP_EM

    def line_box(self, font_size: float) -> float:
        return font_size * self.line_height

    def letter_spacing(self, font_size: float) -> float:
        return font_size * self.letter_spacing_em


@dataclass(frozen=True)
class ShrinkPolicy:
    """Font-size negotiation bounds for near-miss overflows."""

    default_size: int = BASE_FONT_SIZE
    step: int = FONT_SIZE_STEP
    min_size: int = MIN_FONT_SIZE
    tolerance: float = OVERFLOW_TOLERANCE

    def __post_init__(self) -> None:
        if self.step <= 0:
            raise ValueError(f"Font size step must be positive, got {self.step}")
        if self.min_size <= 0 or self.min_size > self.default_size:
            raise ValueError(
                f"Minimum font size must be within (0, {self.default_size}], "
                f"got {self.min_size}"
            )
        if self.tolerance < 0:
            raise ValueError(f"Overflow tolerance cannot be negative: {self.tolerance}")


@dataclass(frozen=True)
class Box:
    container_height: float
    content_width: int = CONTENT_WIDTH
    typography: Typography = field(default_factory=Typography)


DEFAULT_TYPOGRAPHY = Typography()
DEFAULT_SHRINK_POLICY = ShrinkPolicy()
