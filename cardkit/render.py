"""Card rendering with Pillow.

Body text is drawn from the same :class:`~cardkit.layout.TextLayout` the
measurement oracle uses, so the body occupies exactly the measured height.
The chrome around it (gradient, watermark, header, page marker, cover) is
plain decoration; its header and footer sizes determine the container height
handed to the paginator, see :func:`content_area_height`.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .fonts import FontFaces
from .layout import LayoutLine, TextLayout
from .measure import MeasurementOracle
from .paginate import Page
from .themes import RGB, Theme
from .typography import BULLET, CARD_PADDING, CARD_SIZE, DEFAULT_SAFE_HEIGHT

HEADER_LABEL = "THE RED BOOK"
HEADER_FONT_SIZE = 14
HEADER_LINE_HEIGHT = 20
HEADER_PADDING_BOTTOM = 16
HEADER_RULE_WIDTH = 1
HEADER_MARGIN_BOTTOM = 32
HEADER_DOT_SIZE = 8
HEADER_LETTER_SPACING_EM = 0.2

FOOTER_PADDING_TOP = 24
PAGE_NUMBER_SIZE = 36
PAGE_TOTAL_SIZE = 20
FOOTER_LINE_HEIGHT = 40

WATERMARK_TEXT = "RED BOOK"
WATERMARK_SIZE = 120
WATERMARK_SCALE = 1.5
WATERMARK_ALPHA = 13

COVER_KICKER = "INSIGHTS & GUIDE"
COVER_KICKER_SIZE = 14
COVER_TITLE_SIZE = 60
COVER_RULE_WIDTH = 4
COVER_PADDING = 32

Fill = Tuple[int, int, int, int]


def _alpha(color: RGB, opacity: float) -> Fill:
    return (*color, max(0, min(255, round(255 * opacity))))


def _font_line_height(font: ImageFont.FreeTypeFont) -> int:
    ascent, descent = font.getmetrics()
    return ascent + descent


def header_block_height(faces: FontFaces) -> int:
    label_font = faces.face(True, HEADER_FONT_SIZE)
    line = max(HEADER_LINE_HEIGHT, _font_line_height(label_font))
    return line + HEADER_PADDING_BOTTOM + HEADER_RULE_WIDTH + HEADER_MARGIN_BOTTOM


def footer_block_height(faces: FontFaces) -> int:
    number_font = faces.face(True, PAGE_NUMBER_SIZE)
    return FOOTER_PADDING_TOP + max(FOOTER_LINE_HEIGHT, _font_line_height(number_font))


def content_area_height(
    faces: Optional[FontFaces],
    card_size: Tuple[int, int] = CARD_SIZE,
    padding: int = CARD_PADDING,
) -> float:
    """Vertical space left for the body between header and footer chrome.

    ``faces`` is ``None`` only for oracles that measure without Pillow fonts
    (a custom :class:`~cardkit.measure.MeasurementOracle` subclass); the chrome
    cannot be measured then and ``DEFAULT_SAFE_HEIGHT`` is used. Oracles built
    by :func:`~cardkit.fonts.load_font_faces` always carry faces.
    """
    if faces is None:
        return DEFAULT_SAFE_HEIGHT
    height = card_size[1] - padding * 2 - header_block_height(faces) - footer_block_height(faces)
    return max(1, height)


def gradient_background(size: Tuple[int, int], theme: Theme) -> Image.Image:
    """Linear gradient following CSS angle semantics (0deg points up)."""
    width, height = size
    side = math.ceil(math.hypot(width, height))
    mask = Image.linear_gradient("L").resize((side, side), Image.BICUBIC)
    mask = mask.rotate(180 - theme.angle, resample=Image.BICUBIC)
    left = (side - width) // 2
    top = (side - height) // 2
    mask = mask.crop((left, top, left + width, top + height))
    start = Image.new("RGBA", size, (*theme.start, 255))
    end = Image.new("RGBA", size, (*theme.end, 255))
    return Image.composite(end, start, mask)


def _draw_watermark(canvas: Image.Image, faces: FontFaces, theme: Theme) -> None:
    font = faces.face(True, round(WATERMARK_SIZE * WATERMARK_SCALE))
    probe = ImageDraw.Draw(canvas)
    left, top, right, bottom = probe.textbbox((0, 0), WATERMARK_TEXT, font=font)
    layer = Image.new("RGBA", (right - left, bottom - top), (0, 0, 0, 0))
    ImageDraw.Draw(layer).text(
        (-left, -top),
        WATERMARK_TEXT,
        font=font,
        fill=(*theme.accent_color, WATERMARK_ALPHA),
        stroke_width=faces.stroke_width(True, font.size),
        stroke_fill=(*theme.accent_color, WATERMARK_ALPHA),
    )
    layer = layer.rotate(45, expand=True, resample=Image.BICUBIC)
    x = (layer.width - canvas.width) // 2
    y = (layer.height - canvas.height) // 2
    canvas.alpha_composite(layer.crop((x, y, x + canvas.width, y + canvas.height)))


def _draw_spaced(draw: ImageDraw.ImageDraw, origin: Tuple[float, float], text: str,
                 font: ImageFont.FreeTypeFont, fill: Fill, spacing: float,
                 stroke: int = 0) -> None:
    x, y = origin
    for char in text:
        draw.text((x, y), char, font=font, fill=fill, anchor="ls",
                  stroke_width=stroke, stroke_fill=fill)
        x += draw.textlength(char, font=font) + spacing


def _draw_header(draw: ImageDraw.ImageDraw, faces: FontFaces, theme: Theme,
                 width: int, padding: int) -> None:
    font = faces.face(True, HEADER_FONT_SIZE)
    line = max(HEADER_LINE_HEIGHT, _font_line_height(font))
    ascent, descent = font.getmetrics()
    baseline = padding + (line - ascent - descent) / 2 + ascent
    _draw_spaced(
        draw,
        (padding, baseline),
        HEADER_LABEL,
        font,
        _alpha(theme.text_color, 0.6 * 0.8),
        HEADER_FONT_SIZE * HEADER_LETTER_SPACING_EM,
        stroke=faces.stroke_width(True, HEADER_FONT_SIZE),
    )
    dot_top = padding + (line - HEADER_DOT_SIZE) / 2
    right = width - padding
    draw.ellipse(
        (right - HEADER_DOT_SIZE, dot_top, right, dot_top + HEADER_DOT_SIZE),
        fill=_alpha(theme.accent_color, 0.5 * 0.8 * theme.accent_alpha / 255),
    )
    rule_y = padding + line + HEADER_PADDING_BOTTOM
    draw.rectangle(
        (padding, rule_y, right - 1, rule_y + HEADER_RULE_WIDTH - 1),
        fill=_alpha(theme.accent_color, 0.8 * theme.accent_alpha / 255),
    )


def _draw_page_marker(draw: ImageDraw.ImageDraw, faces: FontFaces, theme: Theme,
                      page_number: int, total_pages: int, size: Tuple[int, int],
                      padding: int) -> None:
    number_font = faces.face(True, PAGE_NUMBER_SIZE)
    small_font = faces.face(False, PAGE_TOTAL_SIZE)
    number = f"{page_number:02d}"
    rest = f" / {total_pages:02d}"
    fill = _alpha(theme.text_color, 0.8)
    width = draw.textlength(number, font=number_font) + draw.textlength(rest, font=small_font)
    x = size[0] - padding - width
    line = max(FOOTER_LINE_HEIGHT, _font_line_height(number_font))
    ascent, descent = number_font.getmetrics()
    baseline = size[1] - padding - line + (line - ascent - descent) / 2 + ascent
    draw.text((x, baseline), number, font=number_font, fill=fill, anchor="ls",
              stroke_width=faces.stroke_width(True, PAGE_NUMBER_SIZE), stroke_fill=fill)
    x += draw.textlength(number, font=number_font)
    draw.text((x, baseline), rest, font=small_font, fill=fill, anchor="ls")


def _justified_positions(line: LayoutLine, available: float,
                         oracle: MeasurementOracle, font_size: float
                         ) -> List[Tuple[str, bool, float]]:
    glyphs: List[Tuple[str, bool, float]] = []
    for fragment in line.fragments:
        x = fragment.x
        for char in fragment.text:
            glyphs.append((char, fragment.bold, x))
            x += oracle.advance(char, fragment.bold, font_size)

    slack = available - line.ink_width
    if not line.justify or slack <= 0:
        return glyphs

    ink = [glyph for glyph in glyphs if glyph[2] < line.ink_width]
    spaces = [index for index, glyph in enumerate(ink) if glyph[0].isspace()]
    if spaces:
        extra, stretch_after = slack / len(spaces), set(spaces)
    elif len(ink) > 1:
        extra, stretch_after = slack / (len(ink) - 1), set(range(len(ink) - 1))
    else:
        return glyphs

    shifted: List[Tuple[str, bool, float]] = []
    offset = 0.0
    for index, (char, bold, x) in enumerate(glyphs):
        shifted.append((char, bold, x + offset))
        if index in stretch_after:
            offset += extra
    return shifted


def draw_body(draw: ImageDraw.ImageDraw, layout: TextLayout, origin: Tuple[float, float],
              oracle: MeasurementOracle, fill: Fill) -> None:
    faces = oracle.faces
    size = layout.font_size
    regular = faces.face(False, size)
    ascent, descent = regular.getmetrics()
    for line in layout.lines:
        baseline = origin[1] + line.top + (line.height - ascent - descent) / 2 + ascent
        left = origin[0] + line.indent
        if line.bullet:
            draw.text((origin[0] + line.indent * 0.35, baseline), BULLET, font=regular,
                      fill=fill, anchor="ls")
        available = layout.content_width - line.indent
        for char, bold, x in _justified_positions(line, available, oracle, size):
            if char.isspace():
                continue
            stroke = faces.stroke_width(bold, size)
            draw.text((left + x, baseline), char, font=faces.face(bold, size), fill=fill,
                      anchor="ls", stroke_width=stroke, stroke_fill=fill)


def _base_canvas(theme: Theme, faces: FontFaces, size: Tuple[int, int]) -> Image.Image:
    canvas = gradient_background(size, theme)
    _draw_watermark(canvas, faces, theme)
    return canvas


def render_content_card(
    page: Page,
    page_number: int,
    total_pages: int,
    theme: Theme,
    oracle: MeasurementOracle,
    card_size: Tuple[int, int] = CARD_SIZE,
    padding: int = CARD_PADDING,
    debug: bool = False,
) -> Image.Image:
    faces = oracle.faces
    canvas = _base_canvas(theme, faces, card_size)
    overlay = Image.new("RGBA", card_size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)

    _draw_header(draw, faces, theme, card_size[0], padding)
    layout = oracle.layout(page.content, page.font_size)
    origin = (padding, padding + header_block_height(faces))
    draw_body(draw, layout, origin, oracle, _alpha(theme.text_color, 1.0))
    _draw_page_marker(draw, faces, theme, page_number, total_pages, card_size, padding)

    if debug:
        print(
            f"[DEBUG] Card {page_number}/{total_pages}: {len(layout.lines)} lines, "
            f"body height {layout.height:.1f}px at {page.font_size}px"
        )
    canvas.alpha_composite(overlay)
    return canvas.convert("RGB")


def wrap_title(draw: ImageDraw.ImageDraw, text: str, font: ImageFont.FreeTypeFont,
               max_width: float) -> List[str]:
    lines: List[str] = []
    current_line = ""
    for ch in text:
        candidate = current_line + ch
        if draw.textlength(candidate, font=font) <= max_width or not current_line:
            current_line = candidate
        else:
            lines.append(current_line.rstrip())
            current_line = ch.lstrip()
    if current_line:
        lines.append(current_line)
    return lines


def render_cover_card(
    title: str,
    theme: Theme,
    faces: FontFaces,
    card_size: Tuple[int, int] = CARD_SIZE,
    padding: int = CARD_PADDING,
) -> Image.Image:
    canvas = _base_canvas(theme, faces, card_size)
    overlay = Image.new("RGBA", card_size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    width, height = card_size
    inner_width = width - padding * 2

    title_font = faces.face(True, COVER_TITLE_SIZE)
    kicker_font = faces.face(True, COVER_KICKER_SIZE)
    title_lines = wrap_title(draw, title or "UNTITLED", title_font, inner_width)
    title_line_height = round(COVER_TITLE_SIZE * 1.25)
    kicker_height = _font_line_height(kicker_font) + 8
    block = (COVER_RULE_WIDTH * 2 + COVER_PADDING * 2 + kicker_height
             + title_line_height * len(title_lines))
    top = (height - block) / 2

    rule_fill = _alpha(theme.accent_color, 0.3 * theme.accent_alpha / 255)
    draw.rectangle((padding, top, width - padding - 1, top + COVER_RULE_WIDTH - 1),
                   fill=rule_fill)
    bottom_rule = top + block - COVER_RULE_WIDTH
    draw.rectangle((padding, bottom_rule, width - padding - 1,
                    bottom_rule + COVER_RULE_WIDTH - 1), fill=rule_fill)

    y = top + COVER_RULE_WIDTH + COVER_PADDING
    kicker_width = draw.textlength(COVER_KICKER, font=kicker_font)
    draw.text(((width - kicker_width) / 2, y), COVER_KICKER, font=kicker_font,
              fill=_alpha(theme.text_color, 0.8))
    y += kicker_height

    fill = _alpha(theme.text_color, 1.0)
    stroke = faces.stroke_width(True, COVER_TITLE_SIZE)
    for line in title_lines:
        line_width = draw.textlength(line, font=title_font)
        draw.text(((width - line_width) / 2, y), line, font=title_font, fill=fill,
                  stroke_width=stroke, stroke_fill=fill)
        y += title_line_height

    canvas.alpha_composite(overlay)
    return canvas.convert("RGB")
