"""Rendering tests using Pillow's built-in font."""

import pytest

from cardkit.cards import build_cards, resolve_box
from cardkit.paginate import Page
from cardkit.render import (
    content_area_height,
    gradient_background,
    render_content_card,
    render_cover_card,
    wrap_title,
)
from cardkit.themes import THEMES
from cardkit.typography import CARD_SIZE, DEFAULT_SAFE_HEIGHT

from PIL import Image, ImageDraw


def test_content_area_falls_back_without_fonts():
    assert content_area_height(None) == DEFAULT_SAFE_HEIGHT


def test_content_area_leaves_room_for_chrome(builtin_faces):
    height = content_area_height(builtin_faces)
    assert 0 < height < CARD_SIZE[1] - 120


def test_gradient_runs_from_start_to_end_color():
    theme = THEMES["beige"]
    image = gradient_background(CARD_SIZE, theme)
    top_left = image.getpixel((0, 0))[:3]
    bottom_right = image.getpixel((CARD_SIZE[0] - 1, CARD_SIZE[1] - 1))[:3]
    for channel in range(3):
        assert abs(top_left[channel] - theme.start[channel]) <= 4
        assert abs(bottom_right[channel] - theme.end[channel]) <= 4


def test_content_card_is_card_sized(font_oracle):
    page = Page(content="**Hello** world\n- one\n- two", font_size=28)
    image = render_content_card(page, 1, 3, THEMES["red"], font_oracle)
    assert image.size == CARD_SIZE
    assert image.mode == "RGB"


def test_content_card_draws_text(font_oracle):
    theme = THEMES["dark"]
    blank = render_content_card(Page(content=" ", font_size=28), 1, 1, theme, font_oracle)
    filled = render_content_card(
        Page(content="Some visible words", font_size=28), 1, 1, theme, font_oracle
    )
    assert blank.tobytes() != filled.tobytes()


def test_cover_card(builtin_faces):
    image = render_cover_card("A rather long title that needs wrapping", THEMES["blue"],
                              builtin_faces)
    assert image.size == CARD_SIZE


def test_wrap_title_respects_width(builtin_faces):
    draw = ImageDraw.Draw(Image.new("RGB", (1, 1)))
    font = builtin_faces.face(True, 60)
    lines = wrap_title(draw, "Role Settings: Full Stack & UI Designer", font, 480)
    assert len(lines) > 1
    assert all(draw.textlength(line, font=font) <= 480 for line in lines)


def test_resolve_box_rejects_non_positive_height(font_oracle):
    with pytest.raises(ValueError):
        resolve_box(font_oracle, 0)


def test_build_cards_adds_cover_and_numbers_pages(font_oracle):
    text = "\n".join(["Paragraph number %d is here." % n for n in range(40)])
    cards = build_cards(text, THEMES["green"], font_oracle, title="Title",
                        container_height=200)
    assert cards[0].name == "cover"
    assert cards[0].page is None
    content = cards[1:]
    assert len(content) > 1
    assert [card.name for card in content] == [
        f"page_{n:02d}" for n in range(1, len(content) + 1)
    ]
    for card in content:
        assert font_oracle.measure(card.page.content, card.page.font_size) <= 200


def test_build_cards_without_text_has_only_cover(font_oracle):
    cards = build_cards("   ", THEMES["red"], font_oracle, title="Only cover")
    assert [card.name for card in cards] == ["cover"]


def test_oracle_without_faces_uses_safe_height(oracle):
    box = resolve_box(oracle)
    assert box.container_height == DEFAULT_SAFE_HEIGHT
    assert box.content_width == oracle.content_width


def test_resolve_box_measures_chrome_when_faces_exist(font_oracle):
    box = resolve_box(font_oracle)
    assert box.container_height == content_area_height(font_oracle.faces)


def test_empty_title_still_gets_a_cover(font_oracle):
    cards = build_cards("Body text.", THEMES["red"], font_oracle, title="")
    assert [card.name for card in cards] == ["cover", "page_01"]
