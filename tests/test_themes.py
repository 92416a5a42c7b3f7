"""Unit tests for themes and color helpers."""

import pytest

from cardkit.themes import (
    THEMES,
    contrast_color,
    custom_theme,
    parse_color,
    parse_custom_theme,
    relative_luminance,
    resolve_theme,
)


def test_parse_color_forms():
    assert parse_color("#D92027") == (217, 32, 39)
    assert parse_color("d92027") == (217, 32, 39)
    assert parse_color("#fff") == (255, 255, 255)


@pytest.mark.parametrize("value", ["", "#12", "#GGGGGG", "red", "#1234567"])
def test_parse_color_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_color(value)


def test_luminance_extremes():
    assert relative_luminance((0, 0, 0)) == 0
    assert relative_luminance((255, 255, 255)) == pytest.approx(1.0)


def test_contrast_color_picks_black_on_light():
    assert contrast_color((245, 245, 244)) == (0, 0, 0)
    assert contrast_color((217, 32, 39)) == (255, 255, 255)


def test_custom_theme_text_follows_start_color():
    light = custom_theme("F5F5F4", "1F2937", 90)
    assert light.text_color == (0, 0, 0)
    assert light.angle == 90
    assert light.accent_alpha < 255


def test_parse_custom_theme():
    theme = parse_custom_theme("#2563EB, #1D4ED8")
    assert theme.id == "custom"
    assert theme.start == (37, 99, 235)
    assert theme.angle == 135


@pytest.mark.parametrize("value", ["#fff", "#fff,#000,sideways", "a,b,c,d"])
def test_parse_custom_theme_rejects_bad_value(value):
    with pytest.raises(ValueError):
        parse_custom_theme(value)


def test_resolve_theme():
    assert resolve_theme(" Blue ") is THEMES["blue"]
    with pytest.raises(ValueError):
        resolve_theme("purple")
