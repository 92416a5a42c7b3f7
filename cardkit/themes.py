from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, Tuple

RGB = Tuple[int, int, int]

DEFAULT_THEME_ID = "red"
DEFAULT_GRADIENT_ANGLE = 135.0


@dataclass(frozen=True)
class Theme:
    id: str
    label: str
    start: RGB
    end: RGB
    text_color: RGB
    accent_color: RGB
    angle: float = DEFAULT_GRADIENT_ANGLE
    accent_alpha: int = 255


def parse_color(color_value: str) -> RGB:
    value = color_value.strip()
    if not value.startswith("#"):
        value = f"#{value}"
    if not re.fullmatch(r"#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})", value):
        raise ValueError(f"Unsupported color value: {color_value}")
    if len(value) == 4:
        r = int(value[1] * 2, 16)
        g = int(value[2] * 2, 16)
        b = int(value[3] * 2, 16)
    else:
        r = int(value[1:3], 16)
        g = int(value[3:5], 16)
        b = int(value[5:7], 16)
    return (r, g, b)


def relative_luminance(color: RGB) -> float:
    """WCAG 2.0 relative luminance of an sRGB color."""
    channels = []
    for channel in color:
        c = channel / 255
        channels.append(c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4)
    r, g, b = channels
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_color(background: RGB) -> RGB:
    return (0, 0, 0) if relative_luminance(background) > 0.5 else (255, 255, 255)


WHITE = (255, 255, 255)

THEMES: Dict[str, Theme] = {
    "red": Theme("red", "Red", parse_color("#D92027"), parse_color("#B51B22"), WHITE, WHITE),
    "blue": Theme("blue", "Blue", parse_color("#2563EB"), parse_color("#1D4ED8"), WHITE, WHITE),
    "green": Theme("green", "Green", parse_color("#059669"), parse_color("#047857"), WHITE, WHITE),
    "dark": Theme("dark", "Dark", parse_color("#1F2937"), parse_color("#111827"), WHITE, WHITE),
    "beige": Theme(
        "beige",
        "Beige",
        parse_color("#F5F5F4"),
        parse_color("#E7E5E4"),
        parse_color("#1C1917"),
        parse_color("#44403C"),
    ),
}


def custom_theme(start: str, end: str, angle: float = DEFAULT_GRADIENT_ANGLE) -> Theme:
    """Two-color gradient theme; text color follows the dominant start color."""
    start_rgb = parse_color(start)
    text_color = contrast_color(start_rgb)
    return Theme(
        id="custom",
        label="Custom",
        start=start_rgb,
        end=parse_color(end),
        text_color=text_color,
        accent_color=text_color,
        angle=angle,
        accent_alpha=77,
    )


def parse_custom_theme(value: str) -> Theme:
    """Parse ``C1,C2[,ANGLE]`` as given on the command line."""
    parts = [part.strip() for part in value.split(",")]
    if len(parts) not in (2, 3):
        raise ValueError(
            f"Custom theme must look like 'C1,C2' or 'C1,C2,ANGLE', got '{value}'"
        )
    angle = DEFAULT_GRADIENT_ANGLE
    if len(parts) == 3:
        try:
            angle = float(parts[2])
        except ValueError as exc:
            raise ValueError(f"Invalid gradient angle '{parts[2]}'") from exc
    return custom_theme(parts[0], parts[1], angle)


def resolve_theme(theme_id: str) -> Theme:
    normalized = theme_id.strip().lower()
    if normalized not in THEMES:
        raise ValueError(
            f"Unknown theme '{theme_id}'. Use one of {', '.join(sorted(THEMES))}."
        )
    return THEMES[normalized]
