"""Turn a document into rendered card images."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from PIL import Image

from .measure import MeasurementOracle
from .paginate import Page, number_pages, paginate
from .render import content_area_height, render_content_card, render_cover_card
from .themes import Theme
from .typography import CARD_PADDING, CARD_SIZE, DEFAULT_SHRINK_POLICY, Box, ShrinkPolicy


@dataclass
class Card:
    name: str
    image: Image.Image
    page: Optional[Page] = None


def resolve_box(
    oracle: MeasurementOracle,
    container_height: Optional[float] = None,
    debug: bool = False,
) -> Box:
    if container_height is None:
        container_height = content_area_height(oracle.faces, CARD_SIZE, CARD_PADDING)
    elif container_height <= 0:
        raise ValueError(f"Container height must be positive, got {container_height}")
    if debug:
        print(f"[DEBUG] Content box {oracle.content_width}x{container_height:.1f}px")
    return Box(
        container_height=container_height,
        content_width=oracle.content_width,
        typography=oracle.typography,
    )


def build_cards(
    text: str,
    theme: Theme,
    oracle: MeasurementOracle,
    title: Optional[str] = None,
    container_height: Optional[float] = None,
    policy: ShrinkPolicy = DEFAULT_SHRINK_POLICY,
    debug: bool = False,
) -> List[Card]:
    """Paginate ``text`` and render one card per page, plus an optional cover."""
    box = resolve_box(oracle, container_height, debug=debug)
    pages = paginate(text, box.container_height, oracle=oracle, policy=policy, debug=debug)

    cards: List[Card] = []
    with oracle.session():
        if title is not None:
            cover = render_cover_card(title, theme, oracle.faces)
            cards.append(Card(name="cover", image=cover))
        for page_number, total, page in number_pages(pages):
            image = render_content_card(page, page_number, total, theme, oracle, debug=debug)
            cards.append(Card(name=f"page_{page_number:02d}", image=image, page=page))
    return cards
