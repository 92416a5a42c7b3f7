"""Core pagination, measurement and rendering utilities for cardsnap."""

from .cards import Card, build_cards  # noqa: F401
from .measure import MeasurementOracle, default_oracle  # noqa: F401
from .paginate import Page, number_pages, paginate, reconstruct  # noqa: F401
from .markdown import tokenize  # noqa: F401

__all__ = [
    "Card",
    "MeasurementOracle",
    "Page",
    "build_cards",
    "default_oracle",
    "number_pages",
    "paginate",
    "reconstruct",
    "tokenize",
]
