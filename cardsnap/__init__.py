"""
Command-line interface for splitting text documents into shareable image cards.

This package exposes a :func:`main` function which orchestrates argument parsing
and delegates pagination and rendering work to :mod:`cardkit`.
"""

from .cli import main

__all__ = ["main"]
