"""Adaptive pagination with auto-shrink.

Text is cut into pages at the coarsest granularity that fits:

1. whole paragraphs, joined with ``"\\n"``
2. a near-miss block of paragraphs rescued by a slightly smaller font size
3. sentences of a paragraph that does not fit alone
4. characters of a sentence that does not fit alone

Every step asks the measurement oracle whether the candidate fits the
container height at the default font size. The same accumulate, measure and
flush routine runs at each granularity; only the splitter, the separator and
whether shrinking is allowed change.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple

from .measure import MeasurementOracle, default_oracle
from .shrink import try_shrink
from .typography import DEFAULT_SHRINK_POLICY, ShrinkPolicy

SENTENCE_PATTERN = re.compile(r"([.!?。！？]+)")


@dataclass(frozen=True)
class Page:
    content: str
    font_size: int
    # Source text between the previous page and this one (join separators and
    # whitespace that cannot stand as a page on its own).
    leading_break: str = ""
    trailing_break: str = ""


@dataclass(frozen=True)
class Granularity:
    name: str
    separator: str
    split: Callable[[str], List[str]]
    allow_shrink: bool = False
    finer: Optional["Granularity"] = None


def split_paragraphs(text: str) -> List[str]:
    return text.split("\n")


def split_sentences(paragraph: str) -> List[str]:
    """Split after each run of sentence punctuation, keeping it attached."""
    parts = SENTENCE_PATTERN.split(paragraph)
    sentences: List[str] = []
    for index in range(0, len(parts), 2):
        sentence = parts[index]
        if index + 1 < len(parts):
            sentence += parts[index + 1]
        if sentence:
            sentences.append(sentence)
    return sentences


def split_characters(sentence: str) -> List[str]:
    return list(sentence)


CHARACTER = Granularity("character", "", split_characters)
SENTENCE = Granularity("sentence", "", split_sentences, finer=CHARACTER)
PARAGRAPH = Granularity("paragraph", "\n", split_paragraphs, allow_shrink=True,
                        finer=SENTENCE)


def _has_ink(text: str) -> bool:
    return bool(text) and not text.isspace()


class _Paginator:
    def __init__(
        self,
        oracle: MeasurementOracle,
        container_height: float,
        policy: ShrinkPolicy,
        debug: bool = False,
    ) -> None:
        self.oracle = oracle
        self.container_height = container_height
        self.policy = policy
        self.debug = debug
        self.pages: List[Page] = []
        self._gap = ""

    def _measure(self, text: str, font_size: float) -> float:
        return self.oracle.measure(text, font_size)

    def _fits(self, height: float) -> bool:
        return height <= self.container_height

    def _emit(self, content: str, font_size: int, level: Granularity) -> None:
        self.pages.append(Page(content=content, font_size=font_size,
                               leading_break=self._gap))
        self._gap = ""
        if self.debug:
            print(
                f"[DEBUG] Page {len(self.pages)}: {len(content)} chars at {font_size}px "
                f"({level.name})"
            )

    def _flush(self, buffer: Optional[str], level: Granularity) -> None:
        if buffer is None:
            return
        if _has_ink(buffer):
            self._emit(buffer, self.policy.default_size, level)
        else:
            self._gap += buffer

    def fill(self, units: Sequence[str], level: Granularity,
             buffer: Optional[str] = None) -> Optional[str]:
        """Accumulate ``units`` into pages and return the unflushed remainder."""
        default_size = self.policy.default_size
        for index, unit in enumerate(units):
            separator = level.separator if index else ""
            if buffer is None:
                self._gap += separator
                tentative = unit
            else:
                tentative = buffer + separator + unit

            height = self._measure(tentative, default_size)
            if self._fits(height):
                buffer = tentative
                continue

            if level.allow_shrink and _has_ink(tentative):
                size = try_shrink(self._measure, tentative, self.container_height,
                                  height, self.policy, debug=self.debug)
                if size is not None:
                    self._emit(tentative, size, level)
                    buffer = None
                    continue

            if buffer is not None:
                self._flush(buffer, level)
                self._gap += separator
                buffer = None
                height = self._measure(unit, default_size)
                if self._fits(height):
                    buffer = unit
                    continue

            if level.finer is None:
                # Degenerate box: a single character that cannot fit still
                # becomes a page of its own.
                buffer = unit
                continue

            if self.debug:
                print(
                    f"[DEBUG] {level.name.capitalize()} of {len(unit)} chars overflows "
                    f"alone; splitting by {level.finer.name}"
                )
            buffer = self.fill(level.finer.split(unit), level.finer)
        return buffer

    def run(self, text: str) -> List[Page]:
        remainder = self.fill(PARAGRAPH.split(text), PARAGRAPH)
        self._flush(remainder, PARAGRAPH)
        if self._gap and self.pages:
            self.pages[-1] = replace(self.pages[-1], trailing_break=self._gap)
        return self.pages


def paginate(
    text: str,
    container_height: float,
    *,
    oracle: Optional[MeasurementOracle] = None,
    policy: ShrinkPolicy = DEFAULT_SHRINK_POLICY,
    debug: bool = False,
) -> List[Page]:
    """Split ``text`` into pages that each fit ``container_height``.

    The oracle is held for the whole run; concurrent runs against the same
    oracle are serialized.
    """
    if not _has_ink(text):
        return []

    if oracle is None:
        oracle = default_oracle(debug=debug)
    with oracle.session():
        pages = _Paginator(oracle, container_height, policy, debug=debug).run(text)

    if debug:
        print(f"[DEBUG] Paginated {len(text)} chars into {len(pages)} pages")
    return pages


def number_pages(pages: Sequence[Page]) -> List[Tuple[int, int, Page]]:
    total = len(pages)
    return [(index, total, page) for index, page in enumerate(pages, start=1)]


def reconstruct(pages: Sequence[Page]) -> str:
    return "".join(
        page.leading_break + page.content + page.trailing_break for page in pages
    )
