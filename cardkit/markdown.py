"""Minimal markdown tokenizer shared by the renderer and the measurement oracle.

Supported syntax:

* ``**bold**`` spans inside a line
* ``- item`` lines, grouped into a single list block

Both the layout used for measuring and the layout used for drawing start from
:func:`tokenize`, so the two never disagree about what a string contains.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Tuple, Union


LIST_PREFIX = "- "
LINE_BREAK = "\n"
BOLD_PATTERN = re.compile(r"\*\*(.+?)\*\*")


@dataclass(frozen=True)
class PlainRun:
    text: str


@dataclass(frozen=True)
class BoldRun:
    text: str


@dataclass(frozen=True)
class ListBlock:
    items: Tuple[str, ...]


MarkdownNode = Union[PlainRun, BoldRun, ListBlock]


def _inline_runs(line: str) -> List[MarkdownNode]:
    runs: List[MarkdownNode] = []
    position = 0
    for match in BOLD_PATTERN.finditer(line):
        if match.start() > position:
            runs.append(PlainRun(line[position : match.start()]))
        runs.append(BoldRun(match.group(1)))
        position = match.end()
    if position < len(line):
        runs.append(PlainRun(line[position:]))
    return runs


def tokenize(text: str) -> List[MarkdownNode]:
    nodes: List[MarkdownNode] = []
    list_items: List[str] = []

    def flush_list() -> None:
        if list_items:
            nodes.append(ListBlock(tuple(list_items)))
            list_items.clear()

    for line in text.split(LINE_BREAK):
        stripped = line.strip()
        if stripped.startswith(LIST_PREFIX):
            list_items.append(stripped[len(LIST_PREFIX) :])
            continue
        flush_list()
        nodes.extend(_inline_runs(line))
        nodes.append(PlainRun(LINE_BREAK))

    flush_list()

    if nodes and nodes[-1] == PlainRun(LINE_BREAK):
        nodes.pop()
    return nodes
