"""Inline span parsing: ``**strong**`` and ``[label](url)`` runs.

Two layered passes. Strong emphasis is found first; whatever lies between
the emphasis matches is scanned for links. Nesting in either direction is
not recognised.
"""

import re
from typing import List

from .nodes import InlineRun, LinkText, PlainText, StyledText


_STRONG_RE = re.compile(r"\*\*(.+?)\*\*")
_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")


def parse_inline(text: str) -> List[InlineRun]:
    """Split a text fragment into inline runs.

    Args:
        text: A single fragment, e.g. a heading title or a paragraph body.

    Returns:
        Runs in source order. Never empty: a fragment without markup (the
        empty string included) comes back as one plain run.
    """
    runs: List[InlineRun] = []
    last = 0

    for match in _STRONG_RE.finditer(text):
        if match.start() > last:
            runs.extend(_parse_links(text[last:match.start()]))
        runs.append(StyledText(match.group(1)))
        last = match.end()

    if last < len(text):
        runs.extend(_parse_links(text[last:]))

    return runs or [PlainText(text)]


def _parse_links(text: str) -> List[InlineRun]:
    runs: List[InlineRun] = []
    last = 0

    for match in _LINK_RE.finditer(text):
        if match.start() > last:
            runs.append(PlainText(text[last:match.start()]))
        runs.append(LinkText(match.group(1), match.group(2)))
        last = match.end()

    if last < len(text):
        runs.append(PlainText(text[last:]))

    return runs or [PlainText(text)]
