"""Core converter: Markdown → Atlassian Document Format (ADF).

A deliberately small, line-oriented converter. Each line is classified as
the start of a heading, fenced code block, list, table or blockquote; any
other non-blank line accumulates into the pending paragraph. Multi-line
blocks are consumed through a ``LineCursor`` so the scan only ever moves
forward. Leaf text goes through :func:`adfpress.inline.parse_inline`.
"""

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from .inline import parse_inline
from .nodes import (
    BlockNode,
    Blockquote,
    BulletList,
    CodeBlock,
    Document,
    Heading,
    ListItem,
    OrderedList,
    Paragraph,
    Table,
)


logger = logging.getLogger(__name__)

_HEADING_RE = re.compile(r"^(#+)\s+(.+)$")
_BULLET_RE = re.compile(r"^[-*+]\s+")
_ORDERED_RE = re.compile(r"^[0-9]+\.\s+")
_FENCE = "```"
_MIN_TABLE_LINES = 3


def convert(markdown: str) -> Dict[str, Any]:
    """Convert a markdown string to an ADF document.

    Args:
        markdown: The markdown text to convert.

    Returns:
        An ADF document dict with version, type, and content.
    """
    return parse(markdown).to_dict()


def parse(markdown: str) -> Document:
    """Parse markdown into a typed :class:`Document` tree."""
    blocks = _convert_blocks(LineCursor((markdown or "").split("\n")))
    if not blocks:
        blocks = [_paragraph("")]
    return Document(tuple(blocks))


class LineCursor:
    """Forward-only cursor over the source lines."""

    def __init__(self, lines: List[str]):
        self._lines = lines
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    def at_end(self) -> bool:
        return self._pos >= len(self._lines)

    def peek(self) -> Optional[str]:
        if self.at_end():
            return None
        return self._lines[self._pos]

    def advance(self) -> str:
        line = self._lines[self._pos]
        self._pos += 1
        return line

    def take_while(self, predicate: Callable[[str], bool]) -> List[str]:
        """Consume lines while ``predicate`` holds and return them."""
        taken = []
        while not self.at_end() and predicate(self._lines[self._pos]):
            taken.append(self.advance())
        return taken


def _convert_blocks(cursor: LineCursor) -> List[BlockNode]:
    """Classify lines into block nodes until the cursor is exhausted."""
    result: List[BlockNode] = []
    pending: List[str] = []

    def flush():
        if pending:
            text = "\n".join(pending).strip()
            if text:
                result.append(_paragraph(text))
            pending.clear()

    while not cursor.at_end():
        line = cursor.peek()
        trimmed = line.strip()

        heading = _HEADING_RE.match(trimmed)
        if heading:
            flush()
            cursor.advance()
            result.append(Heading(len(heading.group(1)), tuple(parse_inline(heading.group(2)))))
            continue

        if trimmed.startswith(_FENCE):
            flush()
            node = _convert_code_block(cursor)
            if node is not None:
                result.append(node)
            continue

        if _BULLET_RE.match(trimmed):
            flush()
            result.append(BulletList(_take_list_items(cursor, _BULLET_RE)))
            continue

        if _ORDERED_RE.match(trimmed):
            flush()
            result.append(OrderedList(_take_list_items(cursor, _ORDERED_RE)))
            continue

        if "|" in trimmed:
            flush()
            node = _convert_table(cursor)
            if node is not None:
                result.append(node)
            continue

        if trimmed.startswith(">"):
            flush()
            cursor.advance()
            result.append(Blockquote(_paragraph(trimmed[1:].strip())))
            continue

        cursor.advance()
        if trimmed:
            pending.append(line)
        else:
            flush()

    flush()
    return result


def _paragraph(text: str) -> Paragraph:
    return Paragraph(tuple(parse_inline(text)))


def _convert_code_block(cursor: LineCursor) -> Optional[CodeBlock]:
    """Consume a fenced code block, closing fence included.

    An unterminated fence swallows the rest of the input. A fence with
    nothing inside produces no node.
    """
    language = cursor.advance().strip()[len(_FENCE):].strip()
    code_lines = cursor.take_while(lambda l: not l.strip().startswith(_FENCE))
    if not cursor.at_end():
        cursor.advance()
    if not code_lines:
        return None
    return CodeBlock("\n".join(code_lines), language or "plain")


def _take_list_items(cursor: LineCursor, marker: re.Pattern) -> Tuple[ListItem, ...]:
    lines = cursor.take_while(lambda l: marker.match(l.strip()) is not None)
    return tuple(
        ListItem(_paragraph(marker.sub("", l.strip(), count=1))) for l in lines
    )


def _convert_table(cursor: LineCursor) -> Optional[BlockNode]:
    """Consume contiguous pipe lines and build a table from them.

    Fewer than three lines (header, separator, one data row) is not a
    table and the lines are dropped without producing any node.
    """
    start = cursor.position
    lines = cursor.take_while(lambda l: "|" in l)
    if len(lines) < _MIN_TABLE_LINES:
        logger.debug("Dropping %d pipe line(s) at line %d: too short for a table", len(lines), start + 1)
        return None

    rows = [
        [cell.strip() for cell in line.split("|") if cell.strip()]
        for line in lines
        if "---" not in line
    ]
    if len(rows) < 2:
        return _paragraph("")

    header, *body = rows
    return Table(
        header=tuple(_paragraph(cell) for cell in header),
        rows=tuple(tuple(_paragraph(cell) for cell in row) for row in body),
    )
