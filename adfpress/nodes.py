"""Typed ADF node model.

Block nodes and inline runs are frozen dataclasses. Each one knows how to
serialise itself into the dict shape Confluence expects, so the converter
can build a typed tree and only flatten it to JSON at the edge.
"""

from dataclasses import dataclass
from typing import Any, Dict, Tuple, Union


ADF_VERSION = 1


@dataclass(frozen=True)
class PlainText:
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "text", "text": self.text}


@dataclass(frozen=True)
class StyledText:
    text: str
    style: str = "strong"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "text", "text": self.text, "marks": [{"type": self.style}]}


@dataclass(frozen=True)
class LinkText:
    text: str
    href: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "text",
            "text": self.text,
            "marks": [{"type": "link", "attrs": {"href": self.href}}],
        }


InlineRun = Union[PlainText, StyledText, LinkText]


@dataclass(frozen=True)
class Paragraph:
    content: Tuple[InlineRun, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "paragraph", "content": [run.to_dict() for run in self.content]}


@dataclass(frozen=True)
class Heading:
    level: int
    content: Tuple[InlineRun, ...]

    def __post_init__(self):
        # Markdown allows any run of '#', ADF stops at h6.
        object.__setattr__(self, "level", max(1, min(self.level, 6)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "heading",
            "attrs": {"level": self.level},
            "content": [run.to_dict() for run in self.content],
        }


@dataclass(frozen=True)
class CodeBlock:
    code: str
    language: str = "plain"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "codeBlock",
            "attrs": {"language": self.language or "plain"},
            "content": [{"type": "text", "text": self.code}],
        }


@dataclass(frozen=True)
class ListItem:
    paragraph: Paragraph

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "listItem", "content": [self.paragraph.to_dict()]}


@dataclass(frozen=True)
class BulletList:
    items: Tuple[ListItem, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "bulletList", "content": [item.to_dict() for item in self.items]}


@dataclass(frozen=True)
class OrderedList:
    items: Tuple[ListItem, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "orderedList", "content": [item.to_dict() for item in self.items]}


@dataclass(frozen=True)
class Table:
    """A table whose first row is rendered as header cells."""

    header: Tuple[Paragraph, ...]
    rows: Tuple[Tuple[Paragraph, ...], ...]

    def to_dict(self) -> Dict[str, Any]:
        content = [_table_row("tableHeader", self.header)]
        content.extend(_table_row("tableCell", row) for row in self.rows)
        return {
            "type": "table",
            "attrs": {"isNumberColumnEnabled": False, "layout": "default"},
            "content": content,
        }


def _table_row(cell_type: str, cells: Tuple[Paragraph, ...]) -> Dict[str, Any]:
    return {
        "type": "tableRow",
        "content": [{"type": cell_type, "content": [cell.to_dict()]} for cell in cells],
    }


@dataclass(frozen=True)
class Blockquote:
    paragraph: Paragraph

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "blockquote", "content": [self.paragraph.to_dict()]}


BlockNode = Union[Paragraph, Heading, CodeBlock, BulletList, OrderedList, Table, Blockquote]


@dataclass(frozen=True)
class Document:
    """Root envelope of an ADF document.

    Args:
        content: Block nodes in document order. The converter guarantees at
            least one entry.
        version: ADF format version, always 1.
    """

    content: Tuple[BlockNode, ...]
    version: int = ADF_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "type": "doc",
            "content": [node.to_dict() for node in self.content],
        }
