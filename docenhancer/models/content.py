"""
Canonical rich-text representation.

Every import format (plain text, Markdown, wiki HTML, AI-converted PDF) is
normalized into a tree of DocumentNode objects before storage. The shape
mirrors the JSON produced by common rich-text editors: a ``doc`` root,
block nodes (paragraph, heading, list, table, ...) and inline ``text``
leaves carrying marks (bold, italic, link, ...).
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NodeType(str, Enum):
    """Node types in the canonical tree."""

    DOC = "doc"

    # Blocks
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    BULLET_LIST = "bulletList"
    ORDERED_LIST = "orderedList"
    LIST_ITEM = "listItem"
    BLOCKQUOTE = "blockquote"
    CODE_BLOCK = "codeBlock"
    HORIZONTAL_RULE = "horizontalRule"
    TABLE = "table"
    TABLE_ROW = "tableRow"
    TABLE_HEADER = "tableHeader"
    TABLE_CELL = "tableCell"
    IMAGE = "image"

    # Inline
    TEXT = "text"
    HARD_BREAK = "hardBreak"


class MarkType(str, Enum):
    """Inline formatting marks."""

    BOLD = "bold"
    ITALIC = "italic"
    CODE = "code"
    STRIKE = "strike"
    UNDERLINE = "underline"
    LINK = "link"


# Blocks whose children are inline content (text and hard breaks)
TEXTBLOCK_TYPES = frozenset(
    t.value for t in (NodeType.PARAGRAPH, NodeType.HEADING, NodeType.CODE_BLOCK)
)

# Leaves that never hold children
ATOM_TYPES = frozenset(
    t.value for t in (NodeType.HORIZONTAL_RULE, NodeType.IMAGE, NodeType.HARD_BREAK)
)


class Mark(BaseModel):
    """Inline mark applied to a text node."""

    model_config = ConfigDict(use_enum_values=True)

    type: MarkType
    attrs: dict[str, Any] = Field(default_factory=dict)


class DocumentNode(BaseModel):
    """Node in the canonical document tree."""

    model_config = ConfigDict(use_enum_values=True)

    type: NodeType
    attrs: dict[str, Any] = Field(default_factory=dict)
    content: list["DocumentNode"] = Field(default_factory=list)
    text: str | None = None
    marks: list[Mark] = Field(default_factory=list)

    @property
    def is_textblock(self) -> bool:
        """True for blocks whose children are inline nodes."""
        return self.type in TEXTBLOCK_TYPES

    @property
    def is_text(self) -> bool:
        return self.type == NodeType.TEXT

    def to_json(self) -> dict[str, Any]:
        """Compact JSON form (empty collections and nulls omitted)."""
        return self.model_dump(exclude_defaults=True, mode="json")

    def iter_nodes(self):
        """Depth-first, pre-order traversal including self."""
        yield self
        for child in self.content:
            yield from child.iter_nodes()


DocumentNode.model_rebuild()
