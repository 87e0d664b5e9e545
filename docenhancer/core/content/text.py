"""
Plain-text projection of the canonical tree and tree utilities.

The plain-text projection is what selection offsets are measured against:
the inline text of every textblock, in document order, joined with a single
newline. A hard break contributes one newline inside its block.
"""

from collections.abc import Iterator

from docenhancer.models.content import DocumentNode, NodeType

BLOCK_SEPARATOR = "\n"

UNSAFE_URL_SCHEMES = ("javascript:", "vbscript:")


def plain_text_to_tree(text: str) -> DocumentNode:
    """
    Convert plain text to a tree: one paragraph per line.

    Empty lines become empty paragraphs, so three input lines always give
    exactly three blocks.
    """
    paragraphs = []
    for line in (text or "").replace("\r\n", "\n").split("\n"):
        stripped = line.strip()
        content = [DocumentNode(type=NodeType.TEXT, text=stripped)] if stripped else []
        paragraphs.append(DocumentNode(type=NodeType.PARAGRAPH, content=content))
    return DocumentNode(type=NodeType.DOC, content=paragraphs)


def create_empty_tree() -> DocumentNode:
    return DocumentNode(type=NodeType.DOC, content=[DocumentNode(type=NodeType.PARAGRAPH)])


def iter_textblocks(node: DocumentNode) -> Iterator[DocumentNode]:
    """Yield every textblock (paragraph, heading, code block) in document order."""
    if node.is_textblock:
        yield node
        return
    for child in node.content:
        yield from iter_textblocks(child)


def block_text(block: DocumentNode) -> str:
    parts = []
    for child in block.content:
        if child.type == NodeType.TEXT:
            parts.append(child.text or "")
        elif child.type == NodeType.HARD_BREAK:
            parts.append("\n")
    return "".join(parts)


def tree_to_plain_text(node: DocumentNode) -> str:
    return BLOCK_SEPARATOR.join(block_text(block) for block in iter_textblocks(node))


def extract_images(node: DocumentNode) -> list[dict[str, str]]:
    """List ``{"src", "alt"}`` for every image node in the tree."""
    return [
        {"src": str(child.attrs.get("src", "")), "alt": str(child.attrs.get("alt", ""))}
        for child in node.iter_nodes()
        if child.type == NodeType.IMAGE
    ]


def _is_unsafe_url(value) -> bool:
    return str(value).strip().lower().startswith(UNSAFE_URL_SCHEMES)


def sanitize_tree(node: DocumentNode) -> DocumentNode:
    """
    Return a copy with event-handler attributes and script URLs removed.

    Content trees supplied by clients are stored as-is otherwise, so this runs
    on every import and update.
    """
    attrs = {
        name: value
        for name, value in node.attrs.items()
        if not name.lower().startswith("on") and not (name in ("src", "href") and _is_unsafe_url(value))
    }
    marks = [
        mark.model_copy(update={"attrs": {"href": ""}})
        if _is_unsafe_url(mark.attrs.get("href", ""))
        else mark
        for mark in node.marks
    ]
    return node.model_copy(
        update={
            "attrs": attrs,
            "marks": marks,
            "content": [sanitize_tree(child) for child in node.content],
        }
    )
