"""
Markdown import and export.

Import goes Markdown -> HTML (markdown-it-py, CommonMark with the GFM table
and strikethrough rules) -> canonical tree. Export walks the tree directly.
"""

from collections.abc import Sequence

from markdown_it import MarkdownIt

from docenhancer.core.content.html import html_to_tree
from docenhancer.core.content.placeholders import substitute_image_placeholders
from docenhancer.models.content import DocumentNode, MarkType, NodeType
from docenhancer.models.document import DocumentImage

# Single newlines inside a paragraph become <br>, as in GitHub comments.
MARKDOWN_PARSER = MarkdownIt("commonmark", {"breaks": True}).enable(["table", "strikethrough"])

MARK_DELIMITERS = {
    MarkType.BOLD.value: "**",
    MarkType.ITALIC.value: "_",
    MarkType.CODE.value: "`",
    MarkType.STRIKE.value: "~~",
}


def markdown_to_html(text: str, images: Sequence[DocumentImage] | None = None) -> str:
    """
    Render Markdown (tables, strikethrough, fenced code, line breaks) to HTML.

    When ``images`` is given, ``{{IMAGE_n}}`` placeholders become ``<img>``
    tags for the matching image.
    """
    html = MARKDOWN_PARSER.render(text or "")
    if images:
        html = substitute_image_placeholders(html, images)
    return html


def markdown_to_tree(text: str, images: Sequence[DocumentImage] | None = None) -> DocumentNode:
    return html_to_tree(markdown_to_html(text, images))


def _inline_markdown(block: DocumentNode) -> str:
    parts = []
    for child in block.content:
        if child.type == NodeType.HARD_BREAK:
            parts.append("  \n")
            continue
        if child.type != NodeType.TEXT:
            continue
        text = child.text or ""
        link = None
        for mark in child.marks:
            if mark.type == MarkType.LINK:
                link = mark.attrs.get("href", "")
            elif mark.type == MarkType.UNDERLINE:
                text = f"<u>{text}</u>"
            else:
                delimiter = MARK_DELIMITERS[mark.type]
                text = f"{delimiter}{text}{delimiter}"
        if link is not None:
            text = f"[{text}]({link})"
        parts.append(text)
    return "".join(parts)


def _cell_text(cell: DocumentNode) -> str:
    texts = [_inline_markdown(child) for child in cell.content if child.is_textblock]
    return " ".join(texts).replace("|", "\\|").replace("\n", " ")


def _table_markdown(table: DocumentNode) -> str:
    rows = [[_cell_text(cell) for cell in row.content] for row in table.content]
    if not rows:
        return ""
    width = max(len(row) for row in rows)
    rows = [row + [""] * (width - len(row)) for row in rows]
    lines = [
        "| " + " | ".join(rows[0]) + " |",
        "| " + " | ".join("---" for _ in range(width)) + " |",
    ]
    lines.extend("| " + " | ".join(row) + " |" for row in rows[1:])
    return "\n".join(lines)


def _indent(text: str, prefix: str, first_prefix: str | None = None) -> str:
    lines = text.split("\n")
    first = first_prefix if first_prefix is not None else prefix
    return "\n".join(
        first + line if index == 0 else (prefix + line if line else line)
        for index, line in enumerate(lines)
    )


def _block_markdown(node: DocumentNode) -> str:
    node_type = node.type
    if node_type == NodeType.PARAGRAPH:
        return _inline_markdown(node)
    if node_type == NodeType.HEADING:
        return "#" * int(node.attrs.get("level", 1)) + " " + _inline_markdown(node)
    if node_type == NodeType.CODE_BLOCK:
        code = "".join(child.text or "" for child in node.content if child.is_text)
        return f"```{node.attrs.get('language', '')}\n{code}\n```"
    if node_type == NodeType.BLOCKQUOTE:
        inner = _blocks_markdown(node.content)
        return "\n".join(f"> {line}" if line else ">" for line in inner.split("\n"))
    if node_type in (NodeType.BULLET_LIST, NodeType.ORDERED_LIST):
        start = int(node.attrs.get("start", 1))
        items = []
        for index, item in enumerate(node.content):
            bullet = f"{start + index}. " if node_type == NodeType.ORDERED_LIST else "- "
            body = _blocks_markdown(item.content, separator="\n")
            items.append(_indent(body, " " * len(bullet), first_prefix=bullet))
        return "\n".join(items)
    if node_type == NodeType.HORIZONTAL_RULE:
        return "---"
    if node_type == NodeType.IMAGE:
        return f"![{node.attrs.get('alt', '')}]({node.attrs.get('src', '')})"
    if node_type == NodeType.TABLE:
        return _table_markdown(node)
    return _blocks_markdown(node.content)


def _blocks_markdown(blocks: list[DocumentNode], separator: str = "\n\n") -> str:
    rendered = [_block_markdown(block) for block in blocks]
    return separator.join(text for text in rendered if text)


def tree_to_markdown(node: DocumentNode) -> str:
    """Export a canonical tree as GitHub-flavoured Markdown."""
    return _blocks_markdown(node.content if node.type == NodeType.DOC else [node]) + "\n"
