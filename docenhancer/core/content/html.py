"""
HTML <-> canonical tree conversion.

Parsing uses BeautifulSoup's ``html.parser`` builder, which keeps Confluence
storage-format tags (``ac:*`` / ``ri:*``) and CDATA bodies intact so they can
be reduced to plain blocks. Serialization is deterministic: the HTML of a
document is the concatenation of its blocks' HTML, so a block's markup is
always a substring of the document markup.
"""

import html as html_lib
import re
from collections.abc import Iterable

from bs4 import BeautifulSoup, CData, NavigableString, Tag
from bs4.element import Comment, Declaration, Doctype, ProcessingInstruction

from docenhancer.models.content import DocumentNode, Mark, MarkType, NodeType

WHITESPACE_PATTERN = re.compile(r"[ \t\r\n\f]+")

HEADING_TAGS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}

MARK_TAGS = {
    "strong": MarkType.BOLD,
    "b": MarkType.BOLD,
    "em": MarkType.ITALIC,
    "i": MarkType.ITALIC,
    "code": MarkType.CODE,
    "s": MarkType.STRIKE,
    "strike": MarkType.STRIKE,
    "del": MarkType.STRIKE,
    "u": MarkType.UNDERLINE,
    "a": MarkType.LINK,
}

SKIPPED_TAGS = frozenset(
    {
        "script",
        "style",
        "head",
        "title",
        "meta",
        "link",
        "noscript",
        "template",
        "ac:parameter",
        "ac:image",
        "ac:emoticon",
        "ac:placeholder",
    }
)

CODE_MACROS = frozenset({"code", "noformat"})

# Non-text strings BeautifulSoup keeps in the tree
IGNORED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)

MARK_OPEN_TAGS = {
    MarkType.BOLD.value: "strong",
    MarkType.ITALIC.value: "em",
    MarkType.CODE.value: "code",
    MarkType.STRIKE.value: "s",
    MarkType.UNDERLINE.value: "u",
    MarkType.LINK.value: "a",
}


# ═══════════════════════════════════════════════════════════
# PARSING
# ═══════════════════════════════════════════════════════════


def empty_paragraph() -> DocumentNode:
    return DocumentNode(type=NodeType.PARAGRAPH)


def text_node(text: str, marks: list[Mark] | None = None) -> DocumentNode:
    return DocumentNode(type=NodeType.TEXT, text=text, marks=list(marks or []))


def _is_text_string(node) -> bool:
    return isinstance(node, NavigableString) and not isinstance(node, IGNORED_STRINGS)


def _mark_for(tag: Tag) -> Mark:
    mark_type = MARK_TAGS[tag.name]
    if mark_type == MarkType.LINK:
        return Mark(type=mark_type, attrs={"href": tag.get("href", "")})
    return Mark(type=mark_type)


def _image_node(tag: Tag) -> DocumentNode:
    attrs: dict = {"src": tag.get("src", "")}
    for name in ("alt", "title"):
        if tag.get(name):
            attrs[name] = tag[name]
    for name in ("width", "height"):
        value = tag.get(name)
        if value and str(value).isdigit():
            attrs[name] = int(value)
    return DocumentNode(type=NodeType.IMAGE, attrs=attrs)


def _parse_inline(node, marks: list[Mark]) -> list[DocumentNode]:
    """Flatten an inline subtree into text, hardBreak and image nodes."""
    if _is_text_string(node):
        text = WHITESPACE_PATTERN.sub(" ", str(node))
        return [text_node(text, marks)] if text else []
    if not isinstance(node, Tag) or node.name in SKIPPED_TAGS:
        return []
    if node.name == "br":
        return [DocumentNode(type=NodeType.HARD_BREAK)]
    if node.name == "img":
        return [_image_node(node)]
    if node.name.startswith("ri:"):
        return []

    child_marks = marks
    if node.name in MARK_TAGS:
        mark = _mark_for(node)
        if all(existing.type != mark.type for existing in marks):
            child_marks = [*marks, mark]

    nodes: list[DocumentNode] = []
    for child in node.children:
        nodes.extend(_parse_inline(child, child_marks))
    return nodes


def normalize_inline(nodes: list[DocumentNode]) -> list[DocumentNode]:
    """Merge adjacent same-mark text nodes and trim whitespace at the block edges."""
    merged: list[DocumentNode] = []
    for node in nodes:
        previous = merged[-1] if merged else None
        if (
            previous is not None
            and node.is_text
            and previous.is_text
            and previous.marks == node.marks
        ):
            merged[-1] = text_node((previous.text or "") + (node.text or ""), previous.marks)
        else:
            merged.append(node)

    # Collapse double spaces created by merging
    for index, node in enumerate(merged):
        if node.is_text and "  " in (node.text or ""):
            merged[index] = text_node(WHITESPACE_PATTERN.sub(" ", node.text or ""), node.marks)

    # Whitespace at block edges and around hard breaks is not rendered
    for index, node in enumerate(merged):
        if not node.is_text:
            continue
        text = node.text or ""
        if index == 0 or merged[index - 1].type == NodeType.HARD_BREAK:
            text = text.lstrip()
        if index == len(merged) - 1 or merged[index + 1].type == NodeType.HARD_BREAK:
            text = text.rstrip()
        if text != node.text:
            merged[index] = text_node(text, node.marks)

    return [node for node in merged if not node.is_text or node.text]


class _BlockBuilder:
    """Collects blocks, wrapping stray inline runs into paragraphs."""

    def __init__(self):
        self.blocks: list[DocumentNode] = []
        self.inline: list[DocumentNode] = []

    def add_inline(self, nodes: Iterable[DocumentNode]) -> None:
        for node in nodes:
            if node.type == NodeType.IMAGE:
                self.add_block(node)
            else:
                self.inline.append(node)

    def add_block(self, block: DocumentNode) -> None:
        self.flush()
        self.blocks.append(block)

    def flush(self) -> None:
        content = normalize_inline(self.inline)
        self.inline = []
        if content:
            self.blocks.append(DocumentNode(type=NodeType.PARAGRAPH, content=content))


def _textblocks(tag: Tag, block_type: NodeType, attrs: dict | None = None) -> list[DocumentNode]:
    """
    Convert a paragraph-like tag into one or more blocks.

    Images inside the tag are lifted out as sibling blocks; a tag with no
    text still yields one empty block so empty lines survive.
    """
    blocks: list[DocumentNode] = []
    inline: list[DocumentNode] = []

    def close() -> None:
        blocks.append(
            DocumentNode(type=block_type, attrs=dict(attrs or {}), content=normalize_inline(inline))
        )

    for child in tag.children:
        for node in _parse_inline(child, []):
            if node.type == NodeType.IMAGE:
                if normalize_inline(inline):
                    close()
                inline = []
                blocks.append(node)
            else:
                inline.append(node)

    if normalize_inline(inline) or not blocks:
        close()
    return blocks


def _container_content(tag: Tag) -> list[DocumentNode]:
    return parse_blocks(tag.children) or [empty_paragraph()]


def _list_node(tag: Tag) -> DocumentNode:
    list_type = NodeType.ORDERED_LIST if tag.name == "ol" else NodeType.BULLET_LIST
    attrs: dict = {}
    if list_type == NodeType.ORDERED_LIST and str(tag.get("start", "")).isdigit():
        start = int(tag["start"])
        if start != 1:
            attrs["start"] = start

    items: list[DocumentNode] = []
    stray: list = []
    for child in tag.children:
        if isinstance(child, Tag) and child.name == "li":
            if stray:
                items.append(_list_item(stray))
                stray = []
            items.append(_list_item(list(child.children)))
        elif isinstance(child, Tag) or (_is_text_string(child) and str(child).strip()):
            stray.append(child)
    if stray:
        items.append(_list_item(stray))

    return DocumentNode(type=list_type, attrs=attrs, content=items or [_list_item([])])


def _list_item(children: list) -> DocumentNode:
    return DocumentNode(type=NodeType.LIST_ITEM, content=parse_blocks(children) or [empty_paragraph()])


def _cell_node(tag: Tag) -> DocumentNode:
    cell_type = NodeType.TABLE_HEADER if tag.name == "th" else NodeType.TABLE_CELL
    attrs: dict = {}
    for name in ("colspan", "rowspan"):
        value = str(tag.get(name, ""))
        if value.isdigit() and int(value) > 1:
            attrs[name] = int(value)
    return DocumentNode(type=cell_type, attrs=attrs, content=_container_content(tag))


def _iter_rows(tag: Tag):
    for child in tag.children:
        if not isinstance(child, Tag):
            continue
        if child.name == "tr":
            yield child
        elif child.name in ("thead", "tbody", "tfoot"):
            yield from _iter_rows(child)


def _table_node(tag: Tag) -> DocumentNode:
    rows = []
    for row in _iter_rows(tag):
        cells = [
            _cell_node(cell)
            for cell in row.children
            if isinstance(cell, Tag) and cell.name in ("td", "th")
        ]
        if cells:
            rows.append(DocumentNode(type=NodeType.TABLE_ROW, content=cells))
    return DocumentNode(type=NodeType.TABLE, content=rows)


def _code_block(text: str, language: str | None = None) -> DocumentNode:
    attrs = {"language": language} if language else {}
    content = [text_node(text)] if text else []
    return DocumentNode(type=NodeType.CODE_BLOCK, attrs=attrs, content=content)


def _pre_node(tag: Tag) -> DocumentNode:
    language = None
    code = tag.find("code")
    if isinstance(code, Tag):
        for css_class in code.get("class", []):
            if css_class.startswith("language-"):
                language = css_class.removeprefix("language-")
    return _code_block(tag.get_text().strip("\n"), language)


def _plain_body_text(body: Tag) -> str:
    """
    Text of an ``ac:plain-text-body``.

    Parsers that do not recognise CDATA outside foreign content report it as
    a ``[CDATA[...]]`` comment, so those comments are unwrapped too.
    """
    parts = []
    for string in body.descendants:
        if not isinstance(string, NavigableString):
            continue
        if isinstance(string, Comment):
            value = str(string)
            if value.startswith("[CDATA[") and value.endswith("]]"):
                parts.append(value[len("[CDATA[") : -2])
        elif _is_text_string(string):
            parts.append(str(string))
    return "".join(parts)


def _macro_node(tag: Tag, builder: _BlockBuilder) -> None:
    """Reduce a Confluence structured macro to plain blocks."""
    if tag.get("ac:name") in CODE_MACROS:
        body = tag.find("ac:plain-text-body")
        language = None
        for parameter in tag.find_all("ac:parameter"):
            if parameter.get("ac:name") == "language":
                language = parameter.get_text().strip() or None
        text = _plain_body_text(body) if isinstance(body, Tag) else ""
        builder.add_block(_code_block(text.strip("\n"), language))
        return
    for child in tag.children:
        _visit_block(child, builder)


def _visit_block(node, builder: _BlockBuilder) -> None:
    if _is_text_string(node):
        if isinstance(node, CData):
            builder.add_inline([text_node(str(node))])
        else:
            builder.add_inline(_parse_inline(node, []))
        return
    if not isinstance(node, Tag) or node.name in SKIPPED_TAGS:
        return

    name = node.name
    if name == "p":
        for block in _textblocks(node, NodeType.PARAGRAPH):
            builder.add_block(block)
    elif name in HEADING_TAGS:
        for block in _textblocks(node, NodeType.HEADING, {"level": HEADING_TAGS[name]}):
            builder.add_block(block)
    elif name in ("ul", "ol"):
        builder.add_block(_list_node(node))
    elif name == "li":
        builder.add_block(
            DocumentNode(type=NodeType.BULLET_LIST, content=[_list_item(list(node.children))])
        )
    elif name == "blockquote":
        builder.add_block(DocumentNode(type=NodeType.BLOCKQUOTE, content=_container_content(node)))
    elif name == "pre":
        builder.add_block(_pre_node(node))
    elif name == "hr":
        builder.add_block(DocumentNode(type=NodeType.HORIZONTAL_RULE))
    elif name == "table":
        builder.add_block(_table_node(node))
    elif name == "ac:structured-macro":
        _macro_node(node, builder)
    elif name in MARK_TAGS or name in ("br", "img"):
        builder.add_inline(_parse_inline(node, []))
    else:
        # Containers (div, section, span, ac:rich-text-body, ...) are unwrapped
        for child in node.children:
            _visit_block(child, builder)


def parse_blocks(children: Iterable) -> list[DocumentNode]:
    """Convert a sequence of soup nodes into canonical blocks."""
    builder = _BlockBuilder()
    for child in children:
        _visit_block(child, builder)
    builder.flush()
    return builder.blocks


def html_to_tree(html: str) -> DocumentNode:
    """
    Parse HTML (including Confluence storage format) into a canonical tree.

    Args:
        html: HTML markup

    Returns:
        ``doc`` node; never empty (an empty document holds one empty paragraph)
    """
    soup = BeautifulSoup(html or "", "html.parser")
    blocks = parse_blocks(soup.contents)
    return DocumentNode(type=NodeType.DOC, content=blocks or [empty_paragraph()])


# ═══════════════════════════════════════════════════════════
# SERIALIZATION
# ═══════════════════════════════════════════════════════════


def escape_text(text: str) -> str:
    return html_lib.escape(text, quote=False)


def _attr_string(attrs: dict) -> str:
    parts = []
    for name, value in attrs.items():
        if value is None or value == "":
            continue
        parts.append(f' {name}="{html_lib.escape(str(value), quote=True)}"')
    return "".join(parts)


def _open_mark(mark: Mark) -> str:
    tag = MARK_OPEN_TAGS[mark.type]
    if mark.type == MarkType.LINK:
        return f"<a{_attr_string({'href': mark.attrs.get('href', '')})}>"
    return f"<{tag}>"


def _close_mark(mark: Mark) -> str:
    return f"</{MARK_OPEN_TAGS[mark.type]}>"


class HtmlSerializer:
    """
    Serialize canonical nodes to HTML.

    ``markers`` maps a character offset within a textblock's plain text to a
    string emitted at that position (used to inject selection sentinels).
    Offsets count text characters, with a hard break counting as one.
    """

    def __init__(self, markers: dict[int, str] | None = None):
        self.markers = dict(markers or {})
        self._cursor = 0

    def serialize(self, node: DocumentNode) -> str:
        node_type = node.type
        if node_type == NodeType.DOC:
            return "".join(self.serialize(child) for child in node.content)
        if node_type == NodeType.TEXT:
            return self._text(node)
        if node_type == NodeType.HARD_BREAK:
            return self._take(self._cursor) + "<br>" + self._advance(1)
        if node_type == NodeType.PARAGRAPH:
            return f"<p>{self._inline(node)}</p>"
        if node_type == NodeType.HEADING:
            level = int(node.attrs.get("level", 1))
            return f"<h{level}>{self._inline(node)}</h{level}>"
        if node_type == NodeType.CODE_BLOCK:
            language = node.attrs.get("language")
            css = f' class="language-{html_lib.escape(language, quote=True)}"' if language else ""
            return f"<pre><code{css}>{self._inline(node)}</code></pre>"
        if node_type == NodeType.BULLET_LIST:
            return f"<ul>{self._children(node)}</ul>"
        if node_type == NodeType.ORDERED_LIST:
            start = node.attrs.get("start")
            attrs = _attr_string({"start": start}) if start and start != 1 else ""
            return f"<ol{attrs}>{self._children(node)}</ol>"
        if node_type == NodeType.LIST_ITEM:
            return f"<li>{self._children(node)}</li>"
        if node_type == NodeType.BLOCKQUOTE:
            return f"<blockquote>{self._children(node)}</blockquote>"
        if node_type == NodeType.HORIZONTAL_RULE:
            return "<hr>"
        if node_type == NodeType.IMAGE:
            return f"<img{_attr_string(node.attrs)}>"
        if node_type == NodeType.TABLE:
            return f"<table><tbody>{self._children(node)}</tbody></table>"
        if node_type == NodeType.TABLE_ROW:
            return f"<tr>{self._children(node)}</tr>"
        if node_type == NodeType.TABLE_HEADER:
            return f"<th{_attr_string(node.attrs)}>{self._children(node)}</th>"
        if node_type == NodeType.TABLE_CELL:
            return f"<td{_attr_string(node.attrs)}>{self._children(node)}</td>"
        return self._children(node)

    def _children(self, node: DocumentNode) -> str:
        return "".join(self.serialize(child) for child in node.content)

    def _inline(self, node: DocumentNode) -> str:
        self._cursor = 0
        body = self._children(node)
        # Markers at the very end of the block
        return body + self._take(self._cursor)

    def _take(self, position: int) -> str:
        return self.markers.pop(position, "")

    def _advance(self, length: int) -> str:
        self._cursor += length
        return ""

    def _text(self, node: DocumentNode) -> str:
        text = node.text or ""
        parts = []
        start = self._cursor
        previous = 0
        for offset in range(len(text)):
            marker = self._take(start + offset) if offset > 0 else ""
            if marker:
                parts.append(escape_text(text[previous:offset]))
                parts.append(marker)
                previous = offset
        parts.append(escape_text(text[previous:]))
        self._cursor = start + len(text)

        body = "".join(parts)
        opening = self._take(start)
        marks = node.marks
        prefix = "".join(_open_mark(mark) for mark in marks)
        suffix = "".join(_close_mark(mark) for mark in reversed(marks))
        return opening + prefix + body + suffix


def tree_to_html(node: DocumentNode) -> str:
    """Serialize a canonical node (usually a ``doc``) to HTML."""
    return HtmlSerializer().serialize(node)


def textblock_to_html_with_markers(block: DocumentNode, markers: dict[int, str]) -> str:
    """
    Serialize one textblock, emitting marker strings at plain-text offsets.

    Removing the marker strings from the result yields exactly
    ``tree_to_html(block)``.
    """
    return HtmlSerializer(markers).serialize(block)
