"""
Selection resolution.

Turns a user's selection into the enclosing block's markup with the
selected span wrapped in ``<target>...</target>`` sentinels, which is what
the enhancement prompt asks the model to rewrite.

The tree-based resolver works on exact offsets into the plain-text
projection, so repeated phrases resolve to the occurrence the user
actually selected. The string-based helpers keep first-occurrence
semantics for callers that only have rendered text.
"""

from docenhancer.core.content.html import textblock_to_html_with_markers
from docenhancer.core.content.text import BLOCK_SEPARATOR, block_text, iter_textblocks
from docenhancer.models.content import DocumentNode
from docenhancer.models.selection import SelectionContext
from docenhancer.utils.exceptions import SelectionError
from docenhancer.utils.logger import get_logger

logger = get_logger(__name__)

TARGET_OPEN = "<target>"
TARGET_CLOSE = "</target>"


def wrap_target(text: str) -> str:
    return f"{TARGET_OPEN}{text}{TARGET_CLOSE}"


def strip_sentinels(html: str) -> str:
    """Remove ``<target>`` sentinels, leaving the block markup unchanged otherwise."""
    return html.replace(TARGET_OPEN, "").replace(TARGET_CLOSE, "")


def _validate_range(start: int, end: int, length: int) -> None:
    if start < 0 or end < start:
        raise SelectionError(
            "Invalid selection range",
            context={"start": start, "end": end},
        )
    if end > length:
        raise SelectionError(
            "Selection is outside the document",
            context={"start": start, "end": end, "length": length},
        )


def extract_selection_context(document: DocumentNode, start: int, end: int) -> SelectionContext | None:
    """
    Resolve a selection against the document tree.

    Args:
        document: Canonical tree
        start: Selection start offset in the plain-text projection
        end: Selection end offset (exclusive)

    Returns:
        SelectionContext, or None for an empty selection

    Raises:
        SelectionError: If the range is invalid or outside the document
    """
    blocks = list(iter_textblocks(document))
    texts = [block_text(block) for block in blocks]
    plain = BLOCK_SEPARATOR.join(texts)
    _validate_range(start, end, len(plain))

    if start == end:
        return None

    offset = 0
    for block, text in zip(blocks, texts):
        block_end = offset + len(text)
        if offset <= start and end <= block_end:
            local_start, local_end = start - offset, end - offset
            block_html = textblock_to_html_with_markers(
                block, {local_start: TARGET_OPEN, local_end: TARGET_CLOSE}
            )
            return SelectionContext(
                selected_text=text[local_start:local_end],
                block_html=block_html,
                start=start,
                end=end,
            )
        offset = block_end + len(BLOCK_SEPARATOR)

    # Selection spans several blocks
    selected = plain[start:end]
    logger.debug(f"Selection [{start}, {end}) spans multiple blocks, wrapping raw text")
    return SelectionContext(
        selected_text=selected,
        block_html=wrap_target(selected),
        start=start,
        end=end,
        located=False,
    )


def extract_paragraph_with_selection(full_text: str, start: int, end: int) -> SelectionContext | None:
    """
    Wrap a selection inside its enclosing paragraph of plain text.

    Paragraph boundaries are blank lines. The selected text is re-located
    inside the paragraph by first occurrence, so a phrase repeated earlier
    in the same paragraph wraps the earlier copy. Whitespace at either edge
    of the selection stays outside the sentinels. Returns None for an empty
    selection.
    """
    _validate_range(start, end, len(full_text))
    if start == end:
        return None
    selected = full_text[start:end]
    needle = selected.strip() or selected

    paragraph_start = start
    while paragraph_start > 0:
        if full_text[paragraph_start - 1] == "\n" and full_text[paragraph_start - 2 : paragraph_start - 1] == "\n":
            break
        paragraph_start -= 1

    paragraph_end = end
    while paragraph_end < len(full_text):
        if full_text[paragraph_end] == "\n" and full_text[paragraph_end + 1 : paragraph_end + 2] == "\n":
            break
        paragraph_end += 1

    paragraph = full_text[paragraph_start:paragraph_end].strip()
    index = paragraph.find(needle)
    if index == -1:
        return SelectionContext(
            selected_text=selected,
            block_html=wrap_target(selected),
            start=start,
            end=end,
            located=False,
        )

    marked = paragraph[:index] + wrap_target(needle) + paragraph[index + len(needle) :]
    return SelectionContext(selected_text=selected, block_html=marked, start=start, end=end)


def locate_selection(rendered_text: str, selected_text: str) -> SelectionContext | None:
    """
    Locate selected text in rendered text and wrap it within its line.

    Uses the first occurrence of ``selected_text``. Text that does not occur
    falls back to the raw text wrapped in sentinels with ``located=False``.
    An empty selection returns None.
    """
    if not selected_text:
        return None
    start = rendered_text.find(selected_text)
    if start == -1:
        logger.warning("Selected text not found in document, wrapping raw text")
        return SelectionContext(
            selected_text=selected_text,
            block_html=wrap_target(selected_text),
            start=0,
            end=0,
            located=False,
        )
    end = start + len(selected_text)
    needle = selected_text.strip() or selected_text
    needle_start = start + selected_text.find(needle)

    line_start = rendered_text.rfind("\n", 0, needle_start) + 1
    line_end = rendered_text.find("\n", needle_start + len(needle))
    if line_end == -1:
        line_end = len(rendered_text)

    line = rendered_text[line_start:line_end].strip()
    marked = line.replace(needle, wrap_target(needle), 1)
    return SelectionContext(selected_text=selected_text, block_html=marked, start=start, end=end)
