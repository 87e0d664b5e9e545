"""
Tests for selection resolution.

Tests cover:
1. Tree-based resolution with exact offsets
2. Repeated phrases resolving to the selected occurrence
3. Empty, invalid and multi-block selections
4. String-based helpers (first-occurrence semantics)
"""

import pytest

from docenhancer.core.content import html_to_tree, plain_text_to_tree, tree_to_html, tree_to_plain_text
from docenhancer.core.selection import (
    TARGET_CLOSE,
    TARGET_OPEN,
    extract_paragraph_with_selection,
    extract_selection_context,
    locate_selection,
    strip_sentinels,
    wrap_target,
)
from docenhancer.utils.exceptions import SelectionError


@pytest.fixture
def document():
    return html_to_tree(
        "<h1>Guide</h1>"
        "<p>The cat sat on the mat. The cat slept.</p>"
        "<p>Use <strong>bold</strong> words wisely.</p>"
    )


@pytest.mark.unit
class TestExtractSelectionContext:
    """Test tree-based selection resolution."""

    def test_selection_inside_block(self, document):
        plain = tree_to_plain_text(document)
        start = plain.index("sat")

        context = extract_selection_context(document, start, start + 3)

        assert context.selected_text == "sat"
        assert context.located is True
        assert context.block_html == "<p>The cat <target>sat</target> on the mat. The cat slept.</p>"

    def test_sentinel_free_markup_equals_block_html(self, document):
        plain = tree_to_plain_text(document)
        start = plain.index("bold")

        context = extract_selection_context(document, start, start + len("bold words"))

        assert strip_sentinels(context.block_html) == tree_to_html(document.content[2])
        assert strip_sentinels(context.block_html) in tree_to_html(document)

    def test_repeated_phrase_uses_selected_occurrence(self, document):
        plain = tree_to_plain_text(document)
        second = plain.index("The cat", plain.index("The cat") + 1)

        context = extract_selection_context(document, second, second + len("The cat"))

        assert context.block_html == (
            "<p>The cat sat on the mat. <target>The cat</target> slept.</p>"
        )

    def test_whole_block_selection(self, document):
        context = extract_selection_context(document, 0, len("Guide"))

        assert context.block_html == "<h1><target>Guide</target></h1>"

    def test_empty_selection_returns_none(self, document):
        assert extract_selection_context(document, 5, 5) is None

    def test_invalid_range(self, document):
        with pytest.raises(SelectionError, match="Invalid selection range"):
            extract_selection_context(document, 10, 4)

    def test_out_of_bounds(self, document):
        length = len(tree_to_plain_text(document))

        with pytest.raises(SelectionError, match="outside the document"):
            extract_selection_context(document, 0, length + 1)

    def test_multi_block_selection_falls_back(self, document):
        plain = tree_to_plain_text(document)
        start = plain.index("Guide")
        end = plain.index("cat") + 3

        context = extract_selection_context(document, start, end)

        assert context.located is False
        assert context.selected_text == "Guide\nThe cat"
        assert context.block_html == wrap_target("Guide\nThe cat")

    def test_selection_in_plain_text_document(self):
        tree = plain_text_to_tree("first\n\nthird line")

        context = extract_selection_context(tree, 7, 12)

        assert context.selected_text == "third"
        assert context.block_html == "<p><target>third</target> line</p>"

    def test_selection_after_hard_break(self):
        tree = html_to_tree("<p>one<br>two</p>")

        context = extract_selection_context(tree, 4, 7)

        assert context.block_html == "<p>one<br><target>two</target></p>"


@pytest.mark.unit
class TestStringHelpers:
    """Test string-based selection helpers."""

    def test_wrap_and_strip(self):
        wrapped = wrap_target("text")

        assert wrapped == f"{TARGET_OPEN}text{TARGET_CLOSE}"
        assert strip_sentinels(f"<p>{wrapped}</p>") == "<p>text</p>"

    def test_paragraph_with_selection(self):
        full_text = "First paragraph.\n\nSecond has the word here.\n\nThird."
        start = full_text.index("word")

        context = extract_paragraph_with_selection(full_text, start, start + 4)

        assert context.block_html == "Second has the <target>word</target> here."
        assert context.located is True

    def test_paragraph_first_occurrence(self):
        full_text = "echo one echo two"
        second = full_text.rindex("echo")

        context = extract_paragraph_with_selection(full_text, second, second + 4)

        # String-based matching wraps the earlier copy
        assert context.block_html == "<target>echo</target> one echo two"

    def test_locate_selection_expands_to_line(self):
        rendered = "Title\nA line with target words\nAnother"

        context = locate_selection(rendered, "target")

        assert context.block_html == "A line with <target>target</target> words"
        assert context.start == rendered.index("target")

    def test_locate_selection_not_found(self):
        context = locate_selection("Nothing here", "missing")

        assert context.located is False
        assert context.block_html == "<target>missing</target>"

    def test_paragraph_empty_selection(self):
        assert extract_paragraph_with_selection("Hello world", 3, 3) is None

    def test_paragraph_leading_whitespace_selection(self):
        full_text = "  Hello world"

        context = extract_paragraph_with_selection(full_text, 0, 7)

        assert context.selected_text == "  Hello"
        assert context.block_html == "<target>Hello</target> world"
        assert context.located is True

    def test_locate_selection_empty(self):
        assert locate_selection("Hello world", "") is None

    def test_locate_selection_leading_whitespace(self):
        context = locate_selection("Title\nHello world", "\nHello")

        assert context.block_html == "<target>Hello</target> world"
        assert context.start == 5
