"""
Content normalization between import formats and the canonical tree.
"""

from docenhancer.core.content.html import html_to_tree, tree_to_html
from docenhancer.core.content.markdown import markdown_to_html, markdown_to_tree, tree_to_markdown
from docenhancer.core.content.placeholders import (
    count_placeholders,
    reconcile_image_placeholders,
    substitute_image_placeholders,
)
from docenhancer.core.content.text import (
    create_empty_tree,
    extract_images,
    plain_text_to_tree,
    sanitize_tree,
    tree_to_plain_text,
)

__all__ = [
    "html_to_tree",
    "tree_to_html",
    "markdown_to_html",
    "markdown_to_tree",
    "tree_to_markdown",
    "plain_text_to_tree",
    "tree_to_plain_text",
    "create_empty_tree",
    "extract_images",
    "sanitize_tree",
    "count_placeholders",
    "reconcile_image_placeholders",
    "substitute_image_placeholders",
]
