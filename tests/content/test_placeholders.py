"""
Tests for {{IMAGE_n}} placeholder handling.
"""

import pytest

from docenhancer.core.content.placeholders import (
    count_placeholders,
    image_alt,
    placeholder,
    reconcile_image_placeholders,
    substitute_image_placeholders,
)
from docenhancer.models.document import DocumentImage


@pytest.fixture
def images():
    return [
        DocumentImage(data="data:image/jpeg;base64,AAA", alt="first", width=10, height=20),
        DocumentImage(data="data:image/jpeg;base64,BBB", alt="second", width=30, height=40),
    ]


@pytest.mark.unit
class TestPlaceholders:
    """Test placeholder formatting, reconciliation and substitution."""

    def test_placeholder_format(self):
        assert placeholder(0) == "{{IMAGE_0}}"
        assert placeholder(12) == "{{IMAGE_12}}"

    def test_count_placeholders(self):
        assert count_placeholders("{{IMAGE_0}} text {{IMAGE_1}} {{IMAGE_x}}") == 2
        assert count_placeholders("") == 0

    def test_image_alt(self):
        assert image_alt(0, "report.pdf") == "Image 1 from report.pdf"

    def test_reconcile_drops_unbacked_placeholders(self):
        text = "A\n\n{{IMAGE_0}}\n\nB\n\n{{IMAGE_3}}\n\nC"

        result = reconcile_image_placeholders(text, image_count=2)

        assert result == "A\n\n{{IMAGE_0}}\n\nB\n\nC"

    def test_reconcile_without_images_removes_all(self):
        assert reconcile_image_placeholders("{{IMAGE_0}} text", image_count=0) == "text"

    def test_reconcile_keeps_valid_text(self):
        text = "Intro {{IMAGE_1}} outro"

        assert reconcile_image_placeholders(text, image_count=2) == text

    def test_substitute_with_file_name_alt(self, images):
        html = substitute_image_placeholders("<p>{{IMAGE_1}}</p>", images, file_name="guide.pdf")

        assert html == (
            '<p><img src="data:image/jpeg;base64,BBB" alt="Image 2 from guide.pdf" '
            'width="30" height="40" /></p>'
        )

    def test_substitute_uses_image_alt_without_file_name(self, images):
        html = substitute_image_placeholders("{{IMAGE_0}}", images, with_size=False)

        assert html == '<img src="data:image/jpeg;base64,AAA" alt="first" />'

    def test_substitute_removes_leftovers(self, images):
        assert substitute_image_placeholders("x{{IMAGE_9}}y", images) == "xy"
