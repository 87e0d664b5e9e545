"""
Tests for PDF image extraction.

PDFs are built in memory with PyMuPDF; no fixture files needed.
"""

import base64
import io

import fitz  # PyMuPDF
import pytest
from PIL import Image

from docenhancer.core.pdf import PdfImageExtractor
from docenhancer.utils.exceptions import PdfExtractionError


def png_bytes(width: int, height: int, color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def build_pdf(images_per_page: list[int]) -> bytes:
    doc = fitz.open()
    for count in images_per_page:
        page = doc.new_page()
        page.insert_text((72, 72), "Report text")
        for index in range(count):
            top = 100 + index * 60
            page.insert_image(fitz.Rect(72, top, 122, top + 50), stream=png_bytes(20 + index, 10))
    data = doc.tobytes()
    doc.close()
    return data


@pytest.mark.unit
class TestPdfImageExtractor:
    """Test image extraction and JPEG recompression."""

    def test_extracts_images_in_page_order(self):
        extractor = PdfImageExtractor(jpeg_quality=80)

        result = extractor.extract(build_pdf([1, 0, 2]))

        assert result.total_pages == 3
        assert result.total_images == 3
        assert [image.page_number for image in result.images] == [1, 3, 3]
        assert [image.image_index for image in result.images] == [0, 0, 1]

    def test_images_are_jpeg_data_uris(self):
        result = PdfImageExtractor().extract(build_pdf([1]))

        image = result.images[0]
        assert image.data.startswith("data:image/jpeg;base64,")
        assert (image.width, image.height) == (20, 10)

        decoded = Image.open(io.BytesIO(base64.b64decode(image.data.split(",", 1)[1])))
        assert decoded.format == "JPEG"
        assert decoded.size == (20, 10)

    def test_pdf_without_images(self):
        result = PdfImageExtractor().extract(build_pdf([0, 0]))

        assert result.total_pages == 2
        assert result.images == []

    def test_to_document_image(self):
        image = PdfImageExtractor().extract(build_pdf([1])).images[0]

        document_image = image.to_document_image("Image 1 from r.pdf")

        assert document_image.alt == "Image 1 from r.pdf"
        assert document_image.data == image.data
        assert document_image.width == 20

    def test_invalid_pdf_raises(self):
        with pytest.raises(PdfExtractionError):
            PdfImageExtractor().extract(b"definitely not a pdf")
