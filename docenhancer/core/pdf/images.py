"""
Embedded image extraction from PDFs.

Uses PyMuPDF (fitz) to walk each page's image XObjects and Pillow to
recompress them as JPEG data URIs. Images are numbered in page order, which
is the order the conversion prompt asks the model to place ``{{IMAGE_n}}``
placeholders in.
"""

import base64
import io

import fitz  # PyMuPDF
from PIL import Image
from pydantic import BaseModel

from docenhancer.models.document import DocumentImage
from docenhancer.utils.exceptions import PdfExtractionError
from docenhancer.utils.logger import get_logger

logger = get_logger(__name__)


class ExtractedImage(BaseModel):
    """One embedded image, recompressed as a JPEG data URI."""

    data: str
    width: int
    height: int
    page_number: int
    image_index: int
    format: str = "jpeg"

    def to_document_image(self, alt: str) -> DocumentImage:
        return DocumentImage(data=self.data, alt=alt, width=self.width, height=self.height)


class ImageExtractionResult(BaseModel):
    images: list[ExtractedImage]
    total_pages: int

    @property
    def total_images(self) -> int:
        return len(self.images)


class PdfImageExtractor:
    """
    Extract raster images from a PDF.

    Usage:
        extractor = PdfImageExtractor(jpeg_quality=80)
        result = extractor.extract(pdf_bytes)
    """

    def __init__(self, jpeg_quality: int = 80):
        self.jpeg_quality = jpeg_quality

    def extract(self, pdf_bytes: bytes) -> ImageExtractionResult:
        """
        Extract every embedded image, page by page.

        Images that fail to decode are skipped with a warning.

        Raises:
            PdfExtractionError: If the PDF cannot be opened
        """
        try:
            doc = fitz.open(stream=pdf_bytes, filetype="pdf")
        except Exception as e:
            raise PdfExtractionError(f"Failed to extract images: {e}") from e

        images: list[ExtractedImage] = []
        try:
            for page_index, page in enumerate(doc):
                page_number = page_index + 1
                image_index = 0
                for img_info in page.get_images(full=True):
                    xref = img_info[0]
                    try:
                        image = self._extract_one(doc, xref, page_number, image_index)
                    except Exception as e:
                        logger.warning(
                            f"Could not extract image xref={xref} from page {page_number}: {e}"
                        )
                        continue
                    if image is not None:
                        images.append(image)
                        image_index += 1
            total_pages = doc.page_count
        finally:
            doc.close()

        logger.info(f"Extracted {len(images)} images from {total_pages} pages")
        return ImageExtractionResult(images=images, total_pages=total_pages)

    def _extract_one(self, doc, xref: int, page_number: int, image_index: int) -> ExtractedImage | None:
        pix = fitz.Pixmap(doc, xref)
        if pix.colorspace is None or not pix.width or not pix.height:
            # Stencil masks carry no colour data
            return None

        if pix.alpha:
            pix = fitz.Pixmap(pix, 0)
        if pix.n > 3:
            pix = fitz.Pixmap(fitz.csRGB, pix)

        mode = "L" if pix.n == 1 else "RGB"
        image = Image.frombytes(mode, (pix.width, pix.height), pix.samples)

        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=self.jpeg_quality)
        encoded = base64.b64encode(buffer.getvalue()).decode("ascii")

        return ExtractedImage(
            data=f"data:image/jpeg;base64,{encoded}",
            width=pix.width,
            height=pix.height,
            page_number=page_number,
            image_index=image_index,
        )
