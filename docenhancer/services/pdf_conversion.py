"""
AI-assisted PDF conversion to HTML or Markdown.

Flow:
1. Extract embedded images locally (PyMuPDF + Pillow)
2. Send the PDF to the model with a layout prompt that asks for
   ``{{IMAGE_n}}`` placeholders where images appear
3. Reconcile the placeholders against the images actually extracted
"""

import asyncio
import base64
import binascii

from docenhancer.config import Config
from docenhancer.core.content.placeholders import (
    count_placeholders,
    image_alt,
    reconcile_image_placeholders,
    substitute_image_placeholders,
)
from docenhancer.core.llm.base import Attachment, LLMProvider
from docenhancer.core.pdf.images import ExtractedImage, PdfImageExtractor
from docenhancer.models.api import PdfConversionRequest, PdfToHtmlResponse, PdfToMarkdownResponse
from docenhancer.services.enhancement import clean_generated_content
from docenhancer.utils.exceptions import EmptyResponseError, PdfExtractionError, ValidationError
from docenhancer.utils.logger import get_logger

logger = get_logger(__name__)

EMPTY_OUTPUT_DETAILS = "The AI did not return any content. The PDF might be empty or unreadable."

IMAGE_EXCLUSIONS = """   - ONLY replace actual visible images (photos, logos, diagrams, charts)
   - DO NOT create placeholders for page breaks, blank spaces, decorative lines or borders,
     background patterns, or whitespace between sections"""


def build_html_prompt(image_count: int) -> str:
    if image_count > 0:
        image_rule = (
            "   - IMPORTANT: Replace actual visible images with placeholders "
            f"{{{{IMAGE_0}}}}, {{{{IMAGE_1}}}}, etc. (we have {image_count} images)\n"
            "   - Put each placeholder in its own paragraph, e.g. <p>{{IMAGE_0}}</p>"
        )
        placeholder_requirement = (
            f"- Replace images with {{{{IMAGE_N}}}} placeholders (0 to {image_count - 1})"
        )
    else:
        image_rule = "   - No images detected in this PDF"
        placeholder_requirement = "- No image placeholders needed"

    return f"""Convert this PDF document to well-formatted HTML. Follow these rules EXACTLY:

CRITICAL FORMATTING RULES:
1. **Headers**: Use proper hierarchy
   - Document title → <h1>
   - Major sections → <h2>
   - Subsections → <h3>

2. **Line Breaks**: Preserve original line breaks
   - Use <p> tags for paragraphs
   - Use <br> for line breaks within contact info, addresses, dates
   - Don't wrap everything in a single paragraph

3. **Lists**:
   - Use <ul> and <li> for bullet points
   - Use <ol> and <li> for numbered lists

4. **Emphasis**:
   - Use <strong> for labels and important terms
   - Use <em> for emphasis

5. **Tables**:
   - Use proper <table>, <thead>, <tbody>, <tr>, <th>, <td> structure

6. **Images**:
{image_rule}
{IMAGE_EXCLUSIONS}

REQUIREMENTS:
- Output ONLY HTML (no explanations, no code fences, no DOCTYPE, no <html>, <head>, or <body> tags)
- Start directly with content (first tag should be content like <h1> or <p>)
- Use proper heading hierarchy
- Use semantic HTML tags
- Preserve line breaks with <br> where appropriate
- Use proper list structures
{placeholder_requirement}"""


MARKDOWN_PROMPT = f"""Convert this PDF document to well-formatted Markdown. Follow these rules EXACTLY:

CRITICAL FORMATTING RULES:
1. **Headers**: Use proper hierarchy
   - Document title → # (h1)
   - Major sections → ## (h2)
   - Subsections → ### (h3)

2. **Line Breaks**: Preserve original line breaks
   - Contact info, addresses, dates should be on SEPARATE lines
   - Use TWO blank lines between major sections
   - Use ONE blank line between paragraphs

3. **Lists**:
   - Use - for bullet points
   - Use 1. 2. 3. for numbered lists

4. **Emphasis**:
   - Use **bold** for labels and important terms
   - Use *italics* for emphasis

5. **Images**:
   - Use {{{{IMAGE_0}}}}, {{{{IMAGE_1}}}}, etc. in order of appearance, each on its own line
{IMAGE_EXCLUSIONS}

REQUIREMENTS:
- Output ONLY markdown (no explanations, no code fences around the entire document)
- Start directly with content
- Use proper heading hierarchy
- Preserve line breaks (especially for contact info, dates, locations)
- Add blank lines between sections
- Replace images with {{{{IMAGE_N}}}} placeholders"""


def decode_pdf_data(file_data: str, max_bytes: int) -> bytes:
    """
    Decode base64 PDF data, accepting an optional data-URI prefix.

    Raises:
        ValidationError: If the data is not base64 or exceeds ``max_bytes``
    """
    payload = file_data.split(",", 1)[1] if file_data.startswith("data:") else file_data
    try:
        pdf_bytes = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("Invalid request", details=f"fileData is not valid base64: {e}") from e

    if len(pdf_bytes) > max_bytes:
        raise ValidationError(
            "Invalid request",
            details=f"PDF exceeds the {max_bytes} byte limit",
        )
    return pdf_bytes


class PdfConverter:
    """
    Convert PDFs to HTML or Markdown with embedded images.

    Usage:
        converter = PdfConverter(llm, config)
        result = await converter.to_html(PdfConversionRequest(file_data=..., file_name="a.pdf"))
    """

    def __init__(
        self,
        llm_provider: LLMProvider,
        config: Config,
        extractor: PdfImageExtractor | None = None,
    ):
        self.llm = llm_provider
        self.config = config
        self.extractor = extractor or PdfImageExtractor(jpeg_quality=config.pdf.jpeg_quality)

    async def _extract_images(self, pdf_bytes: bytes) -> list[ExtractedImage]:
        """Extract images; failures are logged and conversion continues without images."""
        try:
            result = await asyncio.to_thread(self.extractor.extract, pdf_bytes)
        except PdfExtractionError as e:
            logger.warning(f"Failed to extract images, continuing without them: {e}")
            return []
        return result.images

    async def _generate(self, prompt: str, request: PdfConversionRequest, payload: str) -> str:
        text = await self.llm.complete(
            f"{prompt}\n\nDocument: {request.file_name}",
            attachments=[Attachment(data=payload, filename=request.file_name)],
            max_tokens=self.config.llm.max_tokens,
            temperature=self.config.llm.conversion_temperature,
        )
        if not text or not text.strip():
            logger.error(f"No content generated for {request.file_name}")
            raise EmptyResponseError("No content generated by AI", details=EMPTY_OUTPUT_DETAILS)
        return clean_generated_content(text)

    async def _prepare(self, request: PdfConversionRequest) -> tuple[str, list[ExtractedImage]]:
        pdf_bytes = decode_pdf_data(request.file_data, self.config.pdf.max_file_bytes)
        logger.info(f"Converting PDF: {request.file_name} ({len(pdf_bytes)} bytes)")
        images = await self._extract_images(pdf_bytes)
        # Normalized base64 without any data-URI prefix
        return base64.b64encode(pdf_bytes).decode("ascii"), images

    async def to_html(self, request: PdfConversionRequest) -> PdfToHtmlResponse:
        """
        Convert a PDF to HTML with images embedded as data-URI ``<img>`` tags.

        Raises:
            ValidationError: If the file data is invalid
            LLMError: If the provider call fails
            EmptyResponseError: If the model returned nothing
        """
        payload, images = await self._prepare(request)
        html = await self._generate(build_html_prompt(len(images)), request, payload)

        document_images = [
            image.to_document_image(image_alt(index, request.file_name))
            for index, image in enumerate(images)
        ]
        html = substitute_image_placeholders(html, document_images, file_name=request.file_name)

        logger.info(
            f"Converted PDF to HTML: {request.file_name} "
            f"({len(html)} chars, {len(images)} images embedded)"
        )
        return PdfToHtmlResponse(html=html, image_count=len(images), model=self.llm.model)

    async def to_markdown(self, request: PdfConversionRequest) -> PdfToMarkdownResponse:
        """
        Convert a PDF to Markdown, returning images separately.

        Valid ``{{IMAGE_n}}`` placeholders stay in the Markdown; ones without a
        matching extracted image are removed.
        """
        payload, images = await self._prepare(request)
        markdown = await self._generate(MARKDOWN_PROMPT, request, payload)

        logger.debug(
            f"Model created {count_placeholders(markdown)} image placeholders, "
            f"{len(images)} images extracted"
        )
        markdown = reconcile_image_placeholders(markdown, len(images))

        return PdfToMarkdownResponse(
            markdown=markdown,
            images=[
                image.to_document_image(image_alt(index, request.file_name))
                for index, image in enumerate(images)
            ],
            model=self.llm.model,
            image_count=len(images),
        )
