"""
Request and response payloads for the HTTP API.

Each endpoint has exactly one request model. Request models forbid unknown
fields so malformed bodies are rejected before any external call is made.
Field names are camelCase on the wire, matching what browser clients send.
"""

from typing import Literal

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from docenhancer.models.content import DocumentNode
from docenhancer.models.document import (
    CamelModel,
    DocumentImage,
    DocumentMetadata,
    SourceType,
    StyleGuide,
)


class RequestModel(CamelModel):
    """Strict request base."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


# ═══════════════════════════════════════════════════════════
# AI ENDPOINTS
# ═══════════════════════════════════════════════════════════


class EnhanceRequest(RequestModel):
    """Request for a targeted rewrite of a sentinel-marked block."""

    full_document_html: str = Field(..., min_length=1)
    target_block_html: str = Field(..., min_length=1)
    instructions: str | None = None
    document_name: str | None = None
    metadata: DocumentMetadata | None = None


class EnhanceResponse(CamelModel):
    """Validated rewrite returned by the model."""

    action: Literal["replace"]
    new_html: str
    model: str


class AnalyzeRequest(RequestModel):
    """Request for document metadata extraction."""

    full_document_html: str = Field(..., min_length=1)
    document_name: str | None = None


class AnalyzeResponse(CamelModel):
    """Document metadata returned by the model."""

    summary: str
    style_guide: StyleGuide
    key_terms: list[str]
    document_type: str
    model: str

    def to_metadata(self) -> DocumentMetadata:
        return DocumentMetadata(
            summary=self.summary,
            style_guide=self.style_guide,
            key_terms=self.key_terms,
            document_type=self.document_type,
        )


class PdfConversionRequest(RequestModel):
    """Base64 PDF upload for AI conversion."""

    file_data: str = Field(..., min_length=1)
    file_name: str = Field(..., min_length=1)


class PdfToHtmlResponse(CamelModel):
    html: str
    image_count: int
    model: str


class PdfToMarkdownResponse(CamelModel):
    markdown: str
    images: list[DocumentImage]
    model: str
    image_count: int


class ConfluenceFetchRequest(RequestModel):
    """Wiki fetch with optional per-request credentials."""

    confluence_url: str = Field(..., min_length=1)
    confluence_token: str | None = None
    confluence_email: str | None = None


class ConfluencePage(CamelModel):
    """Wiki page content in storage-format HTML."""

    content: str
    title: str
    version: int
    last_modified: str


# ═══════════════════════════════════════════════════════════
# DOCUMENT ENDPOINTS
# ═══════════════════════════════════════════════════════════


class ImportDocumentRequest(RequestModel):
    """
    Import a document from one of the supported sources.

    ``content`` holds the raw text for text/markdown/html sources and the
    base64 file data for PDFs; Confluence imports use ``source_url``.
    """

    name: str | None = None
    source_type: SourceType
    content: str | None = None
    source_url: str | None = None
    file_name: str | None = None
    images: list[DocumentImage] = Field(default_factory=list)
    confluence_token: str | None = None
    confluence_email: str | None = None


class UpdateDocumentRequest(RequestModel):
    name: str | None = None
    content: DocumentNode | None = None
    metadata: DocumentMetadata | None = None


class SelectionRequest(RequestModel):
    """Selection as character offsets into the document's plain text."""

    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)


class EnhanceSelectionRequest(SelectionRequest):
    instructions: str | None = None


class EnhancementProposal(CamelModel):
    """Preview of a rewrite, not yet applied to the document."""

    document_id: str
    selected_text: str
    target_block_html: str
    original_html: str
    new_html: str
    located: bool
    model: str


class ApplyEnhancementRequest(RequestModel):
    """Splice ``new_html`` over the first occurrence of ``original_html``."""

    original_html: str = Field(..., min_length=1)
    new_html: str
    instructions: str = ""


class ImportDataResult(CamelModel):
    success: bool
    documents_imported: int = 0
    history_imported: int = 0
    error: str | None = None
