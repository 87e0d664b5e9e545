"""
Data models for Doc Enhancer.

Core models:
- DocumentNode, Mark, NodeType, MarkType: canonical rich-text tree
- Document, DocumentImage, DocumentMetadata, StyleGuide: stored documents
- EnhancementRecord: append-only audit trail of accepted rewrites
- SelectionContext, ReplacementResult: ephemeral enhancement state
- api: request/response payloads for the HTTP API
"""

from docenhancer.models.api import (
    AnalyzeRequest,
    AnalyzeResponse,
    ApplyEnhancementRequest,
    ConfluenceFetchRequest,
    ConfluencePage,
    EnhanceRequest,
    EnhanceResponse,
    EnhanceSelectionRequest,
    EnhancementProposal,
    ImportDataResult,
    ImportDocumentRequest,
    PdfConversionRequest,
    PdfToHtmlResponse,
    PdfToMarkdownResponse,
    SelectionRequest,
    UpdateDocumentRequest,
)
from docenhancer.models.content import DocumentNode, Mark, MarkType, NodeType
from docenhancer.models.document import (
    Document,
    DocumentImage,
    DocumentMetadata,
    EnhancementRecord,
    SourceType,
    StyleGuide,
)
from docenhancer.models.selection import ReplacementResult, SelectionContext

__all__ = [
    # Content tree
    "DocumentNode",
    "Mark",
    "MarkType",
    "NodeType",
    # Documents
    "Document",
    "DocumentImage",
    "DocumentMetadata",
    "StyleGuide",
    "SourceType",
    "EnhancementRecord",
    # Selection
    "SelectionContext",
    "ReplacementResult",
    # API payloads
    "EnhanceRequest",
    "EnhanceResponse",
    "AnalyzeRequest",
    "AnalyzeResponse",
    "PdfConversionRequest",
    "PdfToHtmlResponse",
    "PdfToMarkdownResponse",
    "ConfluenceFetchRequest",
    "ConfluencePage",
    "ImportDocumentRequest",
    "UpdateDocumentRequest",
    "SelectionRequest",
    "EnhanceSelectionRequest",
    "EnhancementProposal",
    "ApplyEnhancementRequest",
    "ImportDataResult",
]
