"""
Document workflow: import, select, enhance, apply, analyze, export.

Every operation is a single request/response cycle. Enhancement is split
into a preview step (``enhance_selection``) that never mutates storage and
an explicit ``apply_enhancement`` step that splices the accepted rewrite
into the document and records it in the history.
"""

import html as html_lib
import re

from docenhancer.config import Config
from docenhancer.core.confluence.client import ConfluenceClient
from docenhancer.core.content.html import html_to_tree, tree_to_html
from docenhancer.core.content.markdown import markdown_to_tree, tree_to_markdown
from docenhancer.core.content.text import plain_text_to_tree, sanitize_tree
from docenhancer.core.replacement import NOT_FOUND_ERROR, replace_first
from docenhancer.core.selection import extract_selection_context, strip_sentinels
from docenhancer.core.storage.repository import DocumentRepository
from docenhancer.models.api import (
    AnalyzeRequest,
    ApplyEnhancementRequest,
    EnhanceRequest,
    EnhanceSelectionRequest,
    EnhancementProposal,
    ImportDocumentRequest,
    PdfConversionRequest,
    UpdateDocumentRequest,
)
from docenhancer.models.content import DocumentNode
from docenhancer.models.document import Document, DocumentImage, EnhancementRecord, SourceType
from docenhancer.models.selection import SelectionContext
from docenhancer.services.analysis import AnalysisService
from docenhancer.services.enhancement import EnhancementService
from docenhancer.services.pdf_conversion import PdfConverter
from docenhancer.utils.exceptions import (
    ContentReplacementError,
    NotFoundError,
    SelectionError,
    StoreError,
    ValidationError,
)
from docenhancer.utils.id_generator import generate_document_id, generate_enhancement_id
from docenhancer.utils.logger import get_logger

logger = get_logger(__name__)

FILE_EXTENSION_PATTERN = re.compile(r"\.(txt|md|markdown|pdf|html?)$", re.IGNORECASE)


class DocumentService:
    """
    Orchestrates stored documents and the AI operations on them.

    Usage:
        service = DocumentService(repository, enhancer, analyzer, converter, confluence, config)
        document = await service.import_document(ImportDocumentRequest(source_type="text", content="..."))
        proposal = await service.enhance_selection(document.id, EnhanceSelectionRequest(start=0, end=5))
        document = await service.apply_enhancement(document.id, ApplyEnhancementRequest(...))
    """

    def __init__(
        self,
        repository: DocumentRepository,
        enhancer: EnhancementService,
        analyzer: AnalysisService,
        converter: PdfConverter,
        confluence: ConfluenceClient,
        config: Config,
    ):
        self.repository = repository
        self.enhancer = enhancer
        self.analyzer = analyzer
        self.converter = converter
        self.confluence = confluence
        self.config = config

    # ═══════════════════════════════════════════════════════════
    # CRUD
    # ═══════════════════════════════════════════════════════════

    async def list_documents(self) -> list[Document]:
        return await self.repository.list_documents()

    async def get_document(self, document_id: str) -> Document:
        """
        Raises:
            NotFoundError: If the document doesn't exist
        """
        document = await self.repository.get_document(document_id)
        if document is None:
            raise NotFoundError("Document not found", context={"document_id": document_id})
        return document

    async def update_document(self, document_id: str, request: UpdateDocumentRequest) -> Document:
        updates = {}
        if request.name is not None:
            updates["name"] = request.name
        if request.content is not None:
            updates["content"] = sanitize_tree(request.content)
        if request.metadata is not None:
            updates["metadata"] = request.metadata

        document = await self.repository.update_document(document_id, **updates)
        if document is None:
            raise NotFoundError("Document not found", context={"document_id": document_id})
        return document

    async def delete_document(self, document_id: str) -> None:
        if not await self.repository.delete_document(document_id):
            raise NotFoundError("Document not found", context={"document_id": document_id})

    async def get_history(self, document_id: str) -> list[EnhancementRecord]:
        await self.get_document(document_id)
        return await self.repository.get_history(document_id)

    # ═══════════════════════════════════════════════════════════
    # IMPORT
    # ═══════════════════════════════════════════════════════════

    @staticmethod
    def _require_content(request: ImportDocumentRequest) -> str:
        if request.content is None:
            raise ValidationError(
                "Invalid request",
                details=f"content is required for {request.source_type.value} imports",
            )
        return request.content

    @staticmethod
    def _default_name(request: ImportDocumentRequest) -> str:
        if request.name:
            return request.name
        if request.file_name:
            return FILE_EXTENSION_PATTERN.sub("", request.file_name) or request.file_name
        return "Untitled"

    async def import_document(self, request: ImportDocumentRequest) -> Document:
        """
        Normalize content from any supported source and store it.

        Raises:
            ValidationError: If required fields for the source type are missing
            AuthenticationError / NotFoundError / UpstreamError: Wiki fetch failures
            LLMError / ResponseFormatError: PDF conversion failures
        """
        name = self._default_name(request)
        source_url = ""
        images: list[DocumentImage] = []

        if request.source_type == SourceType.TEXT:
            tree = plain_text_to_tree(self._require_content(request))
        elif request.source_type == SourceType.MARKDOWN:
            images = list(request.images)
            tree = markdown_to_tree(self._require_content(request), images)
        elif request.source_type == SourceType.HTML:
            tree = html_to_tree(self._require_content(request))
        elif request.source_type == SourceType.CONFLUENCE:
            if not request.source_url:
                raise ValidationError(
                    "Missing or invalid confluenceUrl parameter",
                )
            page = await self.confluence.fetch_page(
                request.source_url,
                email=request.confluence_email,
                token=request.confluence_token,
            )
            tree = html_to_tree(page.content)
            name = request.name or page.title
            source_url = request.source_url
        else:
            file_name = request.file_name or f"{name}.pdf"
            result = await self.converter.to_html(
                PdfConversionRequest(file_data=self._require_content(request), file_name=file_name)
            )
            tree = html_to_tree(result.html)

        document = Document(
            id=generate_document_id(),
            name=name,
            source_url=source_url,
            source_type=request.source_type,
            content=sanitize_tree(tree),
            images=images,
        )
        await self.repository.add_document(document)
        logger.info(
            f"Imported {request.source_type.value} document: {document.id}",
            extra={"document_id": document.id, "blocks": len(document.content.content)},
        )
        return document

    # ═══════════════════════════════════════════════════════════
    # ENHANCEMENT
    # ═══════════════════════════════════════════════════════════

    async def resolve_selection(self, document_id: str, start: int, end: int) -> SelectionContext:
        """
        Resolve a selection against a stored document.

        Raises:
            NotFoundError: If the document doesn't exist
            SelectionError: If the selection is empty or out of range
        """
        document = await self.get_document(document_id)
        context = extract_selection_context(document.content, start, end)
        if context is None:
            raise SelectionError("No text selected", context={"start": start, "end": end})
        return context

    async def enhance_selection(
        self, document_id: str, request: EnhanceSelectionRequest
    ) -> EnhancementProposal:
        """
        Propose a rewrite for a selection without changing the document.

        The proposal's ``original_html`` is the exact markup to pass back to
        ``apply_enhancement``.
        """
        document = await self.get_document(document_id)
        context = extract_selection_context(document.content, request.start, request.end)
        if context is None:
            raise SelectionError(
                "No text selected", context={"start": request.start, "end": request.end}
            )

        result = await self.enhancer.enhance(
            EnhanceRequest(
                full_document_html=tree_to_html(document.content),
                target_block_html=context.block_html,
                instructions=request.instructions,
                document_name=document.name,
                metadata=document.metadata,
            )
        )

        if context.located:
            original_html = strip_sentinels(context.block_html)
        else:
            original_html = html_lib.escape(context.selected_text, quote=False)

        return EnhancementProposal(
            document_id=document.id,
            selected_text=context.selected_text,
            target_block_html=context.block_html,
            original_html=original_html,
            new_html=result.new_html,
            located=context.located,
            model=result.model,
        )

    async def apply_enhancement(self, document_id: str, request: ApplyEnhancementRequest) -> Document:
        """
        Splice an accepted rewrite into the document and record it.

        Raises:
            NotFoundError: If the document doesn't exist
            ContentReplacementError: If ``original_html`` cannot be located;
                the stored document is left unchanged
            StoreError: If the history write fails; the previous content is
                restored before re-raising
        """
        document = await self.get_document(document_id)
        document_html = tree_to_html(document.content)

        result = replace_first(
            document_html,
            request.original_html,
            request.new_html,
            require_unique=self.config.enhancement.require_unique_match,
        )
        if not result.replaced:
            raise ContentReplacementError(
                result.error or NOT_FOUND_ERROR,
                context={"document_id": document_id, "occurrences": result.occurrences},
            )

        new_content: DocumentNode = sanitize_tree(html_to_tree(result.content))
        record = EnhancementRecord(
            id=generate_enhancement_id(),
            document_id=document_id,
            original_content=document.content,
            enhanced_content=new_content,
            instructions=request.instructions,
        )

        updated = await self.repository.update_document(document_id, content=new_content)
        if updated is None:
            raise NotFoundError("Document not found", context={"document_id": document_id})

        try:
            await self.repository.add_history(record)
        except StoreError:
            # No change without its audit record
            logger.error(
                f"Failed to record enhancement for {document_id}, restoring previous content",
                extra={"document_id": document_id},
            )
            await self.repository.update_document(document_id, content=document.content)
            raise

        logger.info(f"Enhancement applied to {document_id}", extra={"document_id": document_id})
        return updated

    # ═══════════════════════════════════════════════════════════
    # ANALYSIS & EXPORT
    # ═══════════════════════════════════════════════════════════

    async def analyze_document(self, document_id: str) -> Document:
        """Derive style metadata for a document and store it."""
        document = await self.get_document(document_id)
        result = await self.analyzer.analyze(
            AnalyzeRequest(
                full_document_html=tree_to_html(document.content),
                document_name=document.name,
            )
        )
        updated = await self.repository.update_document(document_id, metadata=result.to_metadata())
        if updated is None:
            raise NotFoundError("Document not found", context={"document_id": document_id})
        return updated

    async def export_markdown(self, document_id: str) -> str:
        document = await self.get_document(document_id)
        return tree_to_markdown(document.content)
