"""
Doc Enhancer FastAPI Application

A REST API server for AI-assisted document enhancement.
Provides the stateless AI endpoints (enhance, analyze, wiki fetch, PDF
conversion) and a document workflow API (import, select, enhance, apply,
analyze, export) over a key-value document store.
"""

from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel

from docenhancer.config import Config
from docenhancer.core.confluence import ConfluenceClient
from docenhancer.core.factory import LLMFactory, StorageFactory
from docenhancer.core.llm import LLMProvider, UnconfiguredLLM
from docenhancer.core.storage import DocumentRepository, KeyValueStore, StorageUsage
from docenhancer.core.tokenizer import Tokenizer
from docenhancer.models import (
    AnalyzeRequest,
    AnalyzeResponse,
    ApplyEnhancementRequest,
    ConfluenceFetchRequest,
    ConfluencePage,
    Document,
    EnhanceRequest,
    EnhanceResponse,
    EnhanceSelectionRequest,
    EnhancementProposal,
    EnhancementRecord,
    ImportDataResult,
    ImportDocumentRequest,
    PdfConversionRequest,
    PdfToHtmlResponse,
    PdfToMarkdownResponse,
    SelectionContext,
    SelectionRequest,
    UpdateDocumentRequest,
)
from docenhancer.services import AnalysisService, DocumentService, EnhancementService, PdfConverter
from docenhancer.utils.exceptions import DocEnhancerError, NotFoundError, ValidationError
from docenhancer.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

APP_VERSION = "1.0.0"


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    llm_provider: str
    llm_model: str
    storage_backend: str


# ═══════════════════════════════════════════════════════════
# COMPONENT WIRING
# ═══════════════════════════════════════════════════════════


def init_components(
    app: FastAPI,
    config: Config,
    llm: LLMProvider | None = None,
    store: KeyValueStore | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> None:
    """
    Build every component from config and attach it to ``app.state``.

    Explicit ``llm``, ``store`` and ``http_client`` arguments replace the
    configured ones (tests pass mocks and in-memory storage).
    """
    if llm is None:
        try:
            llm = LLMFactory.create(config.llm)
        except ValueError as e:
            logger.warning(f"LLM provider unavailable, AI endpoints disabled: {e}")
            llm = UnconfiguredLLM(str(e))

    store = store or StorageFactory.create(config.storage)
    repository = StorageFactory.create_repository(config.storage, store)
    tokenizer = Tokenizer(config.tokenizer)

    enhancer = EnhancementService(llm, config, tokenizer)
    analyzer = AnalysisService(llm, config, tokenizer)
    converter = PdfConverter(llm, config)
    confluence = ConfluenceClient(config.confluence, client=http_client)

    app.state.config = config
    app.state.llm = llm
    app.state.store = store
    app.state.repository = repository
    app.state.enhancer = enhancer
    app.state.analyzer = analyzer
    app.state.converter = converter
    app.state.confluence = confluence
    app.state.documents = DocumentService(
        repository=repository,
        enhancer=enhancer,
        analyzer=analyzer,
        converter=converter,
        confluence=confluence,
        config=config,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    if not hasattr(app.state, "documents"):
        # Load configuration from environment or use defaults
        config = Config.from_env()

        setup_logging(
            level=config.logging.level,
            log_to_file=config.logging.log_to_file,
            log_dir=config.logging.log_dir,
            file_rotation=config.logging.file_rotation,
            file_retention=config.logging.file_retention,
            compression=config.logging.compression,
            serialize=config.logging.serialize,
        )

        logger.info("Starting Doc Enhancer server")
        logger.info(
            f"Configuration: LLM={config.llm.provider}/{config.llm.model}, "
            f"Storage={config.storage.backend}"
        )
        init_components(app, config)

    await app.state.store.initialize()
    logger.info("Doc Enhancer initialized")

    yield

    logger.info("Shutting down Doc Enhancer server")
    await app.state.llm.close()
    await app.state.confluence.close()
    await app.state.store.close()
    logger.info("Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title="Doc Enhancer API",
    description="AI-assisted, context-aware document enhancement",
    version=APP_VERSION,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.from_env().server.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ═══════════════════════════════════════════════════════════
# ERROR HANDLING
# ═══════════════════════════════════════════════════════════


@app.exception_handler(DocEnhancerError)
async def doc_enhancer_error_handler(request: Request, exc: DocEnhancerError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


# ═══════════════════════════════════════════════════════════
# DEPENDENCIES
# ═══════════════════════════════════════════════════════════


def get_documents(request: Request) -> DocumentService:
    return request.app.state.documents


def get_repository(request: Request) -> DocumentRepository:
    return request.app.state.repository


def get_enhancer(request: Request) -> EnhancementService:
    return request.app.state.enhancer


def get_analyzer(request: Request) -> AnalysisService:
    return request.app.state.analyzer


def get_converter(request: Request) -> PdfConverter:
    return request.app.state.converter


def get_confluence(request: Request) -> ConfluenceClient:
    return request.app.state.confluence


# ═══════════════════════════════════════════════════════════
# AI ENDPOINTS
# ═══════════════════════════════════════════════════════════


@app.post("/api/enhance-content", response_model=EnhanceResponse)
async def enhance_content(
    body: EnhanceRequest, enhancer: EnhancementService = Depends(get_enhancer)
):
    """
    Rewrite the ``<target>``-marked part of an HTML block.

    The full document HTML is used as read-only context; optional metadata
    steers tone, perspective and terminology.
    """
    return await enhancer.enhance(body)


@app.post("/api/analyze-document", response_model=AnalyzeResponse)
async def analyze_document(
    body: AnalyzeRequest, analyzer: AnalysisService = Depends(get_analyzer)
):
    """Extract summary, style guide, key terms and document type."""
    return await analyzer.analyze(body)


@app.get("/api/confluence-fetch", response_model=ConfluencePage)
async def confluence_fetch(
    confluence_url: str | None = Query(default=None, alias="confluenceUrl"),
    confluence: ConfluenceClient = Depends(get_confluence),
):
    """Fetch a wiki page using server-side credentials."""
    if not confluence_url:
        raise ValidationError("Missing or invalid confluenceUrl parameter")
    return await confluence.fetch_page(confluence_url)


@app.post("/api/confluence-fetch", response_model=ConfluencePage)
async def confluence_fetch_with_credentials(
    body: ConfluenceFetchRequest, confluence: ConfluenceClient = Depends(get_confluence)
):
    """Fetch a wiki page; credentials in the body override server ones."""
    return await confluence.fetch_page(
        body.confluence_url,
        email=body.confluence_email,
        token=body.confluence_token,
    )


@app.post("/api/pdf-to-html", response_model=PdfToHtmlResponse)
async def pdf_to_html(body: PdfConversionRequest, converter: PdfConverter = Depends(get_converter)):
    """Convert a base64 PDF to HTML with images embedded as data URIs."""
    return await converter.to_html(body)


@app.post("/api/pdf-to-markdown", response_model=PdfToMarkdownResponse)
async def pdf_to_markdown(
    body: PdfConversionRequest, converter: PdfConverter = Depends(get_converter)
):
    """Convert a base64 PDF to Markdown with ``{{IMAGE_n}}`` placeholders."""
    return await converter.to_markdown(body)


# ═══════════════════════════════════════════════════════════
# DOCUMENT ENDPOINTS
# ═══════════════════════════════════════════════════════════


@app.get("/documents", response_model=list[Document])
async def list_documents(documents: DocumentService = Depends(get_documents)):
    return await documents.list_documents()


@app.post("/documents", response_model=Document, status_code=201)
async def import_document(
    body: ImportDocumentRequest, documents: DocumentService = Depends(get_documents)
):
    """
    Import a document from text, markdown, html, a wiki page or a PDF.

    Content is normalized into the canonical tree before storage.
    """
    return await documents.import_document(body)


@app.delete("/documents", status_code=204)
async def clear_documents(repository: DocumentRepository = Depends(get_repository)):
    """Delete every document and all enhancement history."""
    await repository.clear_all()
    return Response(status_code=204)


@app.get("/documents/{document_id}", response_model=Document)
async def get_document(document_id: str, documents: DocumentService = Depends(get_documents)):
    return await documents.get_document(document_id)


@app.patch("/documents/{document_id}", response_model=Document)
async def update_document(
    document_id: str,
    body: UpdateDocumentRequest,
    documents: DocumentService = Depends(get_documents),
):
    return await documents.update_document(document_id, body)


@app.delete("/documents/{document_id}", status_code=204)
async def delete_document(document_id: str, documents: DocumentService = Depends(get_documents)):
    """Delete a document and its enhancement history."""
    await documents.delete_document(document_id)
    return Response(status_code=204)


@app.get("/documents/{document_id}/history", response_model=list[EnhancementRecord])
async def get_history(document_id: str, documents: DocumentService = Depends(get_documents)):
    return await documents.get_history(document_id)


@app.get("/documents/{document_id}/history/latest", response_model=EnhancementRecord)
async def get_latest_enhancement(
    document_id: str, repository: DocumentRepository = Depends(get_repository)
):
    record = await repository.get_latest_enhancement(document_id)
    if record is None:
        raise NotFoundError("No enhancements recorded", context={"document_id": document_id})
    return record


@app.delete("/history/{record_id}", status_code=204)
async def delete_history(record_id: str, repository: DocumentRepository = Depends(get_repository)):
    if not await repository.delete_history(record_id):
        raise NotFoundError("Enhancement record not found", context={"record_id": record_id})
    return Response(status_code=204)


@app.post("/documents/{document_id}/selection", response_model=SelectionContext)
async def resolve_selection(
    document_id: str,
    body: SelectionRequest,
    documents: DocumentService = Depends(get_documents),
):
    """Show the sentinel-marked block a selection resolves to."""
    return await documents.resolve_selection(document_id, body.start, body.end)


@app.post("/documents/{document_id}/enhance", response_model=EnhancementProposal)
async def enhance_selection(
    document_id: str,
    body: EnhanceSelectionRequest,
    documents: DocumentService = Depends(get_documents),
):
    """
    Propose a rewrite for a selection.

    The document is not modified; submit the proposal's ``originalHtml``
    and ``newHtml`` to the apply endpoint to accept it.
    """
    return await documents.enhance_selection(document_id, body)


@app.post("/documents/{document_id}/apply", response_model=Document)
async def apply_enhancement(
    document_id: str,
    body: ApplyEnhancementRequest,
    documents: DocumentService = Depends(get_documents),
):
    """Splice an accepted rewrite into the document and record it in the history."""
    return await documents.apply_enhancement(document_id, body)


@app.post("/documents/{document_id}/analyze", response_model=Document)
async def analyze_stored_document(
    document_id: str, documents: DocumentService = Depends(get_documents)
):
    return await documents.analyze_document(document_id)


@app.get("/documents/{document_id}/markdown", response_class=PlainTextResponse)
async def export_markdown(document_id: str, documents: DocumentService = Depends(get_documents)):
    markdown = await documents.export_markdown(document_id)
    return PlainTextResponse(markdown, media_type="text/markdown")


# ═══════════════════════════════════════════════════════════
# BACKUP & STORAGE
# ═══════════════════════════════════════════════════════════


@app.get("/export")
async def export_data(repository: DocumentRepository = Depends(get_repository)):
    """Download every document and history record as JSON."""
    return Response(content=await repository.export_data(), media_type="application/json")


@app.post("/import", response_model=ImportDataResult)
async def import_data(request: Request, repository: DocumentRepository = Depends(get_repository)):
    """Replace stored data with a JSON backup produced by ``GET /export``."""
    raw = (await request.body()).decode("utf-8", errors="replace")
    result = await repository.import_data(raw)
    if not result.success:
        return JSONResponse(status_code=400, content=result.model_dump(by_alias=True))
    return result


@app.get("/storage", response_model=StorageUsage)
async def storage_usage(repository: DocumentRepository = Depends(get_repository)):
    return await repository.get_storage_size()


# ═══════════════════════════════════════════════════════════
# SERVICE INFO
# ═══════════════════════════════════════════════════════════


@app.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check endpoint."""
    state = request.app.state
    llm: LLMProvider = state.llm
    return HealthResponse(
        status="degraded" if isinstance(llm, UnconfiguredLLM) else "healthy",
        llm_provider=state.config.llm.provider,
        llm_model=llm.model,
        storage_backend=state.config.storage.backend,
    )


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Doc Enhancer API",
        "version": APP_VERSION,
        "description": "AI-assisted, context-aware document enhancement",
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=True, log_level="info")
