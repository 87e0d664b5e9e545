"""
Service layer: AI operations and the document workflow.
"""

from docenhancer.services.analysis import AnalysisService
from docenhancer.services.document_service import DocumentService
from docenhancer.services.enhancement import EnhancementService, clean_generated_content
from docenhancer.services.pdf_conversion import PdfConverter

__all__ = [
    "AnalysisService",
    "DocumentService",
    "EnhancementService",
    "PdfConverter",
    "clean_generated_content",
]
