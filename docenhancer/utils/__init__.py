"""Utility modules for Doc Enhancer."""

from docenhancer.utils.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ContentReplacementError,
    DocEnhancerError,
    EmptyResponseError,
    InvalidResponseFormatError,
    LLMError,
    NotFoundError,
    PdfExtractionError,
    ResponseFormatError,
    ResponseSchemaError,
    SelectionError,
    StoreError,
    UpstreamError,
    ValidationError,
)
from docenhancer.utils.id_generator import generate_document_id, generate_enhancement_id
from docenhancer.utils.json_extract import extract_json_object
from docenhancer.utils.logger import get_logger, setup_logging

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # ID Generators
    "generate_document_id",
    "generate_enhancement_id",
    # JSON extraction
    "extract_json_object",
    # Exceptions
    "DocEnhancerError",
    "ValidationError",
    "ConfigurationError",
    "UpstreamError",
    "AuthenticationError",
    "NotFoundError",
    "LLMError",
    "ResponseFormatError",
    "EmptyResponseError",
    "InvalidResponseFormatError",
    "ResponseSchemaError",
    "SelectionError",
    "ContentReplacementError",
    "StoreError",
    "PdfExtractionError",
]
