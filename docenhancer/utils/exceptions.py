"""
Custom exception hierarchy for Doc Enhancer.

Provides structured error types that map onto the four failure classes the
service reports: input validation, upstream failures, response-shape errors
and application-logic errors. All exceptions inherit from DocEnhancerError
for easy catching, and each carries the HTTP status the API reports it with.
"""

from typing import Any


class DocEnhancerError(Exception):
    """
    Base exception for all Doc Enhancer errors.
    All custom exceptions should inherit from this class.
    """

    status_code: int = 500

    def __init__(self, message: str, context: dict | None = None, details: Any = None):
        """
        Initialize Doc Enhancer error.
        Args:
            message: User-facing error message
            context: Optional context dictionary with additional error details
            details: Optional payload returned to API callers for diagnosis
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        """Render the error as an API error body."""
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(DocEnhancerError):
    """
    Validation errors.
    Raised when input validation fails, before any external call is made.
    """

    status_code = 400


class ConfigurationError(DocEnhancerError):
    """
    Configuration errors.
    Raised when configuration is invalid or missing required values.
    """

    status_code = 500


# ═══════════════════════════════════════════════════════════
# UPSTREAM FAILURES
# ═══════════════════════════════════════════════════════════


class UpstreamError(DocEnhancerError):
    """
    Upstream service failure.
    Carries the upstream HTTP status so callers can report it unchanged.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        context: dict | None = None,
        details: Any = None,
    ):
        super().__init__(message, context=context, details=details)
        self.status_code = status_code


class AuthenticationError(UpstreamError):
    """Upstream rejected the supplied credentials."""

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, status_code=401, context=context)


class NotFoundError(UpstreamError):
    """
    Resource not found errors.
    Raised when a wiki page or a stored document doesn't exist.
    """

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, status_code=404, context=context)


class LLMError(UpstreamError):
    """
    LLM operation errors.
    Raised when the AI provider call itself fails (API errors, timeouts, etc.).
    """

    def __init__(self, message: str, context: dict | None = None, details: Any = None):
        super().__init__(message, status_code=502, context=context, details=details)


# ═══════════════════════════════════════════════════════════
# RESPONSE-SHAPE ERRORS (the HTTP call succeeded)
# ═══════════════════════════════════════════════════════════


class ResponseFormatError(DocEnhancerError):
    """Base class for unusable AI output."""

    status_code = 500


class EmptyResponseError(ResponseFormatError):
    """The model returned blank output."""


class InvalidResponseFormatError(ResponseFormatError):
    """The model output could not be parsed as JSON."""


class ResponseSchemaError(ResponseFormatError):
    """The parsed JSON does not match the expected schema."""


# ═══════════════════════════════════════════════════════════
# APPLICATION-LOGIC ERRORS
# ═══════════════════════════════════════════════════════════


class SelectionError(DocEnhancerError):
    """
    Selection errors.
    Raised when a selection is empty or cannot be resolved in a document.
    """

    status_code = 422


class ContentReplacementError(DocEnhancerError):
    """
    Replacement errors.
    Raised when enhanced content cannot be spliced back into the document.
    """

    status_code = 409


class StoreError(DocEnhancerError):
    """
    Storage operation errors.
    Used for errors related to the key-value document store.
    """

    status_code = 500


class PdfExtractionError(DocEnhancerError):
    """
    PDF parsing errors.
    Raised when embedded images cannot be extracted from a PDF.
    """

    status_code = 500
