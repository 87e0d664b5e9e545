"""
Document analysis: derive style metadata for consistent enhancements.
"""

from pydantic import ValidationError as PydanticValidationError

from docenhancer.config import Config
from docenhancer.core.llm.base import LLMProvider
from docenhancer.core.tokenizer import Tokenizer
from docenhancer.models.api import AnalyzeRequest, AnalyzeResponse
from docenhancer.services.enhancement import schema_error_details
from docenhancer.utils.exceptions import EmptyResponseError, ResponseSchemaError
from docenhancer.utils.json_extract import extract_json_object
from docenhancer.utils.logger import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = """You are a professional technical writing analyst. Your role is to analyze documents and extract metadata that will help maintain consistency in future AI-powered text enhancements.

Core Responsibilities:
1. Provide a concise summary of the document's purpose and key topics
2. Identify the writing style and tone patterns
3. Extract important terminology that should be preserved
4. Determine the document type and technical level

Analysis Guidelines:
- Be precise and specific in your analysis
- Focus on actionable insights for maintaining consistency
- Identify patterns that are unique to this document
- Note terminology that appears frequently or is domain-specific
- Consider the intended audience and purpose"""

RESPONSE_GUIDE = """Provide a JSON response with:

1. **summary**: A 3-5 sentence summary capturing the main purpose, intended audience and key topics

2. **styleGuide**: {
   - **tone**: The writing style (e.g., "formal technical", "conversational tutorial", "academic research")
   - **vocabulary**: 10-15 domain-specific terms, product names, or jargon used consistently
   - **perspective**: Narrative voice ("first-person", "second-person", "third-person", "imperative")
   - **technicalLevel**: Complexity ("beginner-friendly", "intermediate", "expert/advanced")
   - **commonPatterns**: 3-5 recurring sentence structures or writing patterns
}

3. **keyTerms**: 10-20 technical terms, product names, acronyms, or specialized vocabulary that should be preserved exactly

4. **documentType**: Category (e.g., "API documentation", "user guide", "technical specification", "tutorial", "release notes")

**CRITICAL**: Return ONLY a valid JSON object with this EXACT structure:
{
  "summary": "string",
  "styleGuide": {
    "tone": "string",
    "vocabulary": ["term1", "term2", ...],
    "perspective": "string",
    "technicalLevel": "string",
    "commonPatterns": ["pattern1", "pattern2", ...]
  },
  "keyTerms": ["term1", "term2", ...],
  "documentType": "string"
}

Output ONLY the JSON object, nothing else."""


class AnalysisService:
    """Extract summary, style guide, key terms and document type with an LLM."""

    def __init__(self, llm_provider: LLMProvider, config: Config, tokenizer: Tokenizer | None = None):
        self.llm = llm_provider
        self.config = config
        self.tokenizer = tokenizer or Tokenizer(config.tokenizer)

    def build_user_prompt(self, full_document_html: str, document_name: str | None = None) -> str:
        document = self.tokenizer.truncate(
            full_document_html, self.config.enhancement.max_context_tokens
        )
        name_line = f"**Document Name**: {document_name}\n" if document_name else ""
        return (
            "Analyze this technical document and provide metadata for future AI enhancement tasks.\n\n"
            f"{name_line}"
            f"**DOCUMENT**:\n{document}\n\n"
            f"{RESPONSE_GUIDE}"
        )

    async def analyze(self, request: AnalyzeRequest) -> AnalyzeResponse:
        """
        Analyze a document's content and style.

        Raises:
            LLMError: If the provider call fails
            EmptyResponseError: If the model returned nothing
            InvalidResponseFormatError: If no JSON object could be parsed
            ResponseSchemaError: If required fields are missing
        """
        logger.info(
            f"Analyzing document: {request.document_name or 'Untitled'} "
            f"({len(request.full_document_html)} characters)"
        )

        text = await self.llm.complete(
            self.build_user_prompt(request.full_document_html, request.document_name),
            system=SYSTEM_PROMPT,
            max_tokens=self.config.llm.max_tokens,
            temperature=self.config.llm.analyze_temperature,
        )

        if not text or not text.strip():
            raise EmptyResponseError("No metadata generated by AI")

        parsed = extract_json_object(text)

        try:
            result = AnalyzeResponse.model_validate({**parsed, "model": self.llm.model})
        except PydanticValidationError as e:
            raise ResponseSchemaError(
                "AI response missing required fields", details=schema_error_details(e)
            ) from e

        logger.info(f"Analysis complete. Document type: {result.document_type}")
        return result
