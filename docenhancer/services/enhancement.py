"""
Context-aware enhancement: targeted rewrite of a sentinel-marked block.

The full document travels in the system prompt as read-only context; the
user prompt carries the block with the selection wrapped in ``<target>``
tags plus optional style metadata. The model answers with
``{"action": "replace", "new_html": "..."}``.
"""

import json
import re

from pydantic import ValidationError as PydanticValidationError

from docenhancer.config import Config
from docenhancer.core.llm.base import LLMProvider
from docenhancer.core.tokenizer import Tokenizer
from docenhancer.models.api import EnhanceRequest, EnhanceResponse
from docenhancer.models.document import DocumentMetadata
from docenhancer.utils.exceptions import EmptyResponseError, ResponseSchemaError
from docenhancer.utils.json_extract import extract_json_object
from docenhancer.utils.logger import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = """You are a professional technical writing assistant. Your role is to enhance selected text while maintaining consistency with the full document.

Core Principles:
1. **Maintain Consistency**: Match the terminology, tone, and style of the full document
2. **Context Awareness**: Consider what comes before and after the selection
3. **Smart Expansion**: If the selected text is grammatically incomplete, expand to include necessary surrounding words
4. **Preserve Intent**: Keep the original meaning while improving clarity and professionalism
5. **Preserve Structure**: Maintain HTML structure and formatting (tables, lists, bold, italic, etc.)

Enhancement Guidelines:
- Improve clarity and conciseness
- Fix grammar and punctuation
- Use active voice when appropriate
- Add specific details where vague
- Maintain technical accuracy
- **CRITICAL**: Preserve HTML tags and structure
- Keep table formatting with <table>, <tr>, <td>, <th> tags
- Keep list formatting with <ul>, <ol>, <li> tags
- Keep text formatting like <strong>, <em>, <code>
- Keep images as <img> tags with src and alt attributes
- Return ONLY valid HTML"""

OUTPUT_CONTRACT = """**CRITICAL**: Return your response as a JSON object with this EXACT format:
{
  "action": "replace",
  "new_html": "The enhanced HTML content (with all tags preserved)"
}

**Examples**:
Input: <p>Revenue <target>went up</target> significantly.</p>
Output: {"action": "replace", "new_html": "<p>Revenue <strong>increased</strong> significantly.</p>"}

Input: <td><target>This data</target> is important</td>
Output: {"action": "replace", "new_html": "<td><strong>This information</strong> is important</td>"}

Output ONLY the JSON object, nothing else."""

WRAPPING_FENCE_OPEN = re.compile(r"^```[a-zA-Z]*\n?")
WRAPPING_FENCE_CLOSE = re.compile(r"\n?```$")


def clean_generated_content(text: str) -> str:
    """Strip a code fence wrapping the whole of generated HTML or Markdown."""
    cleaned = (text or "").strip()
    if cleaned.startswith("```") and cleaned.endswith("```") and len(cleaned) >= 6:
        cleaned = WRAPPING_FENCE_CLOSE.sub("", WRAPPING_FENCE_OPEN.sub("", cleaned, count=1), count=1)
    return cleaned.strip()


def schema_error_details(error: PydanticValidationError) -> list[dict]:
    """JSON-safe list of validation failures."""
    return json.loads(error.json(include_url=False))


class EnhancementService:
    """
    Targeted rewrite of a selection within its enclosing block.

    Usage:
        service = EnhancementService(llm, config)
        result = await service.enhance(EnhanceRequest(...))
        result.new_html
    """

    def __init__(self, llm_provider: LLMProvider, config: Config, tokenizer: Tokenizer | None = None):
        """
        Args:
            llm_provider: LLM used for rewriting
            config: Configuration object
            tokenizer: Token counter for context truncation
        """
        self.llm = llm_provider
        self.config = config
        self.tokenizer = tokenizer or Tokenizer(config.tokenizer)

    def build_system_prompt(self, full_document_html: str, document_name: str | None = None) -> str:
        context = self.tokenizer.truncate(
            full_document_html, self.config.enhancement.max_context_tokens
        )
        prompt = (
            f"{SYSTEM_PROMPT}\n\n"
            f"**Full Document Context** (for reference only, do NOT modify this):\n"
            f"{context}\n"
        )
        if document_name:
            prompt += f'\nDocument Name: "{document_name}"'
        return prompt

    def _metadata_section(self, metadata: DocumentMetadata) -> str:
        max_terms = self.config.enhancement.max_key_terms
        max_patterns = self.config.enhancement.max_common_patterns
        style = metadata.style_guide

        key_terms = ", ".join(metadata.key_terms[:max_terms])
        if len(metadata.key_terms) > max_terms:
            key_terms += ", ..."
        patterns = "; ".join(style.common_patterns[:max_patterns])

        return (
            "\n**Document Context** (maintain consistency with these characteristics):\n"
            f"- **Document Type**: {metadata.document_type}\n"
            f"- **Summary**: {metadata.summary}\n"
            f"- **Tone**: {style.tone}\n"
            f"- **Perspective**: {style.perspective}\n"
            f"- **Technical Level**: {style.technical_level}\n"
            f"- **Key Terms to Preserve**: {key_terms}\n"
            f"- **Common Patterns**: {patterns}\n\n"
            f"**IMPORTANT**: When enhancing, maintain the document's {style.tone} tone, "
            f"use {style.perspective} perspective, and preserve all key terms exactly as they appear.\n"
        )

    def build_user_prompt(
        self,
        target_block_html: str,
        instructions: str | None = None,
        metadata: DocumentMetadata | None = None,
    ) -> str:
        tasks = [
            "Analyze the content inside <target> tags",
            "If the selection is grammatically incomplete or breaks sentence flow, "
            "expand to include necessary surrounding words",
            "Enhance the content (improve clarity, grammar, professionalism)",
        ]
        if metadata:
            tasks.append(
                f"**CRITICAL**: Match the document's {metadata.style_guide.tone} tone "
                f"and {metadata.style_guide.perspective} perspective"
            )
        tasks.append("**CRITICAL**: Preserve all HTML structure and tags")
        if instructions:
            tasks.append(f"Follow this specific instruction: {instructions}")
        task_list = "\n".join(f"{index}. {task}" for index, task in enumerate(tasks, start=1))

        metadata_section = self._metadata_section(metadata) if metadata else ""

        return (
            "I need to enhance a specific part of my document.\n"
            f"{metadata_section}\n"
            "**Context**: Below is an HTML block (paragraph, table cell, or list item) "
            "containing my selection. The text I selected is wrapped in <target> tags.\n\n"
            f"**Current HTML Block**:\n{target_block_html}\n\n"
            f"**Task**:\n{task_list}\n\n"
            f"{OUTPUT_CONTRACT}"
        )

    async def enhance(self, request: EnhanceRequest) -> EnhanceResponse:
        """
        Rewrite the ``<target>`` span of a block.

        Args:
            request: Document HTML, sentinel-marked block, optional
                instructions, name and metadata

        Returns:
            EnhanceResponse with the replacement block HTML

        Raises:
            LLMError: If the provider call fails
            EmptyResponseError: If the model returned nothing
            InvalidResponseFormatError: If no JSON object could be parsed
            ResponseSchemaError: If the JSON lacks ``action``/``new_html``
        """
        logger.info(f"Enhancing content in: {request.document_name or 'Untitled'}")
        logger.debug(f"Target block HTML: {request.target_block_html[:100]!r}")
        if request.metadata:
            logger.debug(
                f"Using metadata: {request.metadata.document_type}, "
                f"tone: {request.metadata.style_guide.tone}"
            )

        text = await self.llm.complete(
            self.build_user_prompt(
                request.target_block_html, request.instructions, request.metadata
            ),
            system=self.build_system_prompt(request.full_document_html, request.document_name),
            max_tokens=self.config.llm.max_tokens,
            temperature=self.config.llm.enhance_temperature,
        )

        if not text or not text.strip():
            raise EmptyResponseError("No content generated by AI")

        parsed = extract_json_object(text)

        try:
            result = EnhanceResponse(
                action=parsed.get("action"),
                new_html=parsed.get("new_html"),
                model=self.llm.model,
            )
        except PydanticValidationError as e:
            raise ResponseSchemaError(
                "AI response missing required fields", details=schema_error_details(e)
            ) from e

        logger.info(f"Enhanced successfully. New HTML: {result.new_html[:100]!r}")
        return result
