"""
OpenAI LLM provider using official SDK.
"""

from openai import AsyncOpenAI

from docenhancer.core.llm.base import Attachment, LLMProvider
from docenhancer.utils.exceptions import LLMError, ValidationError
from docenhancer.utils.logger import get_logger

logger = get_logger(__name__)


class OpenAILLM(LLMProvider):
    """
    OpenAI LLM provider for text generation.

    PDF attachments are sent as ``file`` content parts, which
    vision-capable chat models read natively.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        organization: str | None = None,
        base_url: str | None = None,
        timeout: float = 120.0,
    ):
        """
        Initialize OpenAI LLM provider.

        Args:
            api_key: OpenAI API key
            model: Model name (e.g., "gpt-4o", "gpt-4o-mini")
            organization: Optional organization ID
            base_url: Optional custom base URL (OpenAI-compatible gateways)
            timeout: Request timeout in seconds
        """
        self.model = model

        self.client = AsyncOpenAI(
            api_key=api_key, organization=organization, base_url=base_url, timeout=timeout
        )

    @staticmethod
    def _user_content(prompt: str, attachments: list[Attachment] | None) -> str | list[dict]:
        if not attachments:
            return prompt
        parts: list[dict] = [
            {
                "type": "file",
                "file": {"filename": attachment.filename, "file_data": attachment.data_uri},
            }
            for attachment in attachments
        ]
        parts.append({"type": "text", "text": prompt})
        return parts

    async def complete(
        self,
        prompt: str,
        system: str | None = None,
        attachments: list[Attachment] | None = None,
        max_tokens: int = 8000,
        temperature: float = 0.0,
        **kwargs,
    ) -> str:
        """
        Generate completion using OpenAI chat completions.

        Args:
            prompt: Input prompt
            system: Optional system prompt
            attachments: Optional files (sent as file content parts)
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            **kwargs: Additional parameters (e.g., stop, presence_penalty)
        Returns:
            Generated text (may be empty)
        Raises:
            LLMError: If OpenAI API call fails
            ValidationError: If the prompt is empty
        """
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt cannot be empty")

        messages: list[dict] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": self._user_content(prompt, attachments)})

        params = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            **kwargs,
        }

        try:
            response = await self.client.chat.completions.create(**params)
        except Exception as e:
            logger.bind(model=self.model, error_type=type(e).__name__).error(f"OpenAI API error: {e}")
            raise LLMError(f"OpenAI API error: {e}", context={"model": self.model}) from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def close(self):
        """Close OpenAI client."""
        await self.client.close()
