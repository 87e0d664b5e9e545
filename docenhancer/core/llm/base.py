"""
Abstract base class for LLM providers.
Handles text generation with an optional system prompt and file attachments.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel


class Attachment(BaseModel):
    """Binary file sent alongside a prompt (e.g. a PDF to convert)."""

    data: str  # base64, without data-URI prefix
    media_type: str = "application/pdf"
    filename: str = "document.pdf"

    @property
    def data_uri(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"


class LLMProvider(ABC):
    """
    Abstract base for LLM text generation providers.

    Responsibilities:
    - Text completion/generation
    - System-prompted chat
    - Multimodal input (file attachments) where the provider supports it
    """

    model: str

    @abstractmethod
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
        Generate completion from prompt.

        Args:
            prompt: The user prompt
            system: Optional system prompt
            attachments: Optional files sent with the user message
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature (0.0 = deterministic, 1.0 = creative)
            **kwargs: Provider-specific parameters

        Returns:
            Generated text; empty string when the model produced nothing

        Raises:
            LLMError: Provider-specific errors
        """
        pass

    @abstractmethod
    async def close(self):
        """
        Close any open connections.
        Optional to override if provider needs cleanup.
        """
