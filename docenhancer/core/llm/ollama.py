"""
Ollama LLM provider using native ollama-python SDK.
"""

import ollama

from docenhancer.core.llm.base import Attachment, LLMProvider
from docenhancer.utils.exceptions import LLMError
from docenhancer.utils.logger import get_logger

logger = get_logger(__name__)


class OllamaLLM(LLMProvider):
    """
    Ollama LLM provider for text generation.

    Uses native ollama-python SDK for chat completions. Local models have
    no PDF input, so attachments are rejected.
    """

    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "llama3.1:8b",
        timeout: float = 120.0,
    ):
        """
        Initialize Ollama LLM provider.

        Args:
            host: Ollama server URL
            model: Model name for text generation (e.g., "llama3.1", "mistral")
            timeout: Request timeout in seconds
        """
        self.host = host
        self.model = model
        self.timeout = timeout

        self.client = ollama.AsyncClient(host=host, timeout=timeout)

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
        Generate completion using Ollama.

        Args:
            prompt: Input prompt
            system: Optional system prompt
            attachments: Not supported; must be empty
            max_tokens: Maximum tokens to generate
            temperature: Sampling temperature
            **kwargs: Additional options (passed to Ollama)

        Returns:
            Generated text (may be empty)

        Raises:
            LLMError: If attachments are given or the Ollama call fails
        """
        if attachments:
            raise LLMError(
                "Ollama provider does not support file attachments",
                context={"model": self.model},
            )

        options = {
            "temperature": temperature,
            "num_predict": max_tokens,
            **kwargs.get("options", {}),
        }

        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        try:
            response = await self.client.chat(
                model=self.model,
                messages=messages,
                options=options,
                **{k: v for k, v in kwargs.items() if k != "options"},
            )
        except Exception as e:
            logger.bind(model=self.model, host=self.host).error(f"Ollama API error: {e}")
            raise LLMError(f"Ollama API error: {e}", context={"model": self.model}) from e

        return response["message"]["content"] or ""

    async def close(self):
        """Close client (Ollama SDK handles cleanup internally)."""
        pass
