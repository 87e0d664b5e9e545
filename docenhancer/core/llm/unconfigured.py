"""
Placeholder provider used when no LLM is configured.

Lets the server start (document storage, import of text/markdown/html,
export) while AI operations report a configuration error.
"""

from docenhancer.core.llm.base import Attachment, LLMProvider
from docenhancer.utils.exceptions import ConfigurationError


class UnconfiguredLLM(LLMProvider):
    def __init__(self, reason: str):
        self.reason = reason
        self.model = "unconfigured"

    async def complete(
        self,
        prompt: str,
        system: str | None = None,
        attachments: list[Attachment] | None = None,
        max_tokens: int = 8000,
        temperature: float = 0.0,
        **kwargs,
    ) -> str:
        raise ConfigurationError(f"Server configuration error: {self.reason}")

    async def close(self):
        pass
