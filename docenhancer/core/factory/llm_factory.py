"""
Factory for creating LLM providers.
"""

from docenhancer.config import LLMConfig
from docenhancer.core.llm.base import LLMProvider
from docenhancer.core.llm.ollama import OllamaLLM
from docenhancer.core.llm.openai import OpenAILLM

OLLAMA_DEFAULT_HOST = "http://localhost:11434"


class LLMFactory:
    """Factory for creating LLM providers from configuration."""

    @staticmethod
    def create(config: LLMConfig) -> LLMProvider:
        """
        Create LLM provider from configuration.

        Args:
            config: LLM configuration

        Returns:
            LLM provider instance

        Raises:
            ValueError: If provider is not supported or credentials are missing
        """
        if config.provider == "ollama":
            return OllamaLLM(
                host=config.base_url or OLLAMA_DEFAULT_HOST,
                model=config.model,
                timeout=config.timeout,
            )
        elif config.provider == "openai":
            if not config.api_key:
                raise ValueError("OpenAI API key is required")
            return OpenAILLM(
                api_key=config.api_key,
                model=config.model,
                base_url=config.base_url,
                timeout=config.timeout,
            )
        else:
            raise ValueError(f"Unsupported LLM provider: {config.provider}")
