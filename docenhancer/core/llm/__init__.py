"""
LLM provider abstraction layer for text generation.

Supported providers:
- Ollama (native SDK)
- OpenAI (official SDK)
"""
from docenhancer.core.llm.base import Attachment, LLMProvider
from docenhancer.core.llm.ollama import OllamaLLM
from docenhancer.core.llm.openai import OpenAILLM
from docenhancer.core.llm.unconfigured import UnconfiguredLLM

__all__ = [
    "Attachment",
    "LLMProvider",
    "OllamaLLM",
    "OpenAILLM",
    "UnconfiguredLLM",
]
