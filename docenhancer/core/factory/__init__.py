"""
Factory modules for creating Doc Enhancer components.

Provides modular factories for LLM providers and storage backends.
"""

from docenhancer.core.factory.llm_factory import LLMFactory
from docenhancer.core.factory.storage_factory import StorageFactory

__all__ = [
    "LLMFactory",
    "StorageFactory",
]
