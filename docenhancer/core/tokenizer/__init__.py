"""
Tokenizer module for token counting and context truncation.

Provides accurate token counting using tiktoken with fast approximation fallback.
Used to keep full-document context within the model's window.
"""

from docenhancer.config import TokenizerConfig
from docenhancer.core.tokenizer.tokenizer import Tokenizer

__all__ = ["Tokenizer", "TokenizerConfig"]
