"""
Token counting utilities for prompt budgeting.

Uses tiktoken for accurate OpenAI-compatible token counting with
character-based approximation as fallback.
"""

import tiktoken

from docenhancer.config import TokenizerConfig

TRUNCATION_MARKER = "\n\n[... document truncated ...]"


class Tokenizer:
    """
    Token counter used to keep document context within the model window.

    Usage:
        tokenizer = Tokenizer()
        count = tokenizer.count_tokens("Hello world")
        context = tokenizer.truncate(document_html, max_tokens=100_000)
    """

    def __init__(self, config: TokenizerConfig | None = None):
        """
        Initialize tokenizer with configuration.

        Args:
            config: Optional tokenizer configuration. Uses defaults if not provided.
        """
        self.config = config or TokenizerConfig()
        self._encoder: tiktoken.Encoding | None = None

    @property
    def encoder(self) -> tiktoken.Encoding:
        """Lazy-load tiktoken encoder."""
        if self._encoder is None:
            self._encoder = tiktoken.get_encoding(self.config.model)
        return self._encoder

    @property
    def is_approximate(self) -> bool:
        return self.config.provider == "approximate"

    def count_tokens(self, text: str) -> int:
        """
        Count tokens accurately using tiktoken.

        Args:
            text: Text to count tokens for

        Returns:
            Exact token count (estimate when provider is "approximate")
        """
        if not text:
            return 0

        if self.is_approximate:
            return self.estimate_tokens(text)

        return len(self.tokenize(text))

    def estimate_tokens(self, text: str) -> int:
        """
        Fast approximate token count using character ratio.

        Uses the configured chars_per_token ratio (default 4.0) for
        quick estimation without loading the tokenizer.
        """
        if not text:
            return 0
        return int(len(text) / self.config.chars_per_token)

    def truncate(self, text: str, max_tokens: int, marker: str = TRUNCATION_MARKER) -> str:
        """
        Cut text down to at most ``max_tokens`` tokens.

        Text already within budget is returned unchanged; truncated text
        gets ``marker`` appended so the model knows context is missing.

        Args:
            text: Text to truncate
            max_tokens: Token budget for the kept prefix
            marker: Suffix appended when truncating

        Returns:
            ``text`` or a prefix of it fitting the budget, plus ``marker``
        """
        if not text or max_tokens <= 0:
            return ""

        if self.is_approximate:
            max_chars = int(max_tokens * self.config.chars_per_token)
            if len(text) <= max_chars:
                return text
            return text[:max_chars] + marker

        # Every token spans at least one character
        if len(text) <= max_tokens:
            return text

        tokens = self.tokenize(text)
        if len(tokens) <= max_tokens:
            return text
        return self.detokenize(tokens[:max_tokens]) + marker

    def tokenize(self, text: str) -> list[int]:
        """Get token IDs for text."""
        if not text:
            return []
        return self.encoder.encode(text)

    def detokenize(self, tokens: list[int]) -> str:
        """Convert token IDs back to text."""
        if not tokens:
            return ""
        return self.encoder.decode(tokens)
