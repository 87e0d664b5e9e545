"""
Tests for Tokenizer class.

Tests cover:
1. Token counting (accurate and approximate)
2. Context truncation
3. Tokenization and detokenization
4. Edge cases (empty, unicode, large text)
"""

from unittest.mock import patch

from docenhancer.config import TokenizerConfig
from docenhancer.core.tokenizer import Tokenizer
from docenhancer.core.tokenizer.tokenizer import TRUNCATION_MARKER


class TestTokenCounting:
    """Tests for token counting functionality."""

    def test_count_tokens_simple(self):
        """Test basic token counting."""
        tokenizer = Tokenizer()
        count = tokenizer.count_tokens("Hello, world!")
        assert count > 0
        assert isinstance(count, int)

    def test_count_tokens_empty(self):
        """Test counting tokens in empty string."""
        tokenizer = Tokenizer()
        assert tokenizer.count_tokens("") == 0

    def test_count_tokens_unicode(self):
        """Test counting tokens with unicode characters."""
        tokenizer = Tokenizer()
        assert tokenizer.count_tokens("Hello, 世界! 🌍") > 0

    def test_count_tokens_deterministic(self):
        """Test token counting is deterministic."""
        tokenizer = Tokenizer()
        text = "<p>The quick brown fox jumps over the lazy dog.</p>"
        assert tokenizer.count_tokens(text) == tokenizer.count_tokens(text)

    def test_approximate_counting(self):
        """Approximate provider divides characters by the configured ratio."""
        tokenizer = Tokenizer(TokenizerConfig(provider="approximate", chars_per_token=4.0))
        assert tokenizer.is_approximate
        assert tokenizer.count_tokens("a" * 400) == 100

    def test_estimate_tokens(self):
        tokenizer = Tokenizer()
        assert tokenizer.estimate_tokens("a" * 40) == 10
        assert tokenizer.estimate_tokens("") == 0


class TestTruncation:
    """Tests for context truncation."""

    def test_short_text_unchanged(self):
        tokenizer = Tokenizer()
        text = "<p>Short document</p>"
        assert tokenizer.truncate(text, max_tokens=1000) == text

    def test_long_text_truncated_with_marker(self):
        tokenizer = Tokenizer()
        text = "<p>This is a test sentence.</p>" * 500

        result = tokenizer.truncate(text, max_tokens=50)

        assert result.endswith(TRUNCATION_MARKER)
        kept = result[: -len(TRUNCATION_MARKER)]
        assert text.startswith(kept)
        assert tokenizer.count_tokens(kept) <= 50

    def test_text_exactly_within_budget_unchanged(self):
        tokenizer = Tokenizer()
        text = "word " * 20
        budget = tokenizer.count_tokens(text)
        assert tokenizer.truncate(text, max_tokens=budget) == text

    def test_empty_or_zero_budget(self):
        tokenizer = Tokenizer()
        assert tokenizer.truncate("", max_tokens=10) == ""
        assert tokenizer.truncate("some text", max_tokens=0) == ""

    def test_approximate_truncation_by_characters(self):
        tokenizer = Tokenizer(TokenizerConfig(provider="approximate", chars_per_token=4.0))
        text = "x" * 100

        assert tokenizer.truncate(text, max_tokens=25) == text
        assert tokenizer.truncate(text, max_tokens=10) == "x" * 40 + TRUNCATION_MARKER

    def test_truncation_uses_token_ids(self):
        tokenizer = Tokenizer()
        text = "<p>Quarterly revenue grew.</p>" * 50

        with patch.object(tokenizer, "detokenize", wraps=tokenizer.detokenize) as detokenize:
            result = tokenizer.truncate(text, max_tokens=10)

        kept_ids = detokenize.call_args.args[0]
        assert kept_ids == tokenizer.tokenize(text)[:10]
        assert result == tokenizer.detokenize(kept_ids) + TRUNCATION_MARKER

    def test_custom_marker(self):
        tokenizer = Tokenizer(TokenizerConfig(provider="approximate"))
        assert tokenizer.truncate("abcdefgh", max_tokens=1, marker="...") == "abcd..."


class TestTokenization:
    """Tests for tokenize/detokenize functionality."""

    def test_tokenize_detokenize_roundtrip(self):
        tokenizer = Tokenizer()
        text = "Hello, world! This is a test."
        assert tokenizer.detokenize(tokenizer.tokenize(text)) == text

    def test_tokenize_empty(self):
        tokenizer = Tokenizer()
        assert tokenizer.tokenize("") == []
        assert tokenizer.detokenize([]) == ""
