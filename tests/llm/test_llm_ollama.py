"""
Tests for Ollama LLM provider.
"""

from unittest.mock import AsyncMock, patch

import pytest

from docenhancer.core.llm.base import Attachment
from docenhancer.core.llm.ollama import OllamaLLM
from docenhancer.utils.exceptions import LLMError


@pytest.fixture
def ollama_llm():
    """Create Ollama LLM for testing."""
    return OllamaLLM(host="http://localhost:11434", model="llama3.1:8b", timeout=120.0)


@pytest.mark.unit
@pytest.mark.asyncio
class TestOllamaLLM:
    """Test Ollama LLM provider."""

    async def test_initialization(self, ollama_llm):
        """Test provider initialization."""
        assert ollama_llm.host == "http://localhost:11434"
        assert ollama_llm.model == "llama3.1:8b"
        assert ollama_llm.timeout == 120.0
        assert ollama_llm.client is not None

    async def test_complete_simple(self, ollama_llm):
        """Test simple text completion."""
        with patch.object(ollama_llm.client, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.return_value = {"message": {"content": "<p>Improved</p>"}}

            result = await ollama_llm.complete("Improve this", max_tokens=50)

            assert result == "<p>Improved</p>"
            mock_chat.assert_called_once()

    async def test_complete_with_system_prompt(self, ollama_llm):
        with patch.object(ollama_llm.client, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.return_value = {"message": {"content": "ok"}}

            await ollama_llm.complete("prompt", system="system text")

            messages = mock_chat.call_args.kwargs["messages"]
            assert messages == [
                {"role": "system", "content": "system text"},
                {"role": "user", "content": "prompt"},
            ]

    async def test_complete_with_temperature(self, ollama_llm):
        """Test completion with custom temperature."""
        with patch.object(ollama_llm.client, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.return_value = {"message": {"content": "test"}}

            await ollama_llm.complete("test", temperature=0.7, max_tokens=100)

            call_args = mock_chat.call_args
            assert call_args.kwargs["options"]["temperature"] == 0.7
            assert call_args.kwargs["options"]["num_predict"] == 100

    async def test_complete_with_extra_options(self, ollama_llm):
        """Test completion with extra options."""
        with patch.object(ollama_llm.client, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.return_value = {"message": {"content": "test"}}

            await ollama_llm.complete("test", options={"top_p": 0.9, "top_k": 40})

            call_args = mock_chat.call_args
            assert call_args.kwargs["options"]["top_p"] == 0.9
            assert call_args.kwargs["options"]["top_k"] == 40

    async def test_attachments_rejected(self, ollama_llm):
        """Local models cannot read PDFs."""
        with patch.object(ollama_llm.client, "chat", new_callable=AsyncMock) as mock_chat:
            with pytest.raises(LLMError, match="does not support file attachments"):
                await ollama_llm.complete("convert", attachments=[Attachment(data="JVBERi0=")])

            mock_chat.assert_not_called()

    async def test_api_error_wrapped(self, ollama_llm):
        with patch.object(ollama_llm.client, "chat", new_callable=AsyncMock) as mock_chat:
            mock_chat.side_effect = ConnectionError("connection refused")

            with pytest.raises(LLMError, match="Ollama API error"):
                await ollama_llm.complete("test")

    async def test_close(self, ollama_llm):
        """Close is a no-op."""
        await ollama_llm.close()
