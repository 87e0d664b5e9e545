"""
Tests for LLM base class and the unconfigured placeholder provider.
"""
import pytest

from docenhancer.core.llm import UnconfiguredLLM
from docenhancer.core.llm.base import Attachment, LLMProvider
from docenhancer.utils.exceptions import ConfigurationError


class MockLLM(LLMProvider):
    """Mock LLM provider for testing."""

    model = "mock"

    async def complete(self, prompt: str, system=None, attachments=None, **kwargs):
        return "test response"

    async def close(self):
        """Mock close implementation."""
        pass


@pytest.mark.unit
@pytest.mark.asyncio
class TestLLMProviderBase:
    """Test base LLM provider functionality."""

    async def test_abstract_instantiation(self):
        """Test that abstract class cannot be instantiated."""
        with pytest.raises(TypeError, match="Can't instantiate abstract class"):
            LLMProvider()

    async def test_complete_interface(self):
        """Test complete method interface."""
        provider = MockLLM()
        result = await provider.complete("test prompt")
        assert result == "test response"

    async def test_attachment_data_uri(self):
        attachment = Attachment(data="AAAA")

        assert attachment.data_uri == "data:application/pdf;base64,AAAA"
        assert attachment.filename == "document.pdf"


@pytest.mark.unit
@pytest.mark.asyncio
class TestUnconfiguredLLM:
    """The placeholder lets the server start without LLM credentials."""

    async def test_complete_raises_configuration_error(self):
        llm = UnconfiguredLLM("OpenAI API key is required")

        with pytest.raises(ConfigurationError) as exc_info:
            await llm.complete("anything")

        assert exc_info.value.status_code == 500
        assert "OpenAI API key is required" in exc_info.value.message

    async def test_model_name(self):
        assert UnconfiguredLLM("reason").model == "unconfigured"
        await UnconfiguredLLM("reason").close()
