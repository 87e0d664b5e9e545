"""Fixtures for service tests.

The LLM is an AsyncMock so tests control model output exactly; storage is
the in-memory backend and the tokenizer uses the character approximation.
"""

import json
from unittest.mock import AsyncMock

import pytest

from docenhancer.config import Config, StorageConfig, TokenizerConfig
from docenhancer.core.confluence import ConfluenceClient
from docenhancer.core.llm.base import LLMProvider
from docenhancer.core.storage import DocumentRepository, InMemoryKeyValueStore
from docenhancer.core.tokenizer import Tokenizer
from docenhancer.services import AnalysisService, DocumentService, EnhancementService, PdfConverter


@pytest.fixture
def analysis_payload() -> dict:
    """Well-formed analysis output in the camelCase shape the model returns."""
    return {
        "summary": "A setup guide for the widget service.",
        "styleGuide": {
            "tone": "formal technical",
            "vocabulary": ["widget", "deploy"],
            "perspective": "second-person",
            "technicalLevel": "intermediate",
            "commonPatterns": ["Imperative steps", "Short paragraphs"],
        },
        "keyTerms": ["Widget", "CLI"],
        "documentType": "user guide",
    }


@pytest.fixture
def test_config() -> Config:
    return Config(
        storage=StorageConfig(backend="memory"),
        tokenizer=TokenizerConfig(provider="approximate"),
    )


@pytest.fixture
def mock_llm():
    llm = AsyncMock(spec=LLMProvider)
    llm.model = "test-model"
    llm.complete.return_value = json.dumps({"action": "replace", "new_html": "<p>rewritten</p>"})
    return llm


@pytest.fixture
def tokenizer(test_config):
    return Tokenizer(test_config.tokenizer)


@pytest.fixture
def repository():
    return DocumentRepository(InMemoryKeyValueStore())


@pytest.fixture
def enhancer(mock_llm, test_config, tokenizer):
    return EnhancementService(mock_llm, test_config, tokenizer)


@pytest.fixture
def analyzer(mock_llm, test_config, tokenizer):
    return AnalysisService(mock_llm, test_config, tokenizer)


@pytest.fixture
def document_service(repository, enhancer, analyzer, mock_llm, test_config):
    return DocumentService(
        repository=repository,
        enhancer=enhancer,
        analyzer=analyzer,
        converter=PdfConverter(mock_llm, test_config),
        confluence=ConfluenceClient(test_config.confluence),
        config=test_config,
    )
