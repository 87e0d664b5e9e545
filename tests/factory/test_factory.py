"""
Tests for factory classes.

Tests the creation of components using factories.
"""

import pytest

from docenhancer.config import LLMConfig, StorageConfig
from docenhancer.core.factory import LLMFactory, StorageFactory
from docenhancer.core.llm.base import LLMProvider
from docenhancer.core.llm.ollama import OllamaLLM
from docenhancer.core.llm.openai import OpenAILLM
from docenhancer.core.storage import (
    DocumentRepository,
    InMemoryKeyValueStore,
    KeyValueStore,
    SQLiteKeyValueStore,
)


class TestLLMFactory:
    """Test LLM factory."""

    def test_create_ollama_llm(self):
        """Test creating Ollama LLM provider."""
        config = LLMConfig(provider="ollama", model="llama3.1:8b", base_url="http://ollama:11434")

        llm = LLMFactory.create(config)

        assert isinstance(llm, OllamaLLM)
        assert isinstance(llm, LLMProvider)
        assert llm.model == "llama3.1:8b"
        assert llm.host == "http://ollama:11434"

    def test_create_ollama_default_host(self):
        llm = LLMFactory.create(LLMConfig(provider="ollama", model="mistral"))

        assert llm.host == "http://localhost:11434"

    def test_create_openai_llm(self):
        """Test creating OpenAI LLM provider."""
        config = LLMConfig(provider="openai", model="gpt-4o-mini", api_key="sk-test-key")

        llm = LLMFactory.create(config)

        assert isinstance(llm, OpenAILLM)
        assert llm.model == "gpt-4o-mini"

    def test_create_openai_without_api_key_raises_error(self):
        """Test that OpenAI without API key raises error."""
        config = LLMConfig(provider="openai", model="gpt-4o", api_key=None)

        with pytest.raises(ValueError, match="OpenAI API key is required"):
            LLMFactory.create(config)

    def test_unsupported_provider_raises_error(self):
        config = LLMConfig(provider="unsupported", model="x")

        with pytest.raises(ValueError, match="Unsupported LLM provider"):
            LLMFactory.create(config)


class TestStorageFactory:
    """Test storage factory."""

    def test_create_memory_store(self):
        store = StorageFactory.create(StorageConfig(backend="memory"))

        assert isinstance(store, InMemoryKeyValueStore)
        assert isinstance(store, KeyValueStore)

    def test_create_sqlite_store(self, tmp_path):
        db_path = str(tmp_path / "docs.db")

        store = StorageFactory.create(StorageConfig(backend="sqlite", db_path=db_path))

        assert isinstance(store, SQLiteKeyValueStore)
        assert store.db_path == db_path

    def test_unsupported_backend_raises_error(self):
        with pytest.raises(ValueError, match="Unsupported storage backend"):
            StorageFactory.create(StorageConfig(backend="redis"))

    def test_create_repository_uses_prefix(self):
        config = StorageConfig(backend="memory", key_prefix="team-a")

        repository = StorageFactory.create_repository(config)

        assert isinstance(repository, DocumentRepository)
        assert repository.documents_key == "team-a:documents"
        assert repository.history_key == "team-a:history"

    def test_create_repository_with_existing_store(self):
        store = InMemoryKeyValueStore()

        repository = StorageFactory.create_repository(StorageConfig(), store)

        assert repository.store is store
