"""
Shared test fixtures for storage tests.
"""

import pytest

from docenhancer.core.content.text import plain_text_to_tree
from docenhancer.core.storage import InMemoryKeyValueStore, SQLiteKeyValueStore
from docenhancer.models.document import Document
from docenhancer.utils.id_generator import generate_document_id


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """Each repository test runs against both backends."""
    if request.param == "sqlite":
        return SQLiteKeyValueStore(db_path=str(tmp_path / "docs.db"))
    return InMemoryKeyValueStore()


@pytest.fixture
def make_document():
    """Build an unsaved document with plain-text content."""

    def _make(name: str = "Report", text: str = "Revenue went up.") -> Document:
        return Document(id=generate_document_id(), name=name, content=plain_text_to_tree(text))

    return _make
