"""
Document and EnhancementRecord models.

Documents hold the canonical content tree plus optional AI-derived metadata.
EnhancementRecords form an append-only audit trail of accepted rewrites.
JSON field names use camelCase aliases so stored collections and API
payloads stay interchangeable with browser clients.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from docenhancer.models.content import DocumentNode


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serializing to camelCase while accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SourceType(str, Enum):
    """Origin format of an imported document."""

    TEXT = "text"
    MARKDOWN = "markdown"
    HTML = "html"
    CONFLUENCE = "confluence"
    PDF = "pdf"


class DocumentImage(CamelModel):
    """Image extracted from an imported file, embedded as a data URI."""

    data: str = Field(..., description="Base64 data URI")
    alt: str = ""
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)


class StyleGuide(CamelModel):
    """Writing style characteristics derived by document analysis."""

    tone: str
    vocabulary: list[str]
    perspective: str
    technical_level: str
    common_patterns: list[str]


class DocumentMetadata(CamelModel):
    """AI-derived metadata used for context-aware enhancement."""

    summary: str
    style_guide: StyleGuide
    key_terms: list[str]
    document_type: str


class Document(CamelModel):
    """
    Imported document.

    Created on import, mutated on each accepted enhancement, deleted by
    explicit user action.
    """

    id: str = Field(..., description="Unique document ID (doc_xxx)")
    name: str
    source_url: str = Field(default="", alias="confluenceUrl")
    source_type: SourceType = SourceType.HTML
    content: DocumentNode
    images: list[DocumentImage] = Field(default_factory=list)
    metadata: DocumentMetadata | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class EnhancementRecord(CamelModel):
    """Immutable snapshot of one accepted enhancement."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(..., description="Unique record ID (enh_xxx)")
    document_id: str
    original_content: DocumentNode
    enhanced_content: DocumentNode
    instructions: str = ""
    created_at: datetime = Field(default_factory=utc_now)

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
