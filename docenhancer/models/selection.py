"""
Ephemeral models for targeted enhancement.

Neither model is persisted: a SelectionContext lives for a single
enhancement request and a ReplacementResult for a single splice.
"""

from pydantic import BaseModel, Field


class SelectionContext(BaseModel):
    """A user's selection resolved against its enclosing block."""

    selected_text: str
    block_html: str = Field(..., description="Enclosing block markup with <target> sentinels")
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)
    located: bool = Field(
        default=True,
        description="False when the block could not be located and only the raw text was wrapped",
    )


class ReplacementResult(BaseModel):
    """Outcome of splicing replacement text into a document."""

    content: str
    replaced: bool
    occurrences: int = 0
    error: str | None = None
