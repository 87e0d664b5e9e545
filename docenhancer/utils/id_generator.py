"""
ID generation utilities for Doc Enhancer.

Provides consistent ID generation for stored entities:
- Documents: doc_xxx
- Enhancement records: enh_xxx
"""

from uuid import uuid4


def generate_document_id() -> str:
    """
    Generate unique Document ID.

    Returns:
        ID in format "doc_xxx" where xxx is 12 hex characters
    """
    return f"doc_{uuid4().hex[:12]}"


def generate_enhancement_id() -> str:
    """
    Generate unique EnhancementRecord ID.

    Returns:
        ID in format "enh_xxx" where xxx is 12 hex characters
    """
    return f"enh_{uuid4().hex[:12]}"
