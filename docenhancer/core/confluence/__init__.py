"""
Confluence wiki integration.
"""

from docenhancer.core.confluence.client import (
    ConfluenceClient,
    build_auth_header,
    extract_base_url,
    extract_page_id,
    is_valid_confluence_url,
)

__all__ = [
    "ConfluenceClient",
    "build_auth_header",
    "extract_base_url",
    "extract_page_id",
    "is_valid_confluence_url",
]
