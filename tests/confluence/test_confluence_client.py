"""
Tests for the Confluence client.

HTTP traffic is served by httpx.MockTransport; no network access needed.
"""

import base64

import httpx
import pytest

from docenhancer.config import ConfluenceConfig
from docenhancer.core.confluence import (
    ConfluenceClient,
    build_auth_header,
    extract_base_url,
    extract_page_id,
    is_valid_confluence_url,
)
from docenhancer.utils.exceptions import (
    AuthenticationError,
    ConfigurationError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)

PAGE_URL = "https://acme.atlassian.net/wiki/spaces/DOCS/pages/123456/Getting+Started"


def make_client(handler, config: ConfluenceConfig | None = None) -> ConfluenceClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ConfluenceClient(
        config or ConfluenceConfig(email="writer@acme.com", token="secret"),
        client=http_client,
    )


@pytest.mark.unit
class TestUrlHelpers:
    """Test URL parsing and validation."""

    def test_extract_page_id(self):
        assert extract_page_id(PAGE_URL) == "123456"
        assert extract_page_id("https://wiki.example.com/pages/42") == "42"
        assert extract_page_id("https://acme.atlassian.net/wiki/home") is None

    def test_extract_base_url(self):
        assert extract_base_url(PAGE_URL) == "https://acme.atlassian.net"
        assert extract_base_url("https://wiki.example.com:8443/pages/1") == "https://wiki.example.com:8443"
        assert extract_base_url("not a url") is None

    @pytest.mark.parametrize(
        "url,valid",
        [
            (PAGE_URL, True),
            ("https://wiki.example.com/pages/1", True),
            ("http://acme.atlassian.net/wiki/pages/1", False),
            ("https://localhost/pages/1", False),
            ("https://127.0.0.1/pages/1", False),
            ("https://[::1]/pages/1", False),
            ("ftp://acme.atlassian.net/pages/1", False),
            ("", False),
        ],
    )
    def test_is_valid_confluence_url(self, url, valid):
        assert is_valid_confluence_url(url) is valid

    def test_build_auth_header_with_email(self):
        expected = base64.b64encode(b"writer@acme.com:secret").decode()

        assert build_auth_header("secret", "writer@acme.com") == f"Basic {expected}"

    def test_build_auth_header_token_only(self):
        assert build_auth_header("pre-encoded") == "Basic pre-encoded"


@pytest.mark.unit
@pytest.mark.asyncio
class TestConfluenceClient:
    """Test page fetching and error mapping."""

    async def test_fetch_page(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["expand"] = request.url.params["expand"]
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(
                200,
                json={
                    "title": "Getting Started",
                    "body": {"storage": {"value": "<p>Hello</p>"}},
                    "version": {"number": 7, "when": "2024-01-02T03:04:05.000Z"},
                },
            )

        client = make_client(handler)
        page = await client.fetch_page(PAGE_URL)

        assert page.content == "<p>Hello</p>"
        assert page.title == "Getting Started"
        assert page.version == 7
        assert page.last_modified == "2024-01-02T03:04:05.000Z"
        assert seen["url"].startswith("https://acme.atlassian.net/wiki/rest/api/content/123456")
        assert seen["expand"] == "body.storage,version"
        assert seen["auth"] == build_auth_header("secret", "writer@acme.com")

    async def test_missing_fields_use_defaults(self):
        client = make_client(lambda request: httpx.Response(200, json={}))

        page = await client.fetch_page(PAGE_URL)

        assert page.content == ""
        assert page.title == "Untitled"
        assert page.version == 1
        assert page.last_modified

    async def test_request_credentials_override_config(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(200, json={"title": "T"})

        client = make_client(handler)
        await client.fetch_page(PAGE_URL, email="other@acme.com", token="override")

        assert seen["auth"] == build_auth_header("override", "other@acme.com")

    async def test_unauthorized(self):
        client = make_client(lambda request: httpx.Response(401))

        with pytest.raises(AuthenticationError) as exc_info:
            await client.fetch_page(PAGE_URL)

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Authentication failed. Check your Confluence credentials."

    async def test_not_found(self):
        client = make_client(lambda request: httpx.Response(404))

        with pytest.raises(NotFoundError) as exc_info:
            await client.fetch_page(PAGE_URL)

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "Page not found. Check the Confluence URL."

    async def test_other_errors_keep_status(self):
        client = make_client(lambda request: httpx.Response(503))

        with pytest.raises(UpstreamError) as exc_info:
            await client.fetch_page(PAGE_URL)

        assert exc_info.value.status_code == 503
        assert exc_info.value.message == "Confluence API error: Service Unavailable"

    async def test_transport_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused")

        client = make_client(handler)

        with pytest.raises(UpstreamError) as exc_info:
            await client.fetch_page(PAGE_URL)

        assert exc_info.value.status_code == 502

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html><body>Sign in</body></html>"),
            httpx.Response(200, json=[{"title": "Not a page"}]),
            httpx.Response(200, json={"body": "storage", "title": "Broken"}),
        ],
    )
    async def test_unexpected_success_body(self, response):
        client = make_client(lambda request: response)

        with pytest.raises(UpstreamError) as exc_info:
            await client.fetch_page(PAGE_URL)

        assert type(exc_info.value) is UpstreamError
        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Unexpected Confluence response"

    async def test_invalid_url_rejected_before_request(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={})

        client = make_client(handler)

        with pytest.raises(ValidationError):
            await client.fetch_page("https://localhost/pages/1")
        with pytest.raises(ValidationError, match="Could not extract page ID"):
            await client.fetch_page("https://acme.atlassian.net/wiki/home")
        assert calls == []

    async def test_missing_token(self):
        client = make_client(lambda request: httpx.Response(200, json={}), ConfluenceConfig())

        with pytest.raises(ConfigurationError):
            await client.fetch_page(PAGE_URL)

    async def test_close_leaves_shared_client_open(self):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        client = ConfluenceClient(ConfluenceConfig(token="t"), client=http_client)

        await client.close()

        assert http_client.is_closed is False
        await http_client.aclose()
