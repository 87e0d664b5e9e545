"""
Confluence REST API client.

Fetches a page's storage-format HTML given its browser URL. Credentials come
from the request when supplied, otherwise from configuration.
"""

import base64
import ipaddress
import re
from datetime import datetime, timezone
from urllib.parse import urlsplit

import httpx

from docenhancer.config import ConfluenceConfig
from docenhancer.models.api import ConfluencePage
from docenhancer.utils.exceptions import (
    AuthenticationError,
    ConfigurationError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from docenhancer.utils.logger import get_logger

logger = get_logger(__name__)

PAGE_ID_PATTERN = re.compile(r"/pages/(\d+)")

CONTENT_PATH = "/wiki/rest/api/content/{page_id}"
CONTENT_EXPAND = "body.storage,version"


def extract_page_id(url: str) -> str | None:
    """
    Extract the numeric page ID from a Confluence URL.

    Supports:
    - https://domain.atlassian.net/wiki/spaces/SPACE/pages/123456/Page+Title
    - https://domain.confluence.com/pages/123456
    """
    match = PAGE_ID_PATTERN.search(url or "")
    return match.group(1) if match else None


def extract_base_url(url: str) -> str | None:
    """Return ``scheme://host[:port]`` of a URL, or None if it has no host."""
    parts = urlsplit(url or "")
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme}://{parts.netloc}"


def is_valid_confluence_url(url: str) -> bool:
    """
    Check a URL is safe to fetch server-side.

    HTTPS only; Atlassian Cloud hosts are always accepted, self-hosted
    instances are accepted unless the host is localhost or an IP address.
    """
    parts = urlsplit(url or "")
    if parts.scheme != "https" or not parts.hostname:
        return False

    hostname = parts.hostname.lower()
    if hostname.endswith(".atlassian.net"):
        return True
    if hostname == "localhost":
        return False
    try:
        ipaddress.ip_address(hostname)
        return False
    except ValueError:
        return True


def build_auth_header(token: str, email: str | None = None) -> str:
    """Basic auth value: base64 ``email:token``, or the token as-is without email."""
    if email:
        encoded = base64.b64encode(f"{email}:{token}".encode()).decode("ascii")
        return f"Basic {encoded}"
    return f"Basic {token}"


class ConfluenceClient:
    """
    Async Confluence page fetcher.

    Usage:
        client = ConfluenceClient(config.confluence)
        page = await client.fetch_page("https://acme.atlassian.net/wiki/spaces/X/pages/123/Title")
    """

    def __init__(self, config: ConfluenceConfig | None = None, client: httpx.AsyncClient | None = None):
        """
        Args:
            config: Default credentials and timeout
            client: Optional shared httpx client (tests pass one with a MockTransport)
        """
        self.config = config or ConfluenceConfig()
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._client

    async def fetch_page(
        self,
        url: str,
        email: str | None = None,
        token: str | None = None,
    ) -> ConfluencePage:
        """
        Fetch a page's storage-format content.

        Args:
            url: Page URL as shown in the browser
            email: Account email (overrides config)
            token: API token (overrides config)

        Returns:
            ConfluencePage

        Raises:
            ValidationError: If the URL is unusable
            ConfigurationError: If no token is available
            AuthenticationError: On HTTP 401
            NotFoundError: On HTTP 404
            UpstreamError: On any other non-2xx status or transport failure
        """
        if not is_valid_confluence_url(url):
            raise ValidationError(
                "Invalid Confluence URL. Use an https:// address of your Confluence site.",
                context={"url": url},
            )

        page_id = extract_page_id(url)
        if not page_id:
            raise ValidationError("Invalid Confluence URL format. Could not extract page ID.")

        base_url = extract_base_url(url)
        if not base_url:
            raise ValidationError("Invalid Confluence URL format. Could not extract base URL.")

        token = token or self.config.token
        email = email or self.config.email
        if not token:
            raise ConfigurationError("Server configuration error: Confluence token not set")

        api_url = base_url + CONTENT_PATH.format(page_id=page_id)
        headers = {
            "Authorization": build_auth_header(token, email),
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

        logger.info(f"Fetching Confluence page {page_id} from {base_url}")
        try:
            response = await self.client.get(
                api_url, params={"expand": CONTENT_EXPAND}, headers=headers
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch from Confluence: {e}")
            raise UpstreamError(
                "Failed to fetch from Confluence", status_code=502, details=str(e)
            ) from e

        if response.is_error:
            logger.error(
                f"Confluence API error: {response.status_code}",
                extra={"page_id": page_id, "body": response.text[:500]},
            )
            if response.status_code == 401:
                raise AuthenticationError(
                    "Authentication failed. Check your Confluence credentials."
                )
            if response.status_code == 404:
                raise NotFoundError("Page not found. Check the Confluence URL.")
            raise UpstreamError(
                f"Confluence API error: {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            return self._parse_page(response.json())
        except (ValueError, AttributeError, TypeError) as e:
            logger.error(
                f"Unexpected Confluence response for page {page_id}: {e}",
                extra={"page_id": page_id, "body": response.text[:500]},
            )
            raise UpstreamError(
                "Unexpected Confluence response", status_code=502, details=str(e)
            ) from e

    @staticmethod
    def _parse_page(data: dict) -> ConfluencePage:
        if not isinstance(data, dict):
            raise TypeError(f"expected a JSON object, got {type(data).__name__}")
        body = (data.get("body") or {}).get("storage") or {}
        version = data.get("version") or {}
        return ConfluencePage(
            content=body.get("value") or "",
            title=data.get("title") or "Untitled",
            version=version.get("number") or 1,
            last_modified=version.get("when") or datetime.now(timezone.utc).isoformat(),
        )

    async def close(self):
        """Close the HTTP client if this instance created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
