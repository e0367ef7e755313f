"""Firecrawl client: listing page -> markdown.

Firecrawl renders the page (JS included) and returns its main content as
Markdown, which is what the extractor reads. Works against the cloud API and
self-hosted instances.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx

from outsyd_scraper.core.exceptions import FirecrawlError
from outsyd_scraper.logging import get_logger

logger = get_logger(__name__)


class ContentFetcher(Protocol):
    """Anything that can turn a URL into page text."""

    async def fetch_markdown(self, url: str) -> str:
        """Return the page's main content, raising FetchError on failure."""
        ...


@dataclass
class FirecrawlResponse:
    """Response from Firecrawl scrape."""

    success: bool
    markdown: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    status_code: int | None = None

    @property
    def title(self) -> str | None:
        """Get page title from metadata."""
        return self.metadata.get("title")


class FirecrawlClient:
    """Client for the Firecrawl scrape endpoint.

    Example:
        ```python
        client = FirecrawlClient("https://api.firecrawl.dev", api_key="fc-...")
        markdown = await client.fetch_markdown("https://www.quicket.co.za/events/")
        ```
    """

    def __init__(
        self,
        base_url: str = "https://api.firecrawl.dev",
        api_key: str | None = None,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize Firecrawl client.

        Args:
            base_url: Firecrawl API URL (self-hosted or cloud)
            api_key: API key (required for cloud, optional for self-hosted)
            timeout: HTTP timeout in seconds (page rendering can be slow)
            transport: Custom httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"Content-Type": "application/json"}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"

            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def scrape(
        self,
        url: str,
        formats: list[str] | None = None,
        only_main_content: bool = True,
    ) -> FirecrawlResponse:
        """Scrape a URL and convert to Markdown.

        Args:
            url: URL to scrape
            formats: Output formats (default ["markdown"])
            only_main_content: Remove nav, footer, etc.

        Returns:
            FirecrawlResponse (success=False instead of raising)
        """
        payload: dict[str, Any] = {
            "url": url,
            "formats": formats or ["markdown"],
            "onlyMainContent": only_main_content,
        }

        try:
            client = await self._get_client()
            # Self-hosted serves /scrape, cloud serves /v1/scrape
            response = await client.post(f"{self.base_url}/scrape", json=payload)
            if response.status_code == 404:
                response = await client.post(f"{self.base_url}/v1/scrape", json=payload)

            if response.status_code == 429:
                return FirecrawlResponse(
                    success=False,
                    error="Rate limited by Firecrawl",
                    status_code=429,
                )

            response.raise_for_status()
            data = response.json()

        except httpx.TimeoutException:
            logger.warning("firecrawl_timeout", url=url)
            return FirecrawlResponse(success=False, error="Request timeout")
        except httpx.HTTPStatusError as e:
            logger.warning(
                "firecrawl_http_error",
                url=url,
                status=e.response.status_code,
                body=e.response.text[:200],
            )
            return FirecrawlResponse(
                success=False,
                error=f"HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("firecrawl_error", url=url, error=str(e))
            return FirecrawlResponse(success=False, error=str(e))

        # Cloud:       {"success": true, "data": {"markdown": "...", "metadata": {...}}}
        # Self-hosted: {"markdown": "...", "content": "...", "metadata": {...}}
        if not isinstance(data, dict):
            return FirecrawlResponse(success=False, error="Unknown response format")

        if isinstance(data.get("data"), dict):
            result_data = data["data"]
            return FirecrawlResponse(
                success=bool(data.get("success", True)),
                markdown=result_data.get("markdown"),
                metadata=result_data.get("metadata") or {},
                error=data.get("error"),
            )
        if "markdown" in data or "content" in data:
            return FirecrawlResponse(
                success=True,
                markdown=data.get("markdown") or data.get("content"),
                metadata=data.get("metadata") or {},
            )
        return FirecrawlResponse(
            success=False,
            error=data.get("error", "Unknown response format"),
        )

    async def fetch_markdown(self, url: str) -> str:
        """Fetch a page's main content as Markdown.

        Raises:
            FirecrawlError: Non-success response or empty content
        """
        result = await self.scrape(url)

        if not result.success:
            raise FirecrawlError(
                result.error or "Scrape failed",
                status_code=result.status_code,
                source=url,
            )

        markdown = (result.markdown or "").strip()
        if not markdown:
            raise FirecrawlError("No content returned", source=url)

        logger.debug("firecrawl_scraped", url=url, chars=len(markdown), title=result.title)
        return markdown

    async def health_check(self) -> bool:
        """Check if Firecrawl server is reachable."""
        try:
            client = await self._get_client()
            response = await client.get(f"{self.base_url}/")
            return response.status_code < 500
        except httpx.HTTPError:
            return False


# Singleton instance
_client: FirecrawlClient | None = None


def get_firecrawl_client(
    base_url: str = "https://api.firecrawl.dev",
    api_key: str | None = None,
    timeout: float = 60.0,
) -> FirecrawlClient:
    """Get singleton Firecrawl client instance."""
    global _client
    if _client is None:
        _client = FirecrawlClient(base_url=base_url, api_key=api_key, timeout=timeout)
    return _client


def reset_firecrawl_client() -> None:
    """Reset singleton (for testing)."""
    global _client
    _client = None


async def close_firecrawl_client() -> None:
    """Close the singleton's HTTP client and drop it."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None
