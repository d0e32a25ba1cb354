"""
Resilient Page Retriever

Fetches third-party HTML for scanning. A direct request is tried first;
when it fails, each CORS proxy is tried in order with exponential backoff
between retries of the same proxy. Attempts are strictly sequential and
every attempt is bounded by a timeout that cancels the in-flight request.
"""

import asyncio
import re
from collections.abc import Awaitable, Callable
from urllib.parse import quote, urlsplit

import httpx
import structlog

from ..config import RetrieverConfig, get_settings
from ..errors import (
    EMPTY_RESPONSE_MESSAGE,
    INVALID_URL_MESSAGE,
    RETRIEVAL_FAILED_MESSAGE,
    TIMEOUT_MESSAGE,
    AbortedByTimeoutError,
    EmptyResponseError,
    InvalidInputError,
    RetrievalFailedError,
    ScanError,
)

logger = structlog.get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]

# Characters encodeURIComponent leaves unescaped beyond quote's defaults
URI_COMPONENT_SAFE = "!*'()"

# Letters (IDN included), digits, dots, hyphens and underscores, or a bare IPv6 literal
HOSTNAME_PATTERN = re.compile(r"[\w.\-]+|[0-9a-f:.]+", re.IGNORECASE)


def validate_url(url: str) -> str:
    """Reject anything that is not an absolute http(s) URL.

    Raises:
        InvalidInputError: Before any network activity
    """
    try:
        parts = urlsplit(url.strip())
        hostname = parts.hostname
    except (AttributeError, ValueError):
        raise InvalidInputError(INVALID_URL_MESSAGE) from None

    if parts.scheme not in ("http", "https") or not hostname:
        raise InvalidInputError(INVALID_URL_MESSAGE)
    if not HOSTNAME_PATTERN.fullmatch(hostname):
        raise InvalidInputError(INVALID_URL_MESSAGE)
    return url.strip()


def proxied_url(proxy: str, url: str) -> str:
    """Append the percent-encoded target URL to a proxy prefix."""
    return f"{proxy}{quote(url, safe=URI_COMPONENT_SAFE)}"


class PageRetriever:
    """
    Fetches page HTML with timeout, proxy fallback and backoff.

    The attempt budget is a hard ceiling of one direct attempt plus
    max_retries attempts per proxy.

    Usage:
        async with PageRetriever() as retriever:
            html = await retriever.retrieve("https://example.com")
    """

    def __init__(
        self,
        config: RetrieverConfig | None = None,
        client: httpx.AsyncClient | None = None,
        sleep: Sleep | None = None,
    ):
        """
        Initialize the retriever.

        Args:
            config: Retrieval knobs (defaults to environment settings)
            client: HTTP client to use; injected clients are not closed here
            sleep: Backoff coroutine, replaceable in tests
        """
        self.config = config or get_settings().retriever_config()
        self._client = client
        self._owns_client = client is None
        self._sleep = sleep or asyncio.sleep

    async def __aenter__(self) -> "PageRetriever":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": self.config.user_agent},
                follow_redirects=True,
                timeout=httpx.Timeout(self.config.timeout_seconds),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this retriever created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def retrieve(self, url: str) -> str:
        """
        Retrieve page HTML as text.

        Args:
            url: Absolute http(s) URL of the page

        Returns:
            Response body

        Raises:
            InvalidInputError: URL is malformed (no attempt is made)
            RetrievalFailedError: Every direct and proxied attempt failed
            EmptyResponseError: A response arrived but its body is blank
        """
        url = validate_url(url)
        response = await self._fetch_with_retry(url)
        html = response.text

        if not html.strip():
            raise EmptyResponseError(EMPTY_RESPONSE_MESSAGE)

        logger.info("Page retrieved", url=url, size=len(html))
        return html

    async def _fetch_with_retry(self, url: str) -> httpx.Response:
        max_attempts = self.config.max_attempts
        attempt = 1
        last_error: ScanError | None = None

        response, last_error = await self._attempt(url, "direct", attempt, max_attempts)
        if response is not None:
            return response

        for proxy in self.config.proxies:
            for retry in range(self.config.max_retries):
                attempt += 1
                target = proxied_url(proxy, url)
                response, error = await self._attempt(target, proxy, attempt, max_attempts)
                if response is not None:
                    return response
                last_error = error

                if retry < self.config.max_retries - 1:
                    await self._sleep(self.config.backoff_base_seconds * 2 ** retry)

        logger.error("All retrieval attempts failed", url=url, attempts=attempt)
        raise RetrievalFailedError(RETRIEVAL_FAILED_MESSAGE) from last_error

    async def _attempt(
        self,
        target: str,
        source: str,
        attempt: int,
        max_attempts: int,
    ) -> tuple[httpx.Response | None, ScanError | None]:
        """Run one bounded attempt; returns the response only when it is ok."""
        client = self._ensure_client()

        try:
            response = await asyncio.wait_for(
                client.get(target),
                timeout=self.config.timeout_seconds,
            )
        except (TimeoutError, httpx.TimeoutException):
            logger.warning(
                "Retrieval attempt timed out",
                source=source,
                attempt=attempt,
                max_attempts=max_attempts,
                timeout_seconds=self.config.timeout_seconds,
            )
            return None, AbortedByTimeoutError(TIMEOUT_MESSAGE)
        except httpx.HTTPError as e:
            logger.warning(
                "Retrieval attempt failed",
                source=source,
                attempt=attempt,
                max_attempts=max_attempts,
                error=str(e),
            )
            return None, RetrievalFailedError(f"Request failed: {e}")

        if response.is_success:
            return response, None

        logger.warning(
            "Retrieval attempt returned error status",
            source=source,
            attempt=attempt,
            max_attempts=max_attempts,
            status_code=response.status_code,
        )
        return None, RetrievalFailedError(f"HTTP error {response.status_code}")
