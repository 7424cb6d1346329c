"""
Serper API Client

Async HTTP client for Google organic results via Serper:
- One request per call, no retries (every call costs budget)
- Typed errors for quota exhaustion, network failures and bad payloads
- Result rows parsed into SerpResult objects with normalized domains
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from foldscout.context.models import SerpResult, SerpResultSet
from foldscout.utils.domain_filter import extract_domain

from .errors import MalformedResponseError, NetworkFailureError, QuotaExhaustedError

logger = logging.getLogger(__name__)

# Statuses Serper uses for an exhausted plan or a rejected key
QUOTA_STATUS_CODES = (403, 429)


def parse_organic_results(keyword: str, payload: Any) -> SerpResultSet:
    """
    Parse a Serper response body into a SerpResultSet.

    Rows without a usable link are skipped. Rows without a position get
    their 1-based index in the list.

    Raises:
        MalformedResponseError: If the body has no organic list
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("organic"), list):
        raise MalformedResponseError(
            f"Response for '{keyword}' has no organic results",
            response=payload,
        )

    results: List[SerpResult] = []
    for index, item in enumerate(payload["organic"], start=1):
        if not isinstance(item, dict):
            continue

        url = item.get("link")
        if not isinstance(url, str):
            continue
        domain = extract_domain(url)
        if not domain:
            continue

        try:
            position = int(item.get("position") or index)
        except (TypeError, ValueError):
            position = index

        results.append(SerpResult(
            position=position,
            domain=domain,
            url=url,
            title=item.get("title") or "",
            snippet=item.get("snippet") or "",
        ))

    results.sort(key=lambda r: r.position)
    return SerpResultSet(keyword=keyword, results=results)


class SerperClient:
    """
    Async client for the Serper search API.

    Usage:
        async with SerperClient(api_key="...") as client:
            serp = await client.search("plumbing services leeds", num=100, gl="gb")
    """

    BASE_URL = "https://google.serper.dev"

    def __init__(
        self,
        api_key: str,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize Serper client.

        Args:
            api_key: Serper API key
            timeout: Request timeout in seconds
            http_client: Pre-configured client (tests inject a mock transport)
        """
        if not api_key:
            raise ValueError("Serper API key is required")

        self.api_key = api_key
        self._client = http_client or httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={"Content-Type": "application/json"},
            timeout=httpx.Timeout(timeout),
        )
        self._owns_client = http_client is None
        self._closed = False

    async def search(
        self,
        keyword: str,
        num: int = 100,
        gl: str = "gb",
        hl: str = "en",
    ) -> SerpResultSet:
        """
        Fetch organic results for one keyword.

        Raises:
            QuotaExhaustedError: On HTTP 429/403
            NetworkFailureError: On timeouts, transport errors or other non-2xx
            MalformedResponseError: On an undecodable body
        """
        if self._closed:
            raise NetworkFailureError("Client is closed")

        body: Dict[str, Any] = {"q": keyword, "num": num, "gl": gl, "hl": hl}
        logger.debug(f"POST /search q='{keyword}' num={num} gl={gl}")

        try:
            response = await self._client.post(
                f"{self.BASE_URL}/search",
                json=body,
                headers={"X-API-KEY": self.api_key},
            )
        except httpx.TimeoutException as e:
            raise NetworkFailureError(f"Request timed out for '{keyword}': {e}")
        except httpx.HTTPError as e:
            raise NetworkFailureError(f"HTTP error for '{keyword}': {e}")

        if response.status_code in QUOTA_STATUS_CODES:
            raise QuotaExhaustedError(
                f"Search API refused request: {response.status_code}",
                status_code=response.status_code,
                response=response.text,
            )
        if not 200 <= response.status_code < 300:
            raise NetworkFailureError(
                f"Search API request failed: {response.status_code}",
                status_code=response.status_code,
                response=response.text,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"Undecodable response for '{keyword}': {e}",
                status_code=response.status_code,
            )

        return parse_organic_results(keyword, payload)

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            if self._owns_client:
                await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
