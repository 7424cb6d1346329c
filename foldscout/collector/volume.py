"""
Keyword Volume Enrichment

Attaches monthly search volume, competition and CPC to candidate phrases
using the Keywords Everywhere API. Every batch is a single attempt; any
phrase the API does not answer for is returned with volume unknown.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

import httpx

from foldscout.context.models import EnrichedKeyword, KeywordCandidate

from .errors import VolumeLookupError

logger = logging.getLogger(__name__)

# The API uses "uk" where ISO 3166 uses "gb"
COUNTRY_ALIASES = {
    "gb": "uk",
}

PhraseInput = Union[str, KeywordCandidate]


def _to_candidate(item: PhraseInput) -> KeywordCandidate:
    if isinstance(item, KeywordCandidate):
        return item
    return KeywordCandidate(phrase=" ".join(str(item).lower().split()))


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, dict):
        value = value.get("value")
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class VolumeEnrichmentClient:
    """
    Batch volume lookups against Keywords Everywhere.

    Usage:
        client = VolumeEnrichmentClient(api_key="...")
        enriched = await client.enrich(["plumbing services leeds"], locale="gb")
        await client.close()
    """

    BASE_URL = "https://api.keywordseverywhere.com"
    ENDPOINT = "/v1/get_keyword_data"

    def __init__(
        self,
        api_key: Optional[str],
        max_batch_size: int = 100,
        currency: str = "gbp",
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.max_batch_size = max(1, max_batch_size)
        self.currency = currency
        self.credits_used = 0

        self._client = http_client or httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={"Accept": "application/json"},
            timeout=httpx.Timeout(timeout),
        )
        self._owns_client = http_client is None
        self._closed = False

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def enrich(
        self,
        phrases: Sequence[PhraseInput],
        locale: str = "gb",
    ) -> List[EnrichedKeyword]:
        """
        Look up volume data for phrases.

        Args:
            phrases: Plain strings or KeywordCandidate objects
            locale: Two-letter country code

        Returns:
            One EnrichedKeyword per input, in input order
        """
        candidates = [_to_candidate(p) for p in phrases]
        if not candidates:
            return []

        if not self.is_configured:
            logger.warning("Keyword volume API key not configured, volumes unknown")
            return [EnrichedKeyword.unknown(c) for c in candidates]

        country = COUNTRY_ALIASES.get(locale.lower(), locale.lower())
        data: Dict[str, Dict[str, Any]] = {}

        for start in range(0, len(candidates), self.max_batch_size):
            batch = candidates[start:start + self.max_batch_size]
            try:
                data.update(await self._fetch_batch([c.phrase for c in batch], country))
            except VolumeLookupError as e:
                logger.warning(f"Volume lookup failed for batch of {len(batch)}: {e}")

        enriched = []
        for candidate in candidates:
            row = data.get(candidate.phrase)
            if row is None:
                enriched.append(EnrichedKeyword.unknown(candidate))
                continue
            enriched.append(EnrichedKeyword(
                phrase=candidate.phrase,
                origin=candidate.origin,
                source_section=candidate.source_section,
                volume=_as_int(row.get("vol")),
                competition=_as_float(row.get("competition")),
                cpc=_as_float(row.get("cpc")),
            ))

        known = sum(1 for k in enriched if k.has_volume)
        logger.info(f"Volume data for {known}/{len(enriched)} phrases ({self.credits_used} credits used)")
        return enriched

    async def _fetch_batch(self, phrases: List[str], country: str) -> Dict[str, Dict[str, Any]]:
        """Fetch one batch, keyed by lower-cased phrase."""
        if self._closed:
            raise VolumeLookupError("Client is closed")

        body = {
            "kw": phrases,
            "country": country,
            "currency": self.currency,
            "dataSource": "gkp",
        }

        try:
            response = await self._client.post(
                f"{self.BASE_URL}{self.ENDPOINT}",
                json=body,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.HTTPError as e:
            raise VolumeLookupError(f"HTTP error: {e}")

        if response.status_code != 200:
            raise VolumeLookupError(
                f"API request failed: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise VolumeLookupError(f"Undecodable response: {e}", status_code=response.status_code)

        rows = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(rows, list):
            raise VolumeLookupError("Response has no data list", status_code=response.status_code)

        credits = payload.get("credits_consumed")
        self.credits_used += credits if isinstance(credits, int) else len(phrases)

        return {
            " ".join(str(row.get("keyword", "")).lower().split()): row
            for row in rows
            if isinstance(row, dict) and row.get("keyword")
        }

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
