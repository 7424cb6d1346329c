"""
Rank Verification

Checks where the audited domain actually ranks for a keyword. Every call
spends one unit of the shared daily budget. Calls are strictly sequential
with a fixed minimum spacing, and the raw result list of each successful
call is kept for competitor analysis.
"""

import asyncio
import logging
import time
from typing import List, Optional, Sequence

from foldscout.context.models import KeywordCandidate, RankedKeyword, SerpResultSet
from foldscout.utils.domain_filter import domains_match, normalize_domain

from .budget import SearchBudgetTracker
from .client import SerperClient
from .errors import NetworkFailureError, QuotaExhaustedError

logger = logging.getLogger(__name__)


def find_position(serp: SerpResultSet, domain: str):
    """First result belonging to the domain, or None."""
    for result in serp.results:
        if domains_match(result.domain, domain):
            return result
    return None


class RankVerificationService:
    """
    Budget-gated rank checks for one audited domain at a time.

    Usage:
        service = RankVerificationService(client, tracker)
        ranked = await service.verify_many(keywords, "example.com")
        serps = service.drain_serp_results()
    """

    def __init__(
        self,
        client: SerperClient,
        tracker: SearchBudgetTracker,
        result_count: int = 100,
        request_delay: float = 0.5,
        country: str = "gb",
        language: str = "en",
    ):
        self.client = client
        self.tracker = tracker
        self.result_count = min(100, max(10, result_count))
        self.request_delay = max(0.0, request_delay)
        self.country = country
        self.language = language

        self.quota_exhausted = False
        self.calls_made = 0
        self._serp_results: List[SerpResultSet] = []
        self._last_call: Optional[float] = None

    async def verify(self, keyword, domain: str) -> RankedKeyword:
        """
        Check one keyword.

        Args:
            keyword: Phrase string or KeywordCandidate/EnrichedKeyword
            domain: Audited domain

        Returns:
            Verified RankedKeyword (position 0 when absent), or an unverified
            one when no budget was granted or the call failed
        """
        ranked = self._unverified(keyword)

        if self.tracker.reserve(1) == 0:
            logger.debug(f"No budget left to verify '{ranked.phrase}'")
            return ranked

        self.calls_made += 1
        await self._wait_for_slot()

        try:
            serp = await self.client.search(
                ranked.phrase,
                num=self.result_count,
                gl=self.country,
                hl=self.language,
            )
        except QuotaExhaustedError as e:
            logger.warning(f"Search API quota exhausted while verifying '{ranked.phrase}': {e}")
            self.quota_exhausted = True
            self.tracker.exhaust()
            return ranked
        except NetworkFailureError as e:
            logger.warning(f"Rank check failed for '{ranked.phrase}': {e}")
            return ranked
        except Exception as e:
            logger.warning(f"Unexpected error checking '{ranked.phrase}': {e}")
            return ranked

        self._serp_results.append(serp)

        match = find_position(serp, domain)
        if match is None:
            logger.debug(f"'{ranked.phrase}': {normalize_domain(domain)} not in top {self.result_count}")
            return ranked.with_ranking(0)

        logger.debug(f"'{ranked.phrase}': {normalize_domain(domain)} at #{match.position}")
        return ranked.with_ranking(match.position, match.url, match.snippet or None)

    async def verify_many(self, keywords: Sequence, domain: str) -> List[RankedKeyword]:
        """
        Check keywords one at a time until the list or the budget runs out.

        Returns:
            Only the keywords that were attempted; the rest are left to the
            caller, untouched
        """
        ranked: List[RankedKeyword] = []

        for keyword in keywords:
            if self.quota_exhausted or self.tracker.remaining() <= 0:
                logger.info(
                    f"Stopping rank verification after {len(ranked)}/{len(keywords)} keywords: "
                    f"budget exhausted"
                )
                break
            ranked.append(await self.verify(keyword, domain))

        verified = sum(1 for k in ranked if k.is_verified)
        found = sum(1 for k in ranked if k.is_ranking)
        logger.info(f"Verified {verified} keywords for {domain}, ranking for {found}")
        return ranked

    def drain_serp_results(self) -> List[SerpResultSet]:
        """Hand over the retained result sets and forget them."""
        results, self._serp_results = self._serp_results, []
        return results

    async def _wait_for_slot(self) -> None:
        if self._last_call is not None and self.request_delay:
            elapsed = time.monotonic() - self._last_call
            if elapsed < self.request_delay:
                await asyncio.sleep(self.request_delay - elapsed)
        self._last_call = time.monotonic()

    @staticmethod
    def _unverified(keyword) -> RankedKeyword:
        if isinstance(keyword, KeywordCandidate):
            return RankedKeyword.unverified(keyword)
        return RankedKeyword(phrase=" ".join(str(keyword).lower().split()))
