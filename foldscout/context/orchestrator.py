"""
Keyword Discovery Orchestrator

Runs one discovery pass over a page:
1. Extracting - candidate phrases from the HTML
2. Enriching - search volume per phrase
3. Verifying - live rank checks for the highest-volume phrases, while
   the daily budget lasts
4. Filtering - ordering, above-the-fold selection, tiers, traffic
5. Analyzing competitors - overlap across the SERPs fetched in step 3

A failing stage is logged and recorded as a warning; the run always ends
in the done stage with whatever was completed.
"""

import logging
import time
from typing import Dict, Iterable, List, Optional

from foldscout.collector.budget import SearchBudgetTracker
from foldscout.collector.client import SerperClient
from foldscout.collector.rank_verification import RankVerificationService
from foldscout.collector.volume import VolumeEnrichmentClient
from foldscout.scoring.competitor_overlap import CompetitorOverlapAnalyzer
from foldscout.scoring.rankings import (
    calculate_traffic_potential,
    categorize_rankings,
    filter_above_fold,
    sort_keywords,
)
from foldscout.utils.config import Settings, get_settings
from foldscout.utils.domain_filter import normalize_domain

from .candidate_extractor import CandidateExtractor
from .models import (
    DiscoveryMethod,
    EnrichedKeyword,
    KeywordCandidate,
    KeywordDiscoveryResult,
    PipelineStage,
    RankedKeyword,
    SerpResultSet,
)

logger = logging.getLogger(__name__)


def select_for_verification(keywords: Iterable[EnrichedKeyword], limit: int) -> List[EnrichedKeyword]:
    """Highest-volume keywords first, unknown volume last, stable otherwise."""
    ordered = sorted(keywords, key=lambda k: (not k.has_volume, -(k.volume or 0)))
    return ordered[:max(0, limit)]


# =============================================================================
# ORCHESTRATOR
# =============================================================================


class KeywordDiscoveryOrchestrator:
    """
    Sequences the discovery pipeline for one domain at a time.

    The budget tracker is injected so several orchestrators (for example
    one per API request) can share the same daily quota.
    """

    def __init__(
        self,
        tracker: SearchBudgetTracker,
        rank_client: Optional[SerperClient] = None,
        volume_client: Optional[VolumeEnrichmentClient] = None,
        extractor: Optional[CandidateExtractor] = None,
        analyzer: Optional[CompetitorOverlapAnalyzer] = None,
        max_verifications: int = 50,
        request_delay: float = 0.5,
        result_count: int = 100,
        language: str = "en",
    ):
        self.tracker = tracker
        self.rank_client = rank_client
        self.volume_client = volume_client
        self.extractor = extractor or CandidateExtractor()
        self.analyzer = analyzer or CompetitorOverlapAnalyzer()
        self.max_verifications = max_verifications
        self.request_delay = request_delay
        self.result_count = result_count
        self.language = language

    async def run(
        self,
        html: str,
        domain: str,
        country: str = "gb",
        existing_keywords: Optional[Iterable[str]] = None,
        business_type: Optional[str] = None,
    ) -> KeywordDiscoveryResult:
        """
        Discover, verify and analyze keywords for a page.

        Args:
            html: Raw page markup
            domain: Audited domain
            country: Two-letter market code for volume and rank lookups
            existing_keywords: Keywords already known for the site
            business_type: Business-type label for the relevance filter

        Returns:
            KeywordDiscoveryResult in the done stage
        """
        start_time = time.time()
        domain = normalize_domain(domain)
        result = KeywordDiscoveryResult(domain=domain)

        logger.info(f"Starting keyword discovery for {domain} (country={country})")

        # Stage 1: candidates
        result.stage = PipelineStage.EXTRACTING
        candidates: List[KeywordCandidate] = []
        try:
            candidates = self.extractor.extract(
                html,
                domain,
                existing_keywords=existing_keywords,
                business_type=business_type,
            )
        except Exception as e:
            self._stage_failed(result, e)

        result.candidates_found = len(candidates)
        if not candidates:
            result.warnings.append("No keyword candidates found on page")
            return self._finish(result, start_time)

        # Stage 2: volume
        result.stage = PipelineStage.ENRICHING
        enriched = [EnrichedKeyword.unknown(c) for c in candidates]
        if self.volume_client is not None:
            try:
                enriched = await self.volume_client.enrich(candidates, locale=country)
            except Exception as e:
                self._stage_failed(result, e)
        else:
            result.warnings.append("Keyword volume API not configured; volumes unknown")

        # Stage 3: rank checks
        result.stage = PipelineStage.VERIFYING
        ranked: Dict[str, RankedKeyword] = {
            k.phrase: RankedKeyword.unverified(k) for k in enriched
        }
        serp_result_sets: List[SerpResultSet] = []

        if self.rank_client is None:
            result.discovery_method = DiscoveryMethod.API_REQUIRED
            result.warnings.append("Rank-check API not configured; rankings unverified")
        else:
            selected = select_for_verification(enriched, self.max_verifications)
            service = RankVerificationService(
                self.rank_client,
                self.tracker,
                result_count=self.result_count,
                request_delay=self.request_delay,
                country=country,
                language=self.language,
            )
            try:
                for keyword in await service.verify_many(selected, domain):
                    ranked[keyword.phrase] = keyword
            except Exception as e:
                self._stage_failed(result, e)
            finally:
                serp_result_sets = service.drain_serp_results()
                result.budget_used = service.calls_made

            result.verified_count = sum(1 for k in ranked.values() if k.is_verified)
            all_verified = bool(selected) and all(ranked[k.phrase].is_verified for k in selected)
            result.discovery_method = (
                DiscoveryMethod.API_VERIFIED if all_verified else DiscoveryMethod.CONTENT_ONLY
            )
            result.budget_exhausted = service.quota_exhausted or self.tracker.remaining() == 0

            if not all_verified:
                result.warnings.append(
                    f"Verified {result.verified_count}/{len(selected)} selected keywords; "
                    f"remaining rankings unverified"
                )

        # Stage 4: ordering and selection
        result.stage = PipelineStage.FILTERING
        try:
            result.ranked_keywords = sort_keywords(list(ranked.values()))
            result.above_fold_keywords = filter_above_fold(result.ranked_keywords)
            result.ranking_tiers = categorize_rankings(result.above_fold_keywords)
            result.estimated_traffic_gain = calculate_traffic_potential(result.above_fold_keywords)
        except Exception as e:
            self._stage_failed(result, e)

        # Stage 5: competitors
        result.stage = PipelineStage.ANALYZING_COMPETITORS
        if serp_result_sets:
            try:
                result.competitors = self.analyzer.analyze(serp_result_sets, domain)
            except Exception as e:
                self._stage_failed(result, e)

        return self._finish(result, start_time)

    def _stage_failed(self, result: KeywordDiscoveryResult, error: Exception) -> None:
        logger.error(f"Keyword discovery stage '{result.stage.value}' failed for {result.domain}: {error}")
        result.warnings.append(f"{result.stage.value} failed: {error}")

    def _finish(self, result: KeywordDiscoveryResult, start_time: float) -> KeywordDiscoveryResult:
        result.stage = PipelineStage.DONE
        result.budget_remaining = self.tracker.remaining()
        result.duration_seconds = time.time() - start_time

        logger.info(
            f"Keyword discovery complete for {result.domain} in {result.duration_seconds:.1f}s: "
            f"{result.candidates_found} candidates, {result.verified_count} verified, "
            f"{len(result.above_fold_keywords)} above fold, "
            f"{len(result.competitors.competitors)} competitors "
            f"(method={result.discovery_method.value})"
        )
        return result


# =============================================================================
# FACTORY FUNCTION
# =============================================================================


async def discover_keywords(
    html: str,
    domain: str,
    country: Optional[str] = None,
    existing_keywords: Optional[Iterable[str]] = None,
    business_type: Optional[str] = None,
    tracker: Optional[SearchBudgetTracker] = None,
    settings: Optional[Settings] = None,
) -> KeywordDiscoveryResult:
    """
    Convenience function to run discovery with clients built from settings.

    API keys that are not configured select the fallback paths: no volume
    key leaves volumes unknown, no rank-check key reports api_required.

    Args:
        html: Raw page markup
        domain: Audited domain
        country: Market code (defaults to DEFAULT_COUNTRY)
        existing_keywords: Keywords already known for the site
        business_type: Business-type label for the relevance filter
        tracker: Shared budget tracker (a fresh one is created if omitted)
        settings: Settings override (defaults to get_settings())

    Returns:
        KeywordDiscoveryResult
    """
    settings = settings or get_settings()
    tracker = tracker or SearchBudgetTracker(limit=settings.DAILY_SEARCH_LIMIT)

    rank_client = (
        SerperClient(settings.SERPER_API_KEY, timeout=settings.API_TIMEOUT)
        if settings.SERPER_API_KEY else None
    )
    volume_client = (
        VolumeEnrichmentClient(
            settings.KEYWORDS_EVERYWHERE_API_KEY,
            max_batch_size=settings.VOLUME_BATCH_SIZE,
            timeout=settings.API_TIMEOUT,
        )
        if settings.KEYWORDS_EVERYWHERE_API_KEY else None
    )

    orchestrator = KeywordDiscoveryOrchestrator(
        tracker=tracker,
        rank_client=rank_client,
        volume_client=volume_client,
        extractor=CandidateExtractor(max_candidates=settings.MAX_CANDIDATES),
        analyzer=CompetitorOverlapAnalyzer(max_competitors=settings.MAX_COMPETITORS),
        max_verifications=settings.MAX_VERIFICATIONS,
        request_delay=settings.RANK_CHECK_DELAY_SECONDS,
        result_count=settings.RANK_CHECK_RESULT_COUNT,
        language=settings.DEFAULT_LANGUAGE,
    )

    try:
        return await orchestrator.run(
            html,
            domain,
            country=country or settings.DEFAULT_COUNTRY,
            existing_keywords=existing_keywords,
            business_type=business_type,
        )
    finally:
        if rank_client is not None:
            await rank_client.close()
        if volume_client is not None:
            await volume_client.close()
