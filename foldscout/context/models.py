"""
Keyword Discovery Data Models

Defines all types flowing through the discovery pipeline:
- Keyword candidates extracted from page content
- Volume-enriched and rank-verified keywords
- Raw SERP result sets retained for competitor analysis
- Competitor records and the final discovery result
"""

from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from .vocabulary import detect_search_intent


# =============================================================================
# ENUMS
# =============================================================================


class KeywordOrigin(str, Enum):
    """Where a candidate phrase came from."""
    BRAND = "brand"  # Contains the brand token
    CONTENT = "content"  # Plain page content


class SourceSection(str, Enum):
    """Page section a candidate was extracted from."""
    TITLE = "title"
    META = "meta"
    HEADING = "heading"
    BODY = "body"
    ALT = "alt"
    DOMAIN = "domain"  # Brand token derived from the domain itself
    EXISTING = "existing"  # Keyword supplied by the caller


class DiscoveryMethod(str, Enum):
    """How the ranking data in a result was obtained."""
    API_VERIFIED = "api_verified"  # Every selected keyword checked live
    CONTENT_ONLY = "content_only"  # Some or all rankings unverified
    API_REQUIRED = "api_required"  # No rank-check API configured


class PipelineStage(str, Enum):
    """Stages of one discovery run, in order."""
    EXTRACTING = "extracting"
    ENRICHING = "enriching"
    VERIFYING = "verifying"
    FILTERING = "filtering"
    ANALYZING_COMPETITORS = "analyzing_competitors"
    DONE = "done"


# =============================================================================
# BUDGET
# =============================================================================


@dataclass
class SearchBudget:
    """Daily rank-check quota state."""
    limit: int
    used: int = 0
    window_start_date: date = field(default_factory=date.today)

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.used)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "limit": self.limit,
            "used": self.used,
            "remaining": self.remaining,
            "window_start_date": self.window_start_date.isoformat(),
        }


# =============================================================================
# KEYWORDS
# =============================================================================


@dataclass(frozen=True)
class KeywordCandidate:
    """An unverified phrase extracted from page content."""
    phrase: str
    origin: KeywordOrigin = KeywordOrigin.CONTENT
    source_section: SourceSection = SourceSection.BODY

    @property
    def is_branded(self) -> bool:
        return self.origin == KeywordOrigin.BRAND

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keyword": self.phrase,
            "origin": self.origin.value,
            "source_section": self.source_section.value,
        }


@dataclass(frozen=True)
class EnrichedKeyword(KeywordCandidate):
    """
    Candidate with search demand attached.

    volume=None means the volume API could not say. It is never replaced
    by an estimate, so "unknown" stays distinguishable from "zero demand".
    """
    volume: Optional[int] = None
    competition: Optional[float] = None
    cpc: Optional[float] = None

    @property
    def has_volume(self) -> bool:
        return self.volume is not None

    @classmethod
    def unknown(cls, candidate: KeywordCandidate) -> "EnrichedKeyword":
        """Enriched keyword with no volume data."""
        return cls(
            phrase=candidate.phrase,
            origin=candidate.origin,
            source_section=candidate.source_section,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "volume": self.volume,
            "competition": self.competition,
            "cpc": self.cpc,
        })
        return data


@dataclass(frozen=True)
class RankedKeyword(EnrichedKeyword):
    """
    Enriched keyword with a Google position.

    position 0 means either "not in the checked results" (is_verified=True)
    or "never checked" (is_verified=False). Only a live rank check sets
    is_verified.
    """
    position: int = 0
    ranking_url: Optional[str] = None
    snippet: Optional[str] = None
    is_verified: bool = False

    @classmethod
    def unverified(cls, keyword: KeywordCandidate) -> "RankedKeyword":
        """Ranked keyword for a phrase that was never checked."""
        return cls(
            phrase=keyword.phrase,
            origin=keyword.origin,
            source_section=keyword.source_section,
            volume=getattr(keyword, "volume", None),
            competition=getattr(keyword, "competition", None),
            cpc=getattr(keyword, "cpc", None),
        )

    def with_ranking(
        self,
        position: int,
        ranking_url: Optional[str] = None,
        snippet: Optional[str] = None,
    ) -> "RankedKeyword":
        """Copy of this keyword carrying a live rank-check outcome."""
        return replace(
            self,
            position=position,
            ranking_url=ranking_url,
            snippet=snippet,
            is_verified=True,
        )

    @property
    def is_ranking(self) -> bool:
        return self.is_verified and self.position > 0

    @property
    def is_above_fold(self) -> bool:
        return self.is_verified and 1 <= self.position <= 3

    @property
    def search_intent(self) -> str:
        return detect_search_intent(self.phrase)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "position": self.position,
            "ranking_url": self.ranking_url,
            "snippet": self.snippet,
            "is_verified": self.is_verified,
            "is_above_fold": self.is_above_fold,
            "search_intent": self.search_intent,
        })
        return data


# =============================================================================
# SERP DATA
# =============================================================================


@dataclass
class SerpResult:
    """One organic result row."""
    position: int
    domain: str
    url: str
    title: str = ""
    snippet: str = ""


@dataclass
class SerpResultSet:
    """Ordered organic results for one verified keyword."""
    keyword: str
    results: List[SerpResult] = field(default_factory=list)


# =============================================================================
# COMPETITORS
# =============================================================================


@dataclass
class CompetitorRecord:
    """A domain that co-ranks with the audited site."""
    domain: str
    appearances: int = 0
    positions: List[int] = field(default_factory=list)
    shared_keywords: Set[str] = field(default_factory=set)

    # Finalized metrics
    overlap_pct: float = 0.0
    avg_position: float = 0.0
    authority_estimate: int = 0
    authority_confidence: str = "estimated"  # Derived from position only
    competition_level: str = "low"  # high, medium, low

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain": self.domain,
            "appearances": self.appearances,
            "positions": list(self.positions),
            "shared_keywords": sorted(self.shared_keywords),
            "overlap_pct": self.overlap_pct,
            "avg_position": self.avg_position,
            "authority_estimate": self.authority_estimate,
            "authority_confidence": self.authority_confidence,
            "competition_level": self.competition_level,
        }


@dataclass
class CompetitorAnalysis:
    """Finalized competitor overlap for one discovery run."""
    competitors: List[CompetitorRecord] = field(default_factory=list)
    keywords_searched: int = 0
    total_competitors: int = 0  # Before truncation to the top N
    average_overlap: float = 0.0
    competition_intensity: str = "low"  # high, medium, low

    def to_dict(self) -> Dict[str, Any]:
        return {
            "competitors": [c.to_dict() for c in self.competitors],
            "keywords_searched": self.keywords_searched,
            "total_competitors": self.total_competitors,
            "average_overlap": self.average_overlap,
            "competition_intensity": self.competition_intensity,
        }


# =============================================================================
# DISCOVERY RESULT
# =============================================================================


@dataclass
class KeywordDiscoveryResult:
    """Output of one pipeline run, handed to the report/UI layer."""
    domain: str

    # Keywords
    ranked_keywords: List[RankedKeyword] = field(default_factory=list)
    above_fold_keywords: List[RankedKeyword] = field(default_factory=list)
    ranking_tiers: Dict[str, List[str]] = field(default_factory=dict)
    estimated_traffic_gain: int = 0

    # Competitors
    competitors: CompetitorAnalysis = field(default_factory=CompetitorAnalysis)

    # Provenance
    discovery_method: DiscoveryMethod = DiscoveryMethod.API_REQUIRED
    candidates_found: int = 0
    verified_count: int = 0
    budget_used: int = 0
    budget_remaining: int = 0
    budget_exhausted: bool = False

    # Run state
    stage: PipelineStage = PipelineStage.EXTRACTING
    warnings: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain": self.domain,
            "ranked_keywords": [k.to_dict() for k in self.ranked_keywords],
            "above_fold_keywords": [k.to_dict() for k in self.above_fold_keywords],
            "ranking_tiers": self.ranking_tiers,
            "estimated_traffic_gain": self.estimated_traffic_gain,
            "competitors": self.competitors.to_dict(),
            "discovery_method": self.discovery_method.value,
            "candidates_found": self.candidates_found,
            "verified_count": self.verified_count,
            "budget_used": self.budget_used,
            "budget_remaining": self.budget_remaining,
            "budget_exhausted": self.budget_exhausted,
            "stage": self.stage.value,
            "warnings": list(self.warnings),
            "duration_seconds": round(self.duration_seconds, 2),
        }
