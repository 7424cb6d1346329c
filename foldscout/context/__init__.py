"""
FoldScout - Keyword Context Package

Everything needed to turn a page into keyword candidates:
- Data models shared by the whole pipeline
- HTML text access
- Vocabularies (stop words, generic phrases, business terms, locations)
- Candidate extraction

The pipeline orchestrator lives in foldscout.context.orchestrator and is
imported from there directly.
"""

from .models import (
    CompetitorAnalysis,
    CompetitorRecord,
    DiscoveryMethod,
    EnrichedKeyword,
    KeywordCandidate,
    KeywordDiscoveryResult,
    KeywordOrigin,
    PipelineStage,
    RankedKeyword,
    SearchBudget,
    SerpResult,
    SerpResultSet,
    SourceSection,
)
from .page_text import PageText
from .vocabulary import detect_search_intent, get_business_terms
from .candidate_extractor import CandidateExtractor, is_valid_phrase

__all__ = [
    # Models
    "CompetitorAnalysis",
    "CompetitorRecord",
    "DiscoveryMethod",
    "EnrichedKeyword",
    "KeywordCandidate",
    "KeywordDiscoveryResult",
    "KeywordOrigin",
    "PipelineStage",
    "RankedKeyword",
    "SearchBudget",
    "SerpResult",
    "SerpResultSet",
    "SourceSection",

    # Extraction
    "PageText",
    "CandidateExtractor",
    "is_valid_phrase",
    "detect_search_intent",
    "get_business_terms",
]
