"""
Scoring Module for FoldScout

1. **Competitor Overlap**
   Domains that co-rank with the audited site across verified keywords,
   with overlap %, average position and a position-derived authority
   estimate.

2. **Ranking Analysis**
   Above-the-fold selection, ranking tiers and CTR-based traffic potential.

Example Usage:
    from foldscout.scoring import CompetitorOverlapAnalyzer, filter_above_fold

    analysis = CompetitorOverlapAnalyzer().analyze(serp_result_sets, "example.com")
    above_fold = filter_above_fold(ranked_keywords)
"""

from .competitor_overlap import (
    CompetitorOverlapAnalyzer,
    competition_level,
    estimate_authority,
)
from .rankings import (
    calculate_traffic_potential,
    categorize_rankings,
    click_through_rate,
    filter_above_fold,
    sort_keywords,
)

__all__ = [
    # Competitors
    "CompetitorOverlapAnalyzer",
    "competition_level",
    "estimate_authority",

    # Rankings
    "calculate_traffic_potential",
    "categorize_rankings",
    "click_through_rate",
    "filter_above_fold",
    "sort_keywords",
]
