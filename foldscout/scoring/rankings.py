"""
Ranking Analysis

Helpers that turn verified rankings into report-ready figures:
- Above-the-fold selection and ordering
- Ranking tiers (top performers, strong, page one, long tail)
- Traffic potential from position-based click-through rates
"""

import logging
from typing import Dict, List, Sequence

from foldscout.context.models import RankedKeyword

logger = logging.getLogger(__name__)


# Click-through rate by organic position; anything lower on page one gets the default
CTR_BY_POSITION = {
    1: 0.28,
    2: 0.15,
}
DEFAULT_CTR = 0.10

ABOVE_FOLD_MIN_VOLUME = 10  # Exclusive
ABOVE_FOLD_MAX_POSITION = 10
ABOVE_FOLD_LIMIT = 50


def _volume(keyword: RankedKeyword) -> int:
    return keyword.volume or 0


def sort_keywords(keywords: Sequence[RankedKeyword]) -> List[RankedKeyword]:
    """
    Order keywords for the report.

    Verified rankings come first by position, then by volume. Verified
    keywords that do not rank follow, and keywords never checked come last,
    both by volume. Unknown volume sorts below any known volume.
    """
    ranking = [k for k in keywords if k.is_ranking]
    unranked = [k for k in keywords if k.is_verified and not k.is_ranking]
    unverified = [k for k in keywords if not k.is_verified]

    def by_volume(k: RankedKeyword):
        return (not k.has_volume, -_volume(k))

    ranking.sort(key=lambda k: (k.position, by_volume(k)))
    unranked.sort(key=by_volume)
    unverified.sort(key=by_volume)

    return ranking + unranked + unverified


def filter_above_fold(
    keywords: Sequence[RankedKeyword],
    limit: int = ABOVE_FOLD_LIMIT,
) -> List[RankedKeyword]:
    """
    Keywords the site verifiably ranks for on page one.

    Keeps verified positions 1-10 with a known volume above 10 and at
    least two words, ordered by position then volume.
    """
    selected = [
        k for k in keywords
        if k.is_verified
        and 1 <= k.position <= ABOVE_FOLD_MAX_POSITION
        and k.has_volume
        and k.volume > ABOVE_FOLD_MIN_VOLUME
        and len(k.phrase.split()) >= 2
    ]
    selected.sort(key=lambda k: (k.position, -_volume(k)))
    return selected[:limit]


def categorize_rankings(keywords: Sequence[RankedKeyword]) -> Dict[str, List[str]]:
    """
    Split verified page-one rankings into tiers.

    Returns:
        Dict with top_performers, strong_rankings, page_one and long_tail
        keyword lists
    """
    tiers: Dict[str, List[str]] = {
        "top_performers": [],
        "strong_rankings": [],
        "page_one": [],
        "long_tail": [],
    }

    for k in keywords:
        if not k.is_ranking or not k.has_volume or k.position > ABOVE_FOLD_MAX_POSITION:
            continue

        if k.position <= 3 and k.volume > 100:
            tiers["top_performers"].append(k.phrase)
        elif k.position <= 3 and k.volume >= 10:
            tiers["strong_rankings"].append(k.phrase)
        elif k.position >= 4 and k.volume > 25:
            tiers["page_one"].append(k.phrase)
        elif 10 <= k.volume <= 25:
            tiers["long_tail"].append(k.phrase)

    logger.debug(
        "Ranking tiers: " + ", ".join(f"{name}={len(items)}" for name, items in tiers.items())
    )
    return tiers


def click_through_rate(position: int) -> float:
    """Expected CTR for an organic position."""
    return CTR_BY_POSITION.get(position, DEFAULT_CTR)


def calculate_traffic_potential(keywords: Sequence[RankedKeyword]) -> int:
    """
    Monthly visits the given rankings should bring in.

    Only verified rankings with a known volume count; unknown volume adds
    nothing rather than a guess.
    """
    total = 0
    for k in keywords:
        if k.is_ranking and k.has_volume:
            total += round(k.volume * click_through_rate(k.position))
    return total
