"""
Competitor Overlap Analysis

Finds the domains that keep showing up next to the audited site.

Every SERP collected during rank verification is scanned. A domain counts
once per keyword it appears for (at its best position for that keyword),
and only domains seen for at least two keywords are reported.

Metrics per competitor:
- overlap_pct: share of searched keywords the domain appears for
- avg_position: mean of its best position per keyword
- authority_estimate: 70 - avg_position * 5, clamped to 20-70. Derived
  from position only, so always tagged "estimated".
"""

import logging
from typing import Dict, Sequence

from foldscout.context.models import CompetitorAnalysis, CompetitorRecord, SerpResultSet
from foldscout.utils.domain_filter import domains_match, is_excluded_domain, normalize_domain

logger = logging.getLogger(__name__)


MIN_APPEARANCES = 2
AUTHORITY_BASE = 70
AUTHORITY_PER_POSITION = 5
AUTHORITY_FLOOR = 20

# Overlap thresholds (percent) for competition levels
HIGH_OVERLAP = 60
MEDIUM_OVERLAP = 30


def competition_level(overlap_pct: float) -> str:
    """high, medium or low for an overlap percentage."""
    if overlap_pct >= HIGH_OVERLAP:
        return "high"
    if overlap_pct >= MEDIUM_OVERLAP:
        return "medium"
    return "low"


def estimate_authority(avg_position: float) -> int:
    """Authority estimate from average position, within 20-70."""
    score = round(AUTHORITY_BASE - avg_position * AUTHORITY_PER_POSITION)
    return max(AUTHORITY_FLOOR, min(AUTHORITY_BASE, score))


class CompetitorOverlapAnalyzer:
    """
    Aggregate SERP result sets into competitor records.

    Usage:
        analyzer = CompetitorOverlapAnalyzer()
        analysis = analyzer.analyze(service.drain_serp_results(), "example.com")
    """

    def __init__(self, max_competitors: int = 8, exclude_platforms: bool = True):
        self.max_competitors = max_competitors
        self.exclude_platforms = exclude_platforms

    def analyze(
        self,
        serp_result_sets: Sequence[SerpResultSet],
        target_domain: str,
    ) -> CompetitorAnalysis:
        keywords_searched = len(serp_result_sets)
        if keywords_searched == 0:
            return CompetitorAnalysis()

        records: Dict[str, CompetitorRecord] = {}
        skipped = set()

        for serp in serp_result_sets:
            # Best position per domain for this keyword
            best: Dict[str, int] = {}
            for result in serp.results:
                domain = normalize_domain(result.domain)
                if not domain or domains_match(domain, target_domain):
                    continue
                if self.exclude_platforms and is_excluded_domain(domain):
                    skipped.add(domain)
                    continue
                if domain not in best or result.position < best[domain]:
                    best[domain] = result.position

            for domain, position in best.items():
                record = records.setdefault(domain, CompetitorRecord(domain=domain))
                if serp.keyword in record.shared_keywords:
                    continue
                record.shared_keywords.add(serp.keyword)
                record.appearances += 1
                record.positions.append(position)

        competitors = [
            self._finalize(record, keywords_searched)
            for record in records.values()
            if record.appearances >= MIN_APPEARANCES
        ]
        competitors.sort(key=lambda r: r.appearances * 2 + r.overlap_pct, reverse=True)

        total = len(competitors)
        competitors = competitors[:self.max_competitors]

        average_overlap = (
            round(sum(c.overlap_pct for c in competitors) / len(competitors), 1)
            if competitors else 0.0
        )

        logger.info(
            f"Competitor overlap for {target_domain}: {total} competitors across "
            f"{keywords_searched} keywords ({len(skipped)} platform domains skipped)"
        )

        return CompetitorAnalysis(
            competitors=competitors,
            keywords_searched=keywords_searched,
            total_competitors=total,
            average_overlap=average_overlap,
            competition_intensity=competition_level(average_overlap),
        )

    @staticmethod
    def _finalize(record: CompetitorRecord, keywords_searched: int) -> CompetitorRecord:
        record.overlap_pct = round(len(record.shared_keywords) / keywords_searched * 100, 1)
        record.avg_position = round(sum(record.positions) / len(record.positions), 1)
        record.authority_estimate = estimate_authority(record.avg_position)
        record.authority_confidence = "estimated"
        record.competition_level = competition_level(record.overlap_pct)
        return record

