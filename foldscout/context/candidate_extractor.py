"""
Candidate Keyword Extractor

Turns raw page HTML into candidate search phrases.

Text is pulled from the title, meta descriptions, headings, the first
paragraphs and image alt text. Each block is split into segments, every
2-6 word window becomes a candidate, and candidates are kept only if they
look like something a person would type into Google.
"""

import logging
import re
from typing import Iterable, List, Optional, Set, Tuple

from foldscout.utils.domain_filter import brand_token

from .models import KeywordCandidate, KeywordOrigin, SourceSection
from .page_text import PageText
from .vocabulary import (
    GENERIC_PHRASES,
    GENERIC_SEGMENT_MARKERS,
    SERVICE_NOUNS,
    STOP_WORDS,
    UK_LOCATIONS,
    contains_term,
    get_business_terms,
)

logger = logging.getLogger(__name__)


# Sentence punctuation and common title/nav separators
SEGMENT_SPLIT = re.compile(r"[.!?;:,|/\\()\[\]{}\"\u2022\u00b7\u2013\u2014]+|\s-\s")
TOKEN_PATTERN = re.compile(r"[a-z0-9]+(?:['&-][a-z0-9]+)*")
GENERIC_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(p) for p in GENERIC_PHRASES) + r")\b"
)
SEGMENT_MARKER_PATTERN = re.compile(
    r"(?<![a-z0-9])(?:" + "|".join(re.escape(m) for m in GENERIC_SEGMENT_MARKERS) + r")(?![a-z0-9])"
)
SERVICE_PATTERN = re.compile(
    r"\b([a-z][a-z-]+) (" + "|".join(SERVICE_NOUNS) + r")\b"
)

MIN_TOKENS = 2
MAX_TOKENS = 6
MIN_LENGTH = 4
MAX_LENGTH = 120

# Service + location combinations are bounded so one page cannot flood the list
MAX_SERVICES = 5
MAX_LOCATIONS = 3


def normalize_phrase(text: str) -> str:
    """Lower-case a phrase and collapse whitespace."""
    return " ".join((text or "").lower().split())


def is_generic(phrase: str) -> bool:
    """Check whether a phrase contains site furniture like "privacy policy"."""
    return bool(GENERIC_PATTERN.search(phrase))


def is_valid_phrase(phrase: str) -> bool:
    """
    Apply the phrase rules every content candidate has to pass.

    A valid phrase has 2-6 tokens and 4-120 characters, does not start or
    end on a stop word, has at least one non-numeric content word and
    contains no generic site furniture.
    """
    tokens = phrase.split()

    if not MIN_TOKENS <= len(tokens) <= MAX_TOKENS:
        return False
    if not MIN_LENGTH <= len(phrase) <= MAX_LENGTH:
        return False
    if tokens[0] in STOP_WORDS or tokens[-1] in STOP_WORDS:
        return False
    if not any(t not in STOP_WORDS and not t.isdigit() for t in tokens):
        return False
    if is_generic(phrase):
        return False

    return True


class CandidateExtractor:
    """
    Extract candidate keyword phrases from a page.

    Usage:
        extractor = CandidateExtractor()
        candidates = extractor.extract(html, "example.co.uk")
    """

    def __init__(self, max_candidates: int = 150, max_paragraphs: int = 20):
        self.max_candidates = max_candidates
        self.max_paragraphs = max_paragraphs

    def extract(
        self,
        html: str,
        domain: str,
        existing_keywords: Optional[Iterable[str]] = None,
        business_type: Optional[str] = None,
    ) -> List[KeywordCandidate]:
        """
        Extract deduplicated candidates, brand entries first.

        Args:
            html: Raw page markup (may be empty or malformed)
            domain: Audited domain, used for the brand token
            existing_keywords: Keywords already known for the site
            business_type: Business-type label for the relevance filter

        Returns:
            At most max_candidates candidates
        """
        brand = brand_token(domain)
        terms = get_business_terms(business_type) if business_type else None

        found = _CandidateSet(brand, terms)

        if brand:
            found.add(brand, SourceSection.DOMAIN, bare_brand=True)

        for keyword in existing_keywords or []:
            found.add(normalize_phrase(keyword), SourceSection.EXISTING)

        page = PageText(html)
        for section, text in self._collect_blocks(page):
            for segment in self._split_segments(text):
                for phrase in self._ngrams(segment):
                    found.add(phrase, section)

        for phrase in self._service_location_phrases(page):
            found.add(phrase, SourceSection.BODY)

        candidates = (found.brand_entries + found.content_entries)[:self.max_candidates]

        logger.info(
            f"Extracted {len(candidates)} candidates for {domain} "
            f"({len(found.brand_entries)} branded, {len(found.seen)} unique before cap)"
        )
        return candidates

    # =========================================================================
    # TEXT COLLECTION
    # =========================================================================

    def _collect_blocks(self, page: PageText) -> List[Tuple[SourceSection, str]]:
        blocks = []
        blocks.extend((SourceSection.TITLE, t) for t in page.extract_texts("title"))
        blocks.extend((SourceSection.META, t) for t in page.meta_texts())
        blocks.extend((SourceSection.HEADING, t) for t in page.extract_texts("h1, h2, h3, h4, h5, h6"))
        blocks.extend(
            (SourceSection.BODY, t)
            for t in page.extract_texts("p", limit=self.max_paragraphs)
        )
        blocks.extend((SourceSection.ALT, t) for t in page.extract_attributes("img[alt]", "alt"))
        return blocks

    @staticmethod
    def _split_segments(text: str) -> List[str]:
        segments = []
        for segment in SEGMENT_SPLIT.split(text.lower()):
            segment = segment.strip()
            if not segment:
                continue
            if SEGMENT_MARKER_PATTERN.search(segment):
                continue
            segments.append(segment)
        return segments

    @staticmethod
    def _ngrams(segment: str) -> List[str]:
        tokens = TOKEN_PATTERN.findall(segment)
        phrases = []
        for start in range(len(tokens)):
            for size in range(MIN_TOKENS, MAX_TOKENS + 1):
                if start + size > len(tokens):
                    break
                phrases.append(" ".join(tokens[start:start + size]))
        return phrases

    def _service_location_phrases(self, page: PageText) -> List[str]:
        body = page.body_text().lower()
        if not body:
            return []

        locations = [
            loc for loc in UK_LOCATIONS
            if re.search(r"\b" + re.escape(loc) + r"\b", body)
        ][:MAX_LOCATIONS]
        if not locations:
            return []

        services = []
        for match in SERVICE_PATTERN.finditer(body):
            if match.group(1) in STOP_WORDS:
                continue
            service = f"{match.group(1)} {match.group(2)}"
            if service not in services:
                services.append(service)
            if len(services) >= MAX_SERVICES:
                break

        phrases = []
        for service in services:
            for location in locations:
                phrases.append(f"{service} {location}")
                phrases.append(f"{service} in {location}")
        return phrases


class _CandidateSet:
    """Deduplicated candidates collected during one extract() call."""

    def __init__(self, brand: str, terms: Optional[List[str]]):
        self.brand = brand
        self.terms = terms
        self.brand_entries: List[KeywordCandidate] = []
        self.content_entries: List[KeywordCandidate] = []
        self.seen: Set[str] = set()

    def add(self, phrase: str, section: SourceSection, bare_brand: bool = False) -> None:
        if not phrase or phrase in self.seen:
            return

        branded = bool(self.brand) and f" {self.brand} " in f" {phrase} "

        if not bare_brand:
            if not is_valid_phrase(phrase):
                return
            # Branded phrases are relevant to the business by definition
            if self.terms and not branded and not contains_term(phrase, self.terms):
                return

        self.seen.add(phrase)
        if branded:
            self.brand_entries.append(
                KeywordCandidate(phrase=phrase, origin=KeywordOrigin.BRAND, source_section=section)
            )
        else:
            self.content_entries.append(
                KeywordCandidate(phrase=phrase, origin=KeywordOrigin.CONTENT, source_section=section)
            )
