"""
Tests for candidate keyword extraction.
"""

import pytest

from foldscout.context.candidate_extractor import (
    SEGMENT_MARKER_PATTERN,
    CandidateExtractor,
    is_generic,
    is_valid_phrase,
)
from foldscout.context.models import KeywordOrigin, SourceSection
from foldscout.context.page_text import PageText
from foldscout.context.vocabulary import contains_term, get_business_terms


LONG_PAGE = "<html><body>" + "".join(
    f"<h2>Bespoke oak joinery batch{i} for family kitchens</h2>" for i in range(80)
) + "</body></html>"

EXTRACTION_PAGES = [
    "",
    "not html at all",
    "<html><head><title>Broken",
    "<p>unclosed <b>tags <<<>>> </div></span>",
    "<![CDATA[ hidden cdata text ]]><p>Garden design ideas</p>",
    LONG_PAGE,
    (
        "<nav>Home | About Us | Contact Us | Log in</nav>"
        "<h1>Garden design ideas for small spaces | Privacy Policy</h1>"
        "<p>Read our cookie policy. Landscape gardening in Leeds and York.</p>"
        "<footer><p>Copyright 2024 Acme. All rights reserved. Follow us on Facebook</p></footer>"
    ),
    "<p>" + " ".join(["supercalifragilisticexpialidocious"] * 8) + "</p>",
]


@pytest.fixture
def extractor():
    return CandidateExtractor()


class TestPageText:
    """Test the HTML text view."""

    def test_scripts_styles_and_comments_removed(self, sample_html):
        page = PageText(sample_html)
        body = page.body_text().lower()
        assert "cheap pills" not in body
        assert "hidden comment" not in body
        assert "enable javascript" not in body

    def test_extract_text(self, sample_html):
        page = PageText(sample_html)
        assert page.extract_text("h1") == "Emergency Plumbing Services"
        assert page.extract_text("h6") == ""

    def test_meta_texts(self, sample_html):
        metas = PageText(sample_html).meta_texts()
        assert any("boiler repair" in m for m in metas)
        assert any("Trusted Local Plumbers" in m for m in metas)

    def test_invalid_selector_returns_empty(self, sample_html):
        assert PageText(sample_html).extract_texts("p[") == []

    def test_malformed_html(self):
        page = PageText("<html><p>unclosed <b>tags <<<>>> & stuff")
        assert "unclosed" in page.body_text()


class TestPhraseRules:
    """Test phrase validity rules."""

    def test_valid_phrase(self):
        assert is_valid_phrase("boiler repair leeds")

    def test_stop_word_edges_rejected(self):
        assert not is_valid_phrase("the boiler repair")
        assert not is_valid_phrase("boiler repair in")

    def test_token_bounds(self):
        assert not is_valid_phrase("boiler")
        assert not is_valid_phrase("one two three four five six seven")

    def test_numeric_rejected(self):
        assert not is_valid_phrase("2024 2025")

    def test_generic_rejected(self):
        assert is_generic("our privacy policy page")
        assert not is_valid_phrase("privacy policy")
        assert not is_valid_phrase("contact us today")

    def test_generic_matches_whole_words(self):
        assert not is_generic("design update")


class TestCandidateExtractor:
    """Test extraction from a page."""

    def test_brand_token_first(self, extractor, sample_html, sample_domain):
        candidates = extractor.extract(sample_html, sample_domain)
        first = candidates[0]
        assert first.phrase == "acme plumbing"
        assert first.origin == KeywordOrigin.BRAND
        assert first.source_section == SourceSection.DOMAIN

    def test_brand_entries_precede_content(self, extractor, sample_html, sample_domain):
        candidates = extractor.extract(sample_html, sample_domain)
        origins = [c.origin for c in candidates]
        first_content = origins.index(KeywordOrigin.CONTENT)
        assert KeywordOrigin.BRAND not in origins[first_content:]
        assert any(c.phrase == "acme plumbing provides" and c.is_branded for c in candidates)

    def test_content_phrases_found(self, extractor, sample_html, sample_domain):
        phrases = {c.phrase for c in extractor.extract(sample_html, sample_domain)}
        assert "emergency plumbing services" in phrases
        assert "boiler repair" in phrases
        assert "bathroom installation" in phrases
        assert "central heating installation" in phrases

    def test_sections_tagged(self, extractor, sample_html, sample_domain):
        by_phrase = {c.phrase: c for c in extractor.extract(sample_html, sample_domain)}
        assert by_phrase["emergency plumbing services leeds"].source_section == SourceSection.TITLE
        assert by_phrase["fast boiler repair"].source_section == SourceSection.META
        assert by_phrase["boiler repair specialists"].source_section == SourceSection.HEADING
        assert by_phrase["bathroom installation team"].source_section == SourceSection.ALT

    def test_noise_never_extracted(self, extractor, sample_html, sample_domain):
        phrases = [c.phrase for c in extractor.extract(sample_html, sample_domain)]
        for phrase in phrases:
            assert "cheap pills" not in phrase
            assert "hidden comment" not in phrase
            assert "javascript" not in phrase
            assert "rights reserved" not in phrase
            assert "privacy" not in phrase

    @pytest.mark.parametrize("html", EXTRACTION_PAGES)
    def test_content_phrase_bounds(self, extractor, html):
        candidates = extractor.extract(html, "acme-plumbing.co.uk")
        assert len(candidates) <= extractor.max_candidates
        for c in candidates:
            if c.source_section == SourceSection.DOMAIN:
                continue
            tokens = c.phrase.split()
            assert 2 <= len(tokens) <= 6
            assert 4 <= len(c.phrase) <= 120
            assert c.phrase == c.phrase.lower()
            assert not is_generic(c.phrase)
            assert not SEGMENT_MARKER_PATTERN.search(c.phrase)

    def test_sample_page_bounds(self, extractor, sample_html, sample_domain):
        for c in extractor.extract(sample_html, sample_domain)[1:]:
            assert 2 <= len(c.phrase.split()) <= 6
            assert not is_generic(c.phrase)

    def test_long_page_hits_cap(self, extractor):
        candidates = extractor.extract(LONG_PAGE, "acme-plumbing.co.uk")
        assert len(candidates) == 150
        assert candidates[0].phrase == "acme plumbing"

    @pytest.mark.parametrize("heading,expected", [
        ("Handmade chocolate cookie gifts", "handmade chocolate cookie gifts"),
        ("Plumbing blog insights for homeowners", "plumbing blog insights"),
        ("Cookie cutters and baking trays", "cookie cutters"),
    ])
    def test_marker_words_inside_content_kept(self, extractor, heading, expected):
        phrases = {c.phrase for c in extractor.extract(f"<h1>{heading}</h1>", "acme.com")}
        assert expected in phrases

    @pytest.mark.parametrize("heading", [
        "We use cookies to improve your experience",
        "Log in to manage bookings",
        "Copyright 2024 Acme Bakery Ltd",
        "Subscribe to our baking newsletter",
    ])
    def test_furniture_segments_dropped(self, extractor, heading):
        phrases = {c.phrase for c in extractor.extract(f"<h1>{heading}</h1>", "acme.com")}
        assert phrases == {"acme"}

    def test_service_location_combinations(self, extractor, sample_html, sample_domain):
        phrases = {c.phrase for c in extractor.extract(sample_html, sample_domain)}
        assert "plumbing services in leeds" in phrases

    def test_no_duplicates(self, extractor, sample_html, sample_domain):
        phrases = [c.phrase for c in extractor.extract(sample_html, sample_domain)]
        assert len(phrases) == len(set(phrases))

    def test_idempotent(self, extractor, sample_html, sample_domain):
        first = {c.phrase for c in extractor.extract(sample_html, sample_domain)}
        second = {c.phrase for c in extractor.extract(sample_html, sample_domain)}
        assert first == second

    def test_shared_extractor_keeps_no_call_state(self, extractor):
        extractor.extract("<h1>Garden design ideas</h1>", "acme.com")
        second = {c.phrase for c in extractor.extract("<h1>Boiler repair leeds</h1>", "other.com")}

        assert "garden design ideas" not in second
        assert "boiler repair leeds" in second
        assert vars(extractor) == {"max_candidates": 150, "max_paragraphs": 20}

    def test_cap(self, sample_html, sample_domain):
        candidates = CandidateExtractor(max_candidates=5).extract(sample_html, sample_domain)
        assert len(candidates) == 5
        assert candidates[0].phrase == "acme plumbing"

    def test_existing_keywords(self, extractor, sample_html, sample_domain):
        candidates = extractor.extract(
            sample_html,
            sample_domain,
            existing_keywords=["Plumber  Leeds", "the", "privacy policy"],
        )
        by_phrase = {c.phrase: c for c in candidates}
        assert by_phrase["plumber leeds"].source_section == SourceSection.EXISTING
        assert "the" not in by_phrase
        assert "privacy policy" not in by_phrase

    def test_business_type_filter(self, extractor, sample_html, sample_domain):
        terms = get_business_terms("Construction & Trades")
        candidates = extractor.extract(
            sample_html, sample_domain, business_type="Construction & Trades"
        )
        phrases = {c.phrase for c in candidates}
        assert "boiler repair" in phrases
        assert "fast boiler" not in phrases
        for c in candidates:
            if not c.is_branded:
                assert contains_term(c.phrase, terms)

    def test_unknown_business_type_uses_default_vocabulary(self):
        terms = get_business_terms("Underwater Basket Weaving")
        assert "company" in terms
        assert get_business_terms("LEGAL SERVICES") != terms

    @pytest.mark.parametrize("html", [
        "",
        "not html at all",
        "<html><head><title>Broken",
        "<p>unclosed <b>tags <<<>>> </div></span>",
        "<![CDATA[ hidden cdata text ]]><p>Garden design ideas</p>",
    ])
    def test_malformed_html_never_raises(self, extractor, html):
        candidates = extractor.extract(html, "example.com")
        assert candidates[0].phrase == "example"

    def test_empty_domain_has_no_brand(self, extractor):
        candidates = extractor.extract("<p>Garden design ideas for small spaces</p>", "")
        assert all(not c.is_branded for c in candidates)
        assert any(c.phrase == "garden design ideas" for c in candidates)
