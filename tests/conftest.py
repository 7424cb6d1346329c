"""
Pytest Configuration and Shared Fixtures

Provides common fixtures and configuration for all test modules.
"""

import json
from datetime import date
from typing import Callable, Dict, List
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from foldscout.collector.budget import SearchBudgetTracker
from foldscout.context.models import SerpResult, SerpResultSet


# ============================================================================
# Page Fixtures
# ============================================================================

@pytest.fixture
def sample_html() -> str:
    """Small plumbing-business homepage with noise the extractor must ignore."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Acme Plumbing | Emergency Plumbing Services Leeds</title>
        <meta name="description" content="Fast boiler repair and bathroom installation across Leeds and Yorkshire.">
        <meta property="og:title" content="Acme Plumbing - Trusted Local Plumbers">
        <script>var tracking = "buy cheap pills online";</script>
        <style>.hero { color: red; }</style>
    </head>
    <body>
        <!-- hidden comment phrase -->
        <nav><a href="/contact">Contact Us</a></nav>
        <h1>Emergency Plumbing Services</h1>
        <h2>Boiler Repair Specialists</h2>
        <p>Acme Plumbing provides boiler repair and central heating installation in Leeds.</p>
        <p>Read more about our privacy policy.</p>
        <img src="team.jpg" alt="Bathroom installation team">
        <noscript>enable javascript please</noscript>
        <footer><p>Copyright 2024 Acme Plumbing. All rights reserved.</p></footer>
    </body>
    </html>
    """


@pytest.fixture
def sample_domain() -> str:
    return "www.acme-plumbing.co.uk"


# ============================================================================
# Budget Fixtures
# ============================================================================

class FakeClock:
    """Mutable date source for budget rollover tests."""

    def __init__(self, today: date):
        self.today = today

    def __call__(self) -> date:
        return self.today


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(date(2026, 3, 14))


@pytest.fixture
def make_tracker(clock) -> Callable[[int], SearchBudgetTracker]:
    """Factory for trackers bound to the fake clock."""
    def _make(limit: int = 100) -> SearchBudgetTracker:
        return SearchBudgetTracker(limit=limit, today=clock)
    return _make


# ============================================================================
# SERP Fixtures
# ============================================================================

def make_serp(keyword: str, domains: List[str]) -> SerpResultSet:
    """Result set with one row per domain, positions starting at 1."""
    return SerpResultSet(
        keyword=keyword,
        results=[
            SerpResult(
                position=i,
                domain=d,
                url=f"https://{d}/page-{i}",
                title=f"{d} result",
                snippet=f"Snippet for {keyword}",
            )
            for i, d in enumerate(domains, start=1)
        ],
    )


@pytest.fixture
def serp_factory():
    return make_serp


@pytest.fixture
def mock_rank_client():
    """
    Rank-check client returning canned SERPs per keyword.

    Keywords without a canned SERP get a page without the audited domain.
    """
    serps: Dict[str, List[str]] = {}

    async def _search(keyword, num=100, gl="gb", hl="en"):
        return make_serp(keyword, serps.get(keyword, ["unrelated-site.com"]))

    client = MagicMock()
    client.search = AsyncMock(side_effect=_search)
    client.serps = serps
    return client


def serper_payload(rows: List[Dict]) -> Dict:
    """Serper response body for organic rows."""
    return {"searchParameters": {"q": "test"}, "organic": rows}


def mock_http_client(handler) -> httpx.AsyncClient:
    """httpx client whose requests are answered by handler."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def request_json(request: httpx.Request) -> Dict:
    return json.loads(request.content)


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
