"""
API Endpoint for Keyword Discovery

FastAPI app that:
1. Receives a page (domain + raw HTML) for keyword discovery
2. Runs extraction, volume enrichment and budget-gated rank checks
3. Returns verified rankings and competitor overlap

One search budget tracker is shared by every request in the process, so
concurrent audits never exceed the daily rank-check quota between them.
"""

import logging
import sys
from datetime import datetime
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from foldscout import __version__
from foldscout.collector import SearchBudgetTracker
from foldscout.context.orchestrator import discover_keywords
from foldscout.utils import Settings, get_settings, normalize_domain

# Configure logging to stdout
logging.basicConfig(
    level=getattr(logging, get_settings().LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

# Quiet down chatty loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

app = FastAPI(
    title="FoldScout Keyword Discovery",
    description="Above-the-fold keyword discovery, rank verification and competitor overlap",
    version=__version__,
)


# ============================================================================
# DEPENDENCIES
# ============================================================================

@lru_cache
def get_budget_tracker() -> SearchBudgetTracker:
    """Process-wide daily search budget."""
    return SearchBudgetTracker(limit=get_settings().DAILY_SEARCH_LIMIT)


# ============================================================================
# REQUEST MODELS
# ============================================================================

class DiscoveryRequest(BaseModel):
    """Request to discover keywords for one page."""
    domain: str = Field(..., min_length=1, description="Audited domain, e.g. example.co.uk")
    html: str = Field(default="", description="Raw HTML of the page")
    country: Optional[str] = Field(
        default=None,
        min_length=2,
        max_length=2,
        description="Two-letter market code (defaults to DEFAULT_COUNTRY)",
    )
    existing_keywords: Optional[List[str]] = Field(
        default=None,
        description="Keywords already known for the site",
    )
    business_type: Optional[str] = Field(
        default=None,
        description="Business-type label, e.g. 'Legal Services'",
    )


# ============================================================================
# API ENDPOINTS
# ============================================================================

@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": __version__,
    }


@app.get("/api/keywords/budget")
async def budget_status(tracker: SearchBudgetTracker = Depends(get_budget_tracker)):
    """Current daily rank-check budget."""
    return tracker.snapshot().to_dict()


@app.post("/api/keywords/discover")
async def discover(
    request: DiscoveryRequest,
    tracker: SearchBudgetTracker = Depends(get_budget_tracker),
    settings: Settings = Depends(get_settings),
):
    """Run keyword discovery for a page and return the structured result."""
    domain = normalize_domain(request.domain)
    if not domain or "." not in domain:
        raise HTTPException(status_code=422, detail=f"Invalid domain: {request.domain}")

    logger.info(f"Discovery requested for {domain} ({len(request.html)} bytes of HTML)")

    result = await discover_keywords(
        request.html,
        domain,
        country=request.country.lower() if request.country else None,
        existing_keywords=request.existing_keywords,
        business_type=request.business_type,
        tracker=tracker,
        settings=settings,
    )
    return result.to_dict()


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.keywords:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
