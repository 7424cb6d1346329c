#!/usr/bin/env python3
"""
Keyword Discovery Runner

Runs one discovery pass against a saved or live page and prints the
result as JSON.

Usage:
    # Set environment variables first (or put them in .env):
    export SERPER_API_KEY=your_key
    export KEYWORDS_EVERYWHERE_API_KEY=your_key

    # From a saved page:
    python scripts/run_discovery.py example.co.uk --html page.html

    # Fetch the homepage (a convenience for manual runs; in production the
    # crawler supplies the HTML and the pipeline never downloads pages):
    python scripts/run_discovery.py example.co.uk --fetch \
        --country gb \
        --business-type "Legal Services"
"""

import asyncio
import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx
from dotenv import load_dotenv

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


async def fetch_homepage(domain: str, timeout: float = 30.0) -> str:
    """Download the homepage HTML of a domain. Only used by --fetch."""
    async with httpx.AsyncClient(follow_redirects=True, timeout=timeout) as client:
        response = await client.get(f"https://{domain}/")
        response.raise_for_status()
        return response.text


async def run_discovery(
    domain: str,
    html_path: str = None,
    fetch: bool = False,
    country: str = None,
    business_type: str = None,
    existing_keywords: list = None,
):
    """Run keyword discovery and return the result dict."""

    load_dotenv()

    from foldscout.context.orchestrator import discover_keywords
    from foldscout.utils import get_settings

    settings = get_settings()

    if not settings.SERPER_API_KEY:
        logger.warning("SERPER_API_KEY not set - rankings will not be verified")
    if not settings.KEYWORDS_EVERYWHERE_API_KEY:
        logger.warning("KEYWORDS_EVERYWHERE_API_KEY not set - volumes will be unknown")

    if html_path:
        html = Path(html_path).read_text(encoding="utf-8", errors="replace")
    elif fetch:
        logger.info(f"Fetching homepage of {domain}...")
        try:
            html = await fetch_homepage(domain, timeout=settings.API_TIMEOUT)
        except httpx.HTTPError as e:
            logger.error(f"Could not fetch {domain}: {e}")
            return None
    else:
        logger.error("Provide --html or --fetch")
        return None

    result = await discover_keywords(
        html,
        domain,
        country=country,
        existing_keywords=existing_keywords,
        business_type=business_type,
        settings=settings,
    )

    print("\n" + "=" * 60)
    print(f"KEYWORD DISCOVERY: {result.domain}")
    print("=" * 60)
    print(f"Method:        {result.discovery_method.value}")
    print(f"Candidates:    {result.candidates_found}")
    print(f"Verified:      {result.verified_count}")
    print(f"Above fold:    {len(result.above_fold_keywords)}")
    print(f"Competitors:   {len(result.competitors.competitors)}")
    print(f"Budget:        {result.budget_used} used, {result.budget_remaining} remaining")
    for warning in result.warnings:
        print(f"Warning:       {warning}")

    return result.to_dict()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Discover above-the-fold keywords and competitors for a domain"
    )
    parser.add_argument(
        "domain",
        help="Domain to analyze (e.g., example.co.uk)"
    )
    parser.add_argument(
        "--html",
        default=None,
        help="Path to a saved HTML page"
    )
    parser.add_argument(
        "--fetch",
        action="store_true",
        help="Fetch the homepage instead of reading a file"
    )
    parser.add_argument(
        "--country",
        default=None,
        help="Two-letter market code (default: DEFAULT_COUNTRY)"
    )
    parser.add_argument(
        "--business-type",
        default=None,
        help="Business-type label for relevance filtering"
    )
    parser.add_argument(
        "--keyword",
        action="append",
        dest="keywords",
        default=None,
        help="Known keyword to include (repeatable)"
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Write the JSON result to this file"
    )

    args = parser.parse_args()

    result = asyncio.run(run_discovery(
        domain=args.domain,
        html_path=args.html,
        fetch=args.fetch,
        country=args.country,
        business_type=args.business_type,
        existing_keywords=args.keywords,
    ))

    if result is None:
        sys.exit(1)

    output = json.dumps(result, indent=2)
    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"\nResult saved to: {args.output}")
    else:
        print(output)


if __name__ == "__main__":
    main()
