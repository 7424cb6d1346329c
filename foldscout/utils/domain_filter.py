"""
Domain Utilities

Shared domain logic used by rank verification and competitor analysis:
- Host normalization (scheme, www., port, path stripped)
- The subdomain-aware match rule used to find the audited site in SERPs
- Brand label derivation from the registrable domain
- Platform exclusion, so sites like Facebook or Wikipedia are never
  reported as competitors
"""

import re
import logging
from typing import Optional, Set
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


# =============================================================================
# EXCLUDED DOMAINS - Platforms that rank everywhere but never compete
# =============================================================================

# Social Media Platforms
SOCIAL_MEDIA = {
    "facebook.com", "fb.com",
    "twitter.com", "x.com",
    "instagram.com",
    "linkedin.com",
    "tiktok.com",
    "pinterest.com", "pinterest.co.uk",
    "reddit.com",
    "tumblr.com",
    "threads.net",
}

# Video & Media Platforms
VIDEO_PLATFORMS = {
    "youtube.com", "youtu.be",
    "vimeo.com",
    "dailymotion.com",
    "twitch.tv",
}

# Tech Giants & General Platforms
TECH_GIANTS = {
    "google.com", "google.co.uk",
    "apple.com",
    "microsoft.com", "bing.com",
    "amazon.com", "amazon.co.uk",
}

# E-commerce Marketplaces (generic, not niche competitors)
MARKETPLACES = {
    "ebay.com", "ebay.co.uk",
    "etsy.com",
    "aliexpress.com", "alibaba.com",
    "gumtree.com",
}

# Reference & Q&A Sites
REFERENCE_SITES = {
    "wikipedia.org", "wikihow.com",
    "britannica.com",
    "quora.com",
    "stackoverflow.com",
    "medium.com",
}

# Review & Directory Sites
REVIEW_DIRECTORIES = {
    "yelp.com", "yelp.co.uk",
    "tripadvisor.com", "tripadvisor.co.uk",
    "trustpilot.com",
    "yell.com",
    "checkatrade.com",
    "glassdoor.com", "glassdoor.co.uk",
    "indeed.com", "indeed.co.uk",
    "companieshouse.gov.uk",
}

# Government & Official Sites (patterns)
GOVERNMENT_PATTERNS = {
    ".gov",
    ".gov.",
    ".nhs.uk",
    ".police.uk",
}

EXCLUDED_DOMAINS: Set[str] = (
    SOCIAL_MEDIA |
    VIDEO_PLATFORMS |
    TECH_GIANTS |
    MARKETPLACES |
    REFERENCE_SITES |
    REVIEW_DIRECTORIES
)

# Second-level suffixes where the registrable label sits one level deeper
MULTI_PART_SUFFIXES = {
    "co.uk", "org.uk", "me.uk", "ltd.uk", "plc.uk", "ac.uk",
    "com.au", "net.au", "org.au",
    "co.nz", "org.nz",
    "co.za",
    "com.br",
    "co.jp",
    "co.in",
    "com.sg",
}


# =============================================================================
# NORMALIZATION & MATCHING
# =============================================================================


def normalize_domain(value: Optional[str]) -> str:
    """
    Reduce a URL or host string to a bare, lower-case host.

    "https://www.Example.com:443/path?q=1" -> "example.com"
    """
    if not value:
        return ""

    host = value.strip().lower()
    host = re.sub(r"^[a-z][a-z0-9+.-]*://", "", host)
    host = host.split("/", 1)[0].split("?", 1)[0].split("#", 1)[0]
    host = host.rsplit("@", 1)[-1]
    host = host.split(":", 1)[0]
    host = host.rstrip(".")

    if host.startswith("www."):
        host = host[4:]

    return host


def extract_domain(url: Optional[str]) -> str:
    """Extract the normalized host of a result URL."""
    if not url:
        return ""
    try:
        parsed = urlparse(url if "://" in url else f"http://{url}")
        return normalize_domain(parsed.hostname or "")
    except ValueError:
        return normalize_domain(url)


def domains_match(candidate: Optional[str], target: Optional[str]) -> bool:
    """
    Check whether two hosts refer to the same site.

    Both sides are normalized first. A match is an exact host match or one
    host being a subdomain of the other, so "blog.example.com" matches
    "example.com" while "notexample.com" does not.
    """
    a = normalize_domain(candidate)
    b = normalize_domain(target)

    if not a or not b:
        return False

    return a == b or a.endswith("." + b) or b.endswith("." + a)


def registrable_label(domain: Optional[str]) -> str:
    """
    Get the label directly left of the public suffix.

    "www.shop.example.co.uk" -> "example", "acme-widgets.com" -> "acme-widgets"
    """
    host = normalize_domain(domain)
    if not host:
        return ""

    parts = host.split(".")
    if len(parts) == 1:
        return parts[0]

    if len(parts) >= 3 and ".".join(parts[-2:]) in MULTI_PART_SUFFIXES:
        return parts[-3]

    return parts[-2]


def brand_token(domain: Optional[str]) -> str:
    """Brand token used as a keyword: the registrable label with separators as spaces."""
    label = registrable_label(domain)
    return re.sub(r"[-_]+", " ", label).strip()


# =============================================================================
# PLATFORM EXCLUSION
# =============================================================================


def is_excluded_domain(domain: Optional[str]) -> bool:
    """
    Check if a domain should be excluded from competitor analysis.

    Uses multiple matching strategies:
    1. Exact match against known platforms
    2. Subdomain matching (uk.linkedin.com -> linkedin.com)
    3. Government TLD patterns

    Args:
        domain: Domain name to check

    Returns:
        True if domain should be excluded, False if it's a valid competitor candidate
    """
    domain_lower = normalize_domain(domain)
    if not domain_lower:
        return True

    if domain_lower in EXCLUDED_DOMAINS:
        return True

    for excluded in EXCLUDED_DOMAINS:
        if domain_lower.endswith("." + excluded):
            return True

    for pattern in GOVERNMENT_PATTERNS:
        if pattern in domain_lower:
            return True

    return False


def get_exclusion_reason(domain: str) -> Optional[str]:
    """
    Get the reason why a domain is excluded.

    Args:
        domain: Domain to check

    Returns:
        Reason string if excluded, None if valid competitor
    """
    domain_lower = normalize_domain(domain)
    if not domain_lower:
        return "Empty domain"

    categories = [
        (SOCIAL_MEDIA, "Social media platform"),
        (VIDEO_PLATFORMS, "Video/media platform"),
        (TECH_GIANTS, "Technology platform"),
        (MARKETPLACES, "E-commerce marketplace"),
        (REFERENCE_SITES, "Reference/educational site"),
        (REVIEW_DIRECTORIES, "Review/directory site"),
    ]
    for domains, reason in categories:
        if domain_lower in domains or any(domain_lower.endswith("." + d) for d in domains):
            return reason

    for pattern in GOVERNMENT_PATTERNS:
        if pattern in domain_lower:
            return "Government/official site"

    return None
