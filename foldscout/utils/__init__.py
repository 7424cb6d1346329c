"""Utility modules for FoldScout."""

from .config import Settings, get_settings
from .domain_filter import (
    brand_token,
    domains_match,
    extract_domain,
    get_exclusion_reason,
    is_excluded_domain,
    normalize_domain,
    registrable_label,
)

__all__ = [
    "Settings",
    "get_settings",
    # Domain helpers
    "brand_token",
    "domains_match",
    "extract_domain",
    "get_exclusion_reason",
    "is_excluded_domain",
    "normalize_domain",
    "registrable_label",
]
