"""
FoldScout - Data Collection Package

External API access for the discovery pipeline:
- Daily search budget shared by every ranking call
- Serper client for Google organic results
- Keywords Everywhere volume enrichment
- Budget-gated rank verification
"""

from .budget import SearchBudgetTracker
from .client import SerperClient, parse_organic_results
from .errors import (
    MalformedResponseError,
    NetworkFailureError,
    QuotaExhaustedError,
    RankCheckError,
    VolumeLookupError,
)
from .rank_verification import RankVerificationService
from .volume import VolumeEnrichmentClient

__all__ = [
    # Budget
    "SearchBudgetTracker",

    # Clients
    "SerperClient",
    "parse_organic_results",
    "VolumeEnrichmentClient",

    # Verification
    "RankVerificationService",

    # Errors
    "RankCheckError",
    "QuotaExhaustedError",
    "NetworkFailureError",
    "MalformedResponseError",
    "VolumeLookupError",
]
