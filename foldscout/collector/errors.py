"""
Collector Errors

Exceptions raised by the rank-check and volume API clients. Services catch
them at the per-keyword boundary; nothing here is fatal to a run.
"""

from typing import Any, Optional


class RankCheckError(Exception):
    """Base exception for rank-check API errors."""
    def __init__(self, message: str, status_code: Optional[int] = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class QuotaExhaustedError(RankCheckError):
    """The API refused the call for quota or auth reasons (HTTP 429/403)."""


class NetworkFailureError(RankCheckError):
    """Timeout, connection failure or unexpected HTTP status."""


class MalformedResponseError(NetworkFailureError):
    """Response body could not be decoded or lacks the organic results."""


class VolumeLookupError(Exception):
    """A keyword-volume batch request failed."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
