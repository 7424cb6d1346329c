"""
Search Budget Tracker

Daily quota for the rank-check API. One tracker is shared by every
component that makes ranking calls; the window resets when the calendar
date changes.
"""

import logging
import threading
from dataclasses import replace
from datetime import date
from typing import Callable, Optional

from foldscout.context.models import SearchBudget

logger = logging.getLogger(__name__)


class SearchBudgetTracker:
    """
    Thread-safe daily call budget.

    Usage:
        tracker = SearchBudgetTracker(limit=100)
        if tracker.reserve(1):
            ...  # make one ranking call
    """

    def __init__(self, limit: int = 100, today: Optional[Callable[[], date]] = None):
        if limit < 0:
            raise ValueError("Budget limit cannot be negative")

        self._today = today or date.today
        self._lock = threading.Lock()
        self._budget = SearchBudget(limit=limit, used=0, window_start_date=self._today())

    @property
    def limit(self) -> int:
        return self._budget.limit

    def _roll_over(self) -> None:
        # Caller holds the lock
        current = self._today()
        if current != self._budget.window_start_date:
            logger.info(
                f"Search budget window reset ({self._budget.window_start_date} -> {current}), "
                f"{self._budget.used}/{self._budget.limit} used in previous window"
            )
            self._budget.used = 0
            self._budget.window_start_date = current

    def reserve(self, n: int = 1) -> int:
        """
        Reserve up to n calls.

        Returns:
            Number of calls granted, between 0 and n
        """
        if n <= 0:
            return 0

        with self._lock:
            self._roll_over()
            granted = min(n, self._budget.remaining)
            self._budget.used += granted

        if granted < n:
            logger.warning(f"Search budget exhausted: requested {n}, granted {granted}")
        return granted

    def remaining(self) -> int:
        """Calls left in the current window."""
        with self._lock:
            self._roll_over()
            return self._budget.remaining

    def exhaust(self) -> None:
        """Mark the rest of today's window as spent."""
        with self._lock:
            self._roll_over()
            if self._budget.remaining:
                logger.warning(
                    f"Marking search budget exhausted with {self._budget.remaining} calls unused"
                )
            self._budget.used = self._budget.limit

    def snapshot(self) -> SearchBudget:
        """Copy of the current budget state."""
        with self._lock:
            self._roll_over()
            return replace(self._budget)
