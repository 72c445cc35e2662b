"""
Core interfaces for the network monitor.

This module defines the abstract base classes that separate probe execution
from result storage. The batch worker and the history service depend only on
these contracts, so a storage backend or HTTP client can be swapped through
configuration without touching the callers.
"""

import abc
from typing import List

from .domain import DailySummary, ProbeResult

# Upper bound on the number of rows a single history query may return.
MAX_RECENT_LIMIT = 100


def validate_limit(limit: int) -> int:
    """
    Checks that a history limit is a small positive integer.

    Args:
        limit: The requested number of rows.

    Returns:
        int: The same limit, unchanged.

    Raises:
        ValueError: If the limit is not an int in 1..MAX_RECENT_LIMIT.
    """
    # bool is an int subclass but never a meaningful limit
    if not isinstance(limit, int) or isinstance(limit, bool):
        raise ValueError(f"limit must be an integer, got {type(limit).__name__}.")
    if not 1 <= limit <= MAX_RECENT_LIMIT:
        raise ValueError(f"limit must be between 1 and {MAX_RECENT_LIMIT}, got {limit}.")
    return limit


class ProbeExecutor(abc.ABC):
    """
    Abstract interface for a component that checks whether one URL is reachable.

    Its responsibility is to encapsulate the network I/O for a single URL and
    return a structured result. Network failures are part of the result, not
    exceptions.
    """

    @abc.abstractmethod
    async def check(self, url: str) -> ProbeResult:
        """
        Performs a single reachability check against the given URL.

        Args:
            url: The address to probe.

        Returns:
            ProbeResult: The unsaved outcome of the check (its id is None).
        """
        pass


class ResultStore(abc.ABC):
    """
    Abstract interface for the durable, append-only log of probe results.

    Implementations normalize timestamps internally, so callers only ever
    receive timezone-aware UTC datetimes regardless of the backend.
    """

    @abc.abstractmethod
    async def migrate(self) -> None:
        """
        Brings the schema up to date.

        Safe to call on every startup: already applied steps are skipped and
        existing rows are never touched.

        Raises:
            StorageUnavailable: If the schema cannot be applied.
        """
        pass

    @abc.abstractmethod
    async def save(self, result: ProbeResult) -> ProbeResult:
        """
        Inserts a new result.

        Args:
            result: An unsaved result (its id must be None).

        Returns:
            ProbeResult: The same result carrying its store-generated id.

        Raises:
            ValueError: If the result already has an id.
            PersistenceError: If the row could not be written.
        """
        pass

    @abc.abstractmethod
    async def recent_results(self, limit: int) -> List[ProbeResult]:
        """
        Returns the most recent results, newest first.

        Args:
            limit: Maximum number of rows, between 1 and MAX_RECENT_LIMIT.

        Returns:
            List[ProbeResult]: At most 'limit' results ordered by creation time
                descending; empty if nothing has been recorded.

        Raises:
            ValueError: If the limit is out of bounds.
            QueryFailure: If the rows could not be read.
        """
        pass

    @abc.abstractmethod
    async def daily_summary(self, days: int) -> List[DailySummary]:
        """
        Returns per-day aggregates from the summary view, newest day first.

        Args:
            days: Maximum number of days, between 1 and MAX_RECENT_LIMIT.

        Raises:
            ValueError: If the limit is out of bounds.
            QueryFailure: If the view could not be read.
        """
        pass

    @abc.abstractmethod
    async def close(self) -> None:
        """Releases any resources held by the store."""
        pass
