"""
Domain models for the network monitor.

This module defines the core data structures used throughout the application:
the result of a single reachability probe and the per-day aggregate read from
the store's summary view.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, NamedTuple, Optional

# The single HTTP status that counts as a successful probe.
SUCCESS_STATUS_CODE = 200


class ProbeResult(NamedTuple):
    """
    The outcome of a single reachability check against one URL.

    Results are immutable. The store assigns the identifier on the first
    successful save and hands back a copy carrying it.

    Attributes:
        url: The target address that was checked.
        created_at: Timezone-aware time at which the probe was initiated.
        status_code: The HTTP status received, or 0 if no response arrived.
        success: True only if a response arrived with status 200.
        error_text: Empty on success, otherwise a description of the failure.
        duration_millis: Wall-clock time of the whole request in milliseconds.
        id: Store-generated identifier, None until persisted.
    """

    url: str
    created_at: datetime
    status_code: int
    success: bool
    error_text: str
    duration_millis: float
    id: Optional[int] = None

    def with_id(self, result_id: int) -> "ProbeResult":
        return self._replace(id=result_id)

    def to_json(self) -> Dict[str, Any]:
        """
        Returns a JSON-serializable mapping using the public field names.

        Returns:
            Dict[str, Any]: The result with 'createdAt' rendered as ISO-8601 UTC.
        """
        return {
            "id": self.id,
            "url": self.url,
            "createdAt": self.created_at.astimezone(timezone.utc).isoformat(),
            "statusCode": self.status_code,
            "success": self.success,
            "errorText": self.error_text,
            "durationMillis": self.duration_millis,
        }


class DailySummary(NamedTuple):
    """
    One row of the daily summary view: probe statistics for a UTC calendar day.

    Attributes:
        day: The calendar day (UTC).
        total: Number of probes recorded on that day.
        success_count: Number of successful probes.
        failure_count: Number of failed probes.
        avg_duration_millis: Mean probe duration, None if no duration was recorded.
        max_duration_millis: Longest probe duration, None if no duration was recorded.
    """

    day: date
    total: int
    success_count: int
    failure_count: int
    avg_duration_millis: Optional[float]
    max_duration_millis: Optional[float]

    def to_json(self) -> Dict[str, Any]:
        return {
            "day": self.day.isoformat(),
            "total": self.total,
            "successCount": self.success_count,
            "failureCount": self.failure_count,
            "avgDurationMillis": self.avg_duration_millis,
            "maxDurationMillis": self.max_duration_millis,
        }
