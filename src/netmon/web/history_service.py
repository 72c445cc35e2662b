"""
Read-only views over the probe history.

The HistoryService turns store queries into payloads for the web layer: a
JSON-ready list for programmatic clients and a rendered HTML page for people.
It keeps no state between calls; every call queries the store again.
"""

import logging
import os
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader, select_autoescape

from netmon.config.constants import DEFAULT_HISTORY_LIMIT
from netmon.contracts import ResultStore, validate_limit

# Module logger
logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")

_templates = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
)


class HistoryService:
    """
    Exposes the most recent probe results held by a ResultStore.

    Store failures are raised as QueryFailure; the caller decides how to
    report them.
    """

    def __init__(self, store: ResultStore, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        """
        Args:
            store: The store to read from.
            limit: Number of results returned by each view.
        """
        self._store: ResultStore = store
        self._limit: int = validate_limit(limit)

    @property
    def limit(self) -> int:
        return self._limit

    async def get_status(self) -> List[Dict[str, Any]]:
        """
        Returns the most recent results as JSON-serializable mappings, newest first.

        Raises:
            QueryFailure: If the store cannot be read.
        """
        results = await self._store.recent_results(self._limit)
        return [result.to_json() for result in results]

    async def get_summary(self) -> str:
        """
        Returns the most recent results rendered as an HTML page.

        Raises:
            QueryFailure: If the store cannot be read.
        """
        results = await self._store.recent_results(self._limit)
        template = _templates.get_template("summary.html")
        return template.render(title="netmon: recent checks", results=results)

    async def get_daily(self) -> List[Dict[str, Any]]:
        """
        Returns per-day statistics from the summary view, newest day first.

        Raises:
            QueryFailure: If the store cannot be read.
        """
        summaries = await self._store.daily_summary(self._limit)
        return [summary.to_json() for summary in summaries]
