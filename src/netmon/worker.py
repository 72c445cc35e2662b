"""
Batch worker for the network monitor.

This module provides the BatchWorker class, which drives one batch run: each
configured URL is probed, the result is saved and the outcome is printed,
strictly one URL after another.
"""

import logging
import sys
from typing import List, Optional, Sequence, TextIO

from .contracts import ProbeExecutor, ResultStore
from .domain import ProbeResult
from .errors import PersistenceError


def format_outcome(result: ProbeResult) -> str:
    """
    Renders the one-line, user-facing summary of a probe.

    Args:
        result: The probe outcome, saved or not.

    Returns:
        str: e.g. 'https://example.com/ is up (200, 12.345 ms)'.
    """
    timing = f"({result.status_code}, {result.duration_millis:.3f} ms)"
    if result.success:
        return f"{result.url} is up {timing}"
    return f"{result.url} is down! {result.error_text} {timing}"


class BatchWorker:
    """
    Probes a list of URLs sequentially, persisting and reporting each result.

    Probe failures and storage write failures never stop the batch; each URL
    is reported as soon as it has been checked.
    """

    def __init__(
        self,
        prober: ProbeExecutor,
        store: ResultStore,
        out: Optional[TextIO] = None,
    ) -> None:
        """
        Initializes a new BatchWorker instance.

        Args:
            prober: Component that performs the reachability checks.
            store: Component that records the results.
            out: Stream receiving the per-URL report lines, stdout by default.
        """
        self._prober: ProbeExecutor = prober
        self._store: ResultStore = store
        self._out: TextIO = out if out is not None else sys.stdout
        self._logger: logging.Logger = logging.getLogger(__name__)

    async def run(self, urls: Sequence[str]) -> List[ProbeResult]:
        """
        Checks every URL once, in the given order.

        Args:
            urls: The URLs to probe.

        Returns:
            List[ProbeResult]: One result per URL, carrying its id when it was saved.
        """
        self._logger.info(f"Starting batch of {len(urls)} checks.")
        results: List[ProbeResult] = []

        for url in urls:
            result = await self._prober.check(url)

            try:
                result = await self._store.save(result)
            except PersistenceError as e:
                # The result is still reported, only its history entry is lost
                self._logger.error(f"Could not record result for {url}: {e}")

            print(format_outcome(result), file=self._out, flush=True)
            results.append(result)

        failed = sum(1 for result in results if not result.success)
        self._logger.info(f"Batch complete: {len(results) - failed} up, {failed} down.")
        return results
