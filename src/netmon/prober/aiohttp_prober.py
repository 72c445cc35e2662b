"""
Probe executor implementation using the aiohttp library.

This module provides an implementation of the ProbeExecutor interface that
issues a HEAD request with aiohttp. It handles timing, failure capture and the
release of the response on every exit path.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Optional

import aiohttp

from netmon.contracts import ProbeExecutor
from netmon.domain import SUCCESS_STATUS_CODE, ProbeResult
from netmon.errors import NonSuccessStatus, TransportError

# Module logger
logger = logging.getLogger(__name__)

# Maximum number of body bytes kept in the error text of a failed probe
MAX_ERROR_BODY_BYTES = 512


def reason_phrase(status_code: int, fallback: Optional[str] = None) -> str:
    """
    Returns the standard reason phrase for an HTTP status code.

    Args:
        status_code: The HTTP status code.
        fallback: The reason sent by the server, used for non-standard codes.

    Returns:
        str: The reason phrase, e.g. "Not Found".
    """
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return fallback or "Unknown Status"


class AiohttpProber(ProbeExecutor):
    """
    A concrete implementation of ProbeExecutor using the aiohttp library.

    Each call performs exactly one HEAD request through a shared
    aiohttp ClientSession. Retries, if wanted, belong to the caller.
    """

    def __init__(self, session: aiohttp.ClientSession, max_timeout: float) -> None:
        """
        Initializes the prober with a shared aiohttp ClientSession.

        Args:
            session: An active aiohttp.ClientSession to be used for requests.
            max_timeout: Total time in seconds allowed for one request.
        """
        self._session: aiohttp.ClientSession = session
        self._timeout: aiohttp.ClientTimeout = aiohttp.ClientTimeout(total=max_timeout)

    async def check(self, url: str) -> ProbeResult:
        """
        Sends a HEAD request to the URL and records the outcome.

        The elapsed time covers the whole round trip, from just before the
        request is sent until the response is received and released or the
        failure is detected.

        Args:
            url: The address to probe.

        Returns:
            ProbeResult: An unsaved result. Transport failures have status 0;
                non-200 responses carry the reason phrase and a body snippet.
        """
        logger.debug(f"Starting probe for: {url}")
        created_at: datetime = datetime.now(timezone.utc)
        status_code: int = 0
        error: Optional[Exception] = None
        start: float = time.perf_counter()

        try:
            async with self._session.request(
                "HEAD", url, allow_redirects=True, timeout=self._timeout
            ) as response:
                status_code = response.status
                if status_code != SUCCESS_STATUS_CODE:
                    error = await self._describe_failure(response)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            status_code = 0
            error = TransportError(url, e)
            logger.debug(f"Transport failure for {url}: {e!r}")

        duration_millis: float = (time.perf_counter() - start) * 1000

        if error is None:
            logger.debug(f"{url} answered {status_code} in {duration_millis:.3f}ms")
        else:
            logger.info(f"Probe of {url} failed: {error}")

        return ProbeResult(
            url=url,
            created_at=created_at,
            status_code=status_code,
            success=error is None,
            error_text="" if error is None else str(error),
            duration_millis=duration_millis,
        )

    @staticmethod
    async def _describe_failure(response: aiohttp.ClientResponse) -> NonSuccessStatus:
        """
        Builds the failure for a non-200 response, reading a bounded body snippet.

        A body read failure is recorded in the message instead of being raised.
        """
        reason = reason_phrase(response.status, response.reason)
        try:
            raw: bytes = await response.content.read(MAX_ERROR_BODY_BYTES)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            return NonSuccessStatus(response.status, reason, read_error=e)
        return NonSuccessStatus(
            response.status, reason, content=raw.decode("utf-8", errors="replace")
        )
