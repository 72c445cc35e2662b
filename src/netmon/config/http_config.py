"""
HTTP client configuration module for the network monitor.

This module provides functionality to create and configure the HTTP client
session used by the prober.
"""

import logging

import aiohttp

from netmon.config.netmon_context import NetmonContext

# Module logger
logger = logging.getLogger(__name__)


def get_http_session(context: NetmonContext) -> aiohttp.ClientSession:
    """
    Create and configure an HTTP client session based on the provided configuration.

    A single session is shared by every probe of a run. The session-wide
    timeout matches the per-probe timeout so a hung host cannot block longer.

    Args:
        context: Configuration context containing HTTP client settings.

    Returns:
        aiohttp.ClientSession: A configured HTTP client session.
    """
    logger.debug(f"Creating HTTP session with a {context.max_timeout}s timeout")
    return aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=context.max_timeout))
