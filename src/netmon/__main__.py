"""
Main entry point for the network monitor.

This module parses the configuration, sets up logging, opens the result store
and then either runs one batch of reachability checks or serves the history
web interface. The process exits with 1 only on startup failures; probe
outcomes never change the exit status.
"""

import asyncio
import logging
import sys
from typing import Optional, Sequence

import aiohttp

from netmon.config import NetmonContext, get_context
from netmon.config.constants import EXIT_FAIL
from netmon.config.http_config import get_http_session
from netmon.config.logging_config import configure_logging
from netmon.config.store_config import open_store
from netmon.contracts import ResultStore
from netmon.errors import StorageUnavailable
from netmon.prober.aiohttp_prober import AiohttpProber
from netmon.web.app import serve
from netmon.web.history_service import HistoryService
from netmon.worker import BatchWorker


async def main(context: NetmonContext) -> int:
    """
    Set up and run the network monitor.

    This function opens and migrates the result store, then:
    1. In serve mode, starts the history service until it is cancelled.
    2. Otherwise, creates an HTTP session and runs one batch of checks.
    All resources are released on the way out.

    Args:
        context: Configuration context containing all application settings.

    Returns:
        int: The process exit status.
    """
    logger: logging.Logger = logging.getLogger(__name__)
    logger.info("Starting application...")

    try:
        store: ResultStore = await open_store(context)
    except StorageUnavailable as e:
        logger.error(f"Result store unavailable: {e}")
        print(f"netmon: {e}", file=sys.stderr)
        return EXIT_FAIL
    logger.info("initialized: result store")

    try:
        if context.serve_mode:
            service = HistoryService(store, limit=context.history_limit)
            await serve(service, context.serve_host, context.serve_port)
        else:
            http_session: aiohttp.ClientSession = get_http_session(context)
            logger.info("configured: http_session")
            try:
                worker = BatchWorker(
                    prober=AiohttpProber(session=http_session, max_timeout=context.max_timeout),
                    store=store,
                )
                await worker.run(context.urls)
            finally:
                await http_session.close()
    except asyncio.CancelledError:
        logger.info("Application shutdown requested.")
    finally:
        # Ensure all resources are properly closed during shutdown
        logger.info("Shutting down resources...")
        await store.close()
        logger.info("Shutdown complete.")

    return 0


def run(argv: Optional[Sequence[str]] = None) -> int:
    """
    Console entry point: parse arguments, configure logging and run main().

    Args:
        argv: Arguments to parse; defaults to sys.argv[1:].

    Returns:
        int: The process exit status.
    """
    # Parse command-line arguments and environment variables
    context: NetmonContext = get_context(argv)

    # Configure logging based on the context
    try:
        configure_logging(context)
    except (ValueError, RuntimeError) as e:
        print(f"netmon: {e}", file=sys.stderr)
        return EXIT_FAIL

    try:
        # Run the main application
        return asyncio.run(main(context))
    except KeyboardInterrupt:
        logging.info("Shutdown initiated by user (Ctrl+C).")
        return 0


if __name__ == "__main__":
    sys.exit(run())
