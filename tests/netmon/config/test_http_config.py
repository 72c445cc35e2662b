"""
Unit tests for the HTTP client configuration module.

The tests follow the Arrange-Act-Assert (AAA) pattern.
"""

import aiohttp
import pytest

from netmon.config.constants import DEFAULT_URLS
from netmon.config.http_config import get_http_session
from netmon.config.netmon_context import NetmonContext


@pytest.mark.asyncio
async def test_get_http_session_should_apply_max_timeout() -> None:
    # Arrange
    context = NetmonContext(
        urls=DEFAULT_URLS,
        serve_port=None,
        serve_host="localhost",
        db_path="/tmp/netmon.db",
        dsn="",
        db_pool_size=5,
        max_timeout=7,
        history_limit=10,
        run_id="test-run",
        logging_type="dev",
        logging_config_file="",
    )

    # Act
    session = get_http_session(context)

    # Assert
    try:
        assert isinstance(session, aiohttp.ClientSession)
        assert session.timeout.total == 7
    finally:
        await session.close()
