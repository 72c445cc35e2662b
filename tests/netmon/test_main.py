"""
Unit tests for the application entry point.

The store, HTTP session, worker and web server are patched so that the tests
exercise only the wiring done by main() and run().
"""

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from netmon.__main__ import main, run
from netmon.config.constants import DEFAULT_URLS
from netmon.config.netmon_context import NetmonContext
from netmon.domain import ProbeResult
from netmon.errors import StorageUnavailable


def make_context(serve_port: Optional[int] = None, db_path: str = "/tmp/netmon.db") -> NetmonContext:
    return NetmonContext(
        urls=DEFAULT_URLS,
        serve_port=serve_port,
        serve_host="localhost",
        db_path=db_path,
        dsn="",
        db_pool_size=5,
        max_timeout=10,
        history_limit=3,
        run_id="test-run",
        logging_type="dev",
        logging_config_file="",
    )


@pytest.mark.asyncio
async def test_main_should_fail_when_store_unavailable(capsys: pytest.CaptureFixture) -> None:
    # Arrange
    with patch(
        "netmon.__main__.open_store",
        new=AsyncMock(side_effect=StorageUnavailable("unable to open database file")),
    ):
        # Act
        status = await main(make_context())

    # Assert
    assert status == 1
    assert "unable to open database file" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_main_should_run_batch_and_release_resources() -> None:
    # Arrange
    store = AsyncMock()
    session = MagicMock()
    session.close = AsyncMock()
    worker = MagicMock()
    worker.run = AsyncMock(return_value=[])

    with patch("netmon.__main__.open_store", new=AsyncMock(return_value=store)), patch(
        "netmon.__main__.get_http_session", return_value=session
    ), patch("netmon.__main__.BatchWorker", return_value=worker) as mock_worker_cls, patch(
        "netmon.__main__.AiohttpProber"
    ) as mock_prober_cls:
        # Act
        status = await main(make_context())

    # Assert
    assert status == 0
    mock_prober_cls.assert_called_once_with(session=session, max_timeout=10)
    mock_worker_cls.assert_called_once_with(prober=mock_prober_cls.return_value, store=store)
    worker.run.assert_awaited_once_with(DEFAULT_URLS)
    session.close.assert_awaited_once()
    store.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_main_should_serve_history_until_cancelled() -> None:
    # Arrange
    store = AsyncMock()

    with patch("netmon.__main__.open_store", new=AsyncMock(return_value=store)), patch(
        "netmon.__main__.serve", new=AsyncMock(side_effect=asyncio.CancelledError())
    ) as mock_serve, patch("netmon.__main__.get_http_session") as mock_session:
        # Act
        status = await main(make_context(serve_port=8080))

    # Assert
    assert status == 0
    service, host, port = mock_serve.await_args.args
    assert service.limit == 3
    assert (host, port) == ("localhost", 8080)
    mock_session.assert_not_called()
    store.close.assert_awaited_once()


def test_run_should_fail_on_invalid_logging_setup(capsys: pytest.CaptureFixture) -> None:
    # Act
    status = run(["--logging-type", "custom", "--db-path", "/tmp/netmon.db"])

    # Assert
    assert status == 1
    assert "Custom logging configuration file must be provided." in capsys.readouterr().err


def test_run_should_exit_with_failure_on_bad_arguments() -> None:
    with pytest.raises(SystemExit) as exc_info:
        run(["--serve", "not-a-port"])

    assert exc_info.value.code == 1


def test_run_should_record_one_batch(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    """
    Tests a full batch run against a real SQLite file with a patched prober.
    """
    # Arrange
    db_path = tmp_path / "netmon.db"
    prober = MagicMock()

    async def check(url: str) -> ProbeResult:
        return ProbeResult(url, datetime.now(timezone.utc), 200, True, "", 1.0)

    prober.check = AsyncMock(side_effect=check)

    with patch("netmon.__main__.AiohttpProber", return_value=prober), patch(
        "netmon.__main__.configure_logging"
    ):
        # Act
        status = run(["--url", "https://example.com/", "--db-path", str(db_path)])

    # Assert
    assert status == 0
    assert capsys.readouterr().out.strip() == "https://example.com/ is up (200, 1.000 ms)"
    assert db_path.is_file()
