"""
Unit tests for the HistoryService class.

The tests follow the Arrange-Act-Assert (AAA) pattern and use proper mocking
of the result store.
"""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock

import pytest

from netmon.contracts import ResultStore
from netmon.domain import DailySummary, ProbeResult
from netmon.errors import QueryFailure
from netmon.web.history_service import HistoryService


@pytest.fixture
def results() -> list:
    return [
        ProbeResult(
            id=2,
            url="https://down.example/",
            created_at=datetime(2024, 5, 1, 12, 1, tzinfo=timezone.utc),
            status_code=404,
            success=False,
            error_text='HTTP Not Found, Content: "<b>gone</b>"',
            duration_millis=20.0,
        ),
        ProbeResult(
            id=1,
            url="https://up.example/",
            created_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
            status_code=200,
            success=True,
            error_text="",
            duration_millis=10.25,
        ),
    ]


@pytest.fixture
def mock_store(results: list) -> AsyncMock:
    store = AsyncMock(spec=ResultStore)
    store.recent_results.return_value = results
    return store


def test_constructor_should_default_to_ten_results(mock_store: AsyncMock) -> None:
    assert HistoryService(mock_store).limit == 10


def test_constructor_should_reject_unbounded_limits(mock_store: AsyncMock) -> None:
    with pytest.raises(ValueError):
        HistoryService(mock_store, limit=1000)


@pytest.mark.asyncio
async def test_get_status_should_return_json_ready_results(mock_store: AsyncMock) -> None:
    # Arrange
    service = HistoryService(mock_store)

    # Act
    payload = await service.get_status()

    # Assert
    mock_store.recent_results.assert_awaited_once_with(10)
    assert [item["id"] for item in payload] == [2, 1]
    assert payload[0]["statusCode"] == 404
    assert payload[1]["createdAt"] == "2024-05-01T12:00:00+00:00"


@pytest.mark.asyncio
async def test_get_summary_should_render_escaped_table(mock_store: AsyncMock) -> None:
    """
    Tests that the page lists every result and escapes response content.
    """
    # Arrange
    service = HistoryService(mock_store, limit=5)

    # Act
    page = await service.get_summary()

    # Assert
    mock_store.recent_results.assert_awaited_once_with(5)
    assert "<title>netmon: recent checks</title>" in page
    assert "https://down.example/" in page
    assert "https://up.example/" in page
    assert "2024-05-01 12:01:00 UTC" in page
    assert "10.250" in page
    assert "&lt;b&gt;gone&lt;/b&gt;" in page
    assert "<b>gone</b>" not in page


@pytest.mark.asyncio
async def test_get_summary_should_render_empty_history(mock_store: AsyncMock) -> None:
    # Arrange
    mock_store.recent_results.return_value = []
    service = HistoryService(mock_store)

    # Act
    page = await service.get_summary()

    # Assert
    assert "No checks recorded yet." in page
    assert "<table>" not in page


@pytest.mark.asyncio
async def test_get_daily_should_return_json_ready_summaries(mock_store: AsyncMock) -> None:
    # Arrange
    mock_store.daily_summary.return_value = [
        DailySummary(date(2024, 5, 1), 2, 1, 1, 15.0, 20.0),
    ]
    service = HistoryService(mock_store)

    # Act
    payload = await service.get_daily()

    # Assert
    mock_store.daily_summary.assert_awaited_once_with(10)
    assert payload == [
        {
            "day": "2024-05-01",
            "total": 2,
            "successCount": 1,
            "failureCount": 1,
            "avgDurationMillis": 15.0,
            "maxDurationMillis": 20.0,
        }
    ]


@pytest.mark.asyncio
async def test_get_status_should_propagate_query_failure(mock_store: AsyncMock) -> None:
    # Arrange
    mock_store.recent_results.side_effect = QueryFailure("database is locked")
    service = HistoryService(mock_store)

    # Act & Assert
    with pytest.raises(QueryFailure):
        await service.get_status()
