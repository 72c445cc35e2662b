"""
SQLite-based implementation of the ResultStore interface.

This module keeps the probe history in a single SQLite file. All database work
runs in a worker thread through asyncio.to_thread, each operation on its own
short-lived connection. WAL journaling lets the web service read while a batch
run appends rows from another process.
"""

import asyncio
import logging
import os
import re
import sqlite3
from datetime import date, datetime, timezone
from typing import Callable, List, Sequence, TypeVar

from netmon.contracts import ResultStore, validate_limit
from netmon.domain import DailySummary, ProbeResult
from netmon.errors import PersistenceError, QueryFailure, StorageUnavailable

# Module logger
logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fixed-width ISO-8601 UTC form: sorts lexically in time order and is
# understood by SQLite's own date functions.
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"

# Pieces of Go's time.String() output that datetime.fromisoformat rejects
_MONOTONIC_SUFFIX = re.compile(r"\s+m=[+-][0-9.]+$")
_ZONE_ABBREVIATION = re.compile(r"\s+[A-Z]{2,5}$")
_FRACTION = re.compile(r"\.([0-9]+)")
_NUMERIC_OFFSET = re.compile(r"\s*([+-])([0-9]{2}):?([0-9]{2})$")

CREATE_CALL_TABLE = """
    CREATE TABLE IF NOT EXISTS call (
        id integer PRIMARY KEY,
        created_at text NOT NULL,
        url text NOT NULL,
        status integer NOT NULL,
        success boolean NOT NULL,
        error text NOT NULL DEFAULT ''
    )
"""

CREATE_CREATED_AT_INDEX = "CREATE INDEX IF NOT EXISTS idx_call_created_at ON call (created_at)"

# date() rejects Go's "2021-01-02 16:39:17.1 +0000 UTC" form found in older
# files, so those rows are grouped on their leading date.
CREATE_DAILY_SUMMARY_VIEW = """
    CREATE VIEW IF NOT EXISTS daily_summary AS
    SELECT COALESCE(date(created_at), date(substr(created_at, 1, 10))) AS day,
           COUNT(*) AS total,
           SUM(CASE WHEN success THEN 1 ELSE 0 END) AS success_count,
           SUM(CASE WHEN success THEN 0 ELSE 1 END) AS failure_count,
           AVG(duration_ms) AS avg_duration_ms,
           MAX(duration_ms) AS max_duration_ms
    FROM call
    GROUP BY day
    ORDER BY day DESC
"""

INSERT_QUERY = """
    INSERT INTO call (url, created_at, status, success, error, duration_ms)
    VALUES (?, ?, ?, ?, ?, ?)
"""

SELECT_RECENT_QUERY = """
    SELECT id, url, created_at, status, success, error, duration_ms
    FROM call
    ORDER BY created_at DESC, id DESC
    LIMIT ?
"""

SELECT_DAILY_QUERY = """
    SELECT day, total, success_count, failure_count, avg_duration_ms, max_duration_ms
    FROM daily_summary
    WHERE day IS NOT NULL
    ORDER BY day DESC
    LIMIT ?
"""


def _create_call_table(conn: sqlite3.Connection) -> None:
    conn.execute(CREATE_CALL_TABLE)


def _add_duration_column(conn: sqlite3.Connection) -> None:
    # Tables created by older releases may already carry the column
    columns = {row["name"] for row in conn.execute("PRAGMA table_info(call)")}
    if "duration_ms" not in columns:
        conn.execute("ALTER TABLE call ADD COLUMN duration_ms real")


def _create_created_at_index(conn: sqlite3.Connection) -> None:
    conn.execute(CREATE_CREATED_AT_INDEX)


def _create_daily_summary_view(conn: sqlite3.Connection) -> None:
    conn.execute(CREATE_DAILY_SUMMARY_VIEW)


# Ordered schema revisions; PRAGMA user_version holds how many were applied.
MIGRATIONS: Sequence[Callable[[sqlite3.Connection], None]] = (
    _create_call_table,
    _add_duration_column,
    _create_created_at_index,
    _create_daily_summary_view,
)


def format_timestamp(value: datetime) -> str:
    """
    Normalizes a datetime into the stored text form.

    Naive datetimes are taken as local time, like datetime.astimezone does.

    Args:
        value: The datetime to store.

    Returns:
        str: The UTC timestamp, e.g. '2024-01-02T16:39:17.123456Z'.
    """
    return value.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def _normalize_legacy_timestamp(value: str) -> str:
    text = _MONOTONIC_SUFFIX.sub("", value.strip())
    text = _ZONE_ABBREVIATION.sub("", text)
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    text = _NUMERIC_OFFSET.sub(r"\1\2:\3", text)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return text


def parse_timestamp(value: str) -> datetime:
    """
    Parses a stored timestamp back into an aware UTC datetime.

    Besides the canonical form, files written by older releases hold Go
    time values: '2021-01-02 16:39:17.123456789 +0000 UTC' or
    '2021-01-02 16:39:17.123456789-07:00', with nanosecond precision that is
    cut to microseconds here. Values without an offset are read as UTC.

    Raises:
        ValueError: If the text is not a recognizable timestamp.
    """
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        parsed = datetime.fromisoformat(_normalize_legacy_timestamp(value))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def map_result(row: sqlite3.Row) -> ProbeResult:
    """
    Converts a 'call' row into a ProbeResult domain object.

    Args:
        row: A row selected with the columns of SELECT_RECENT_QUERY.

    Returns:
        ProbeResult: The persisted result, id included.
    """
    return ProbeResult(
        id=row["id"],
        url=row["url"],
        created_at=parse_timestamp(row["created_at"]),
        status_code=row["status"],
        success=bool(row["success"]),
        error_text=row["error"] or "",
        duration_millis=row["duration_ms"] if row["duration_ms"] is not None else 0.0,
    )


def map_summary(row: sqlite3.Row) -> DailySummary:
    return DailySummary(
        day=date.fromisoformat(row["day"]),
        total=row["total"],
        success_count=row["success_count"],
        failure_count=row["failure_count"],
        avg_duration_millis=row["avg_duration_ms"],
        max_duration_millis=row["max_duration_ms"],
    )


class SqliteResultStore(ResultStore):
    """
    A file-backed implementation of the ResultStore interface.

    The constructor performs no I/O; use SqliteResultStore.open to create the
    file and validate that it is usable.
    """

    def __init__(self, path: str) -> None:
        """
        Initializes a store bound to a database file.

        Args:
            path: Location of the SQLite file. ':memory:' is not supported
                because every operation opens its own connection.
        """
        if not isinstance(path, str) or not path:
            raise ValueError("path must be provided and must be not blank.")
        self._path: str = path

    @property
    def path(self) -> str:
        return self._path

    @classmethod
    async def open(cls, path: str) -> "SqliteResultStore":
        """
        Creates the database file if needed and checks that it can be used.

        Args:
            path: Location of the SQLite file.

        Returns:
            SqliteResultStore: A store ready for migrate().

        Raises:
            StorageUnavailable: If the file cannot be created or opened.
        """
        store = cls(path)
        try:
            await asyncio.to_thread(store._check_usable)
        except (sqlite3.Error, OSError) as err:
            logger.error(f"Could not open result store at {path}: {err}")
            raise StorageUnavailable(f"could not open result store at {path}: {err}") from err
        logger.info(f"Result store opened at {path}")
        return store

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._path, timeout=10.0)
        conn.row_factory = sqlite3.Row
        return conn

    async def _run(self, operation: Callable[[sqlite3.Connection], T]) -> T:
        """Runs an operation on a fresh connection in a worker thread."""

        def _in_thread() -> T:
            conn = self._connect()
            try:
                return operation(conn)
            finally:
                conn.close()

        return await asyncio.to_thread(_in_thread)

    def _check_usable(self) -> None:
        directory = os.path.dirname(os.path.abspath(self._path))
        os.makedirs(directory, exist_ok=True)
        conn = self._connect()
        try:
            conn.execute("SELECT 1").fetchone()
        finally:
            conn.close()

    async def migrate(self) -> None:
        try:
            applied = await self._run(self._apply_migrations)
        except sqlite3.Error as err:
            raise StorageUnavailable(
                f"could not apply schema migrations to database: {err}"
            ) from err
        if applied:
            logger.info(f"Applied {applied} schema migration(s) to {self._path}")
        else:
            logger.debug("Schema already up to date.")

    @staticmethod
    def _apply_migrations(conn: sqlite3.Connection) -> int:
        conn.execute("PRAGMA journal_mode=WAL")
        current: int = conn.execute("PRAGMA user_version").fetchone()[0]
        pending = MIGRATIONS[current:]
        for version, migration in enumerate(pending, start=current + 1):
            # Each revision commits together with its version number
            with conn:
                conn.execute("BEGIN")
                migration(conn)
                # PRAGMA does not accept bound parameters; version is a local int
                conn.execute(f"PRAGMA user_version = {int(version)}")
        return len(pending)

    async def save(self, result: ProbeResult) -> ProbeResult:
        if result.id is not None:
            raise ValueError(f"result {result.id} has already been saved.")

        params = (
            result.url,
            format_timestamp(result.created_at),
            result.status_code,
            result.success,
            result.error_text,
            result.duration_millis,
        )

        def _insert(conn: sqlite3.Connection) -> int:
            with conn:
                cursor = conn.execute(INSERT_QUERY, params)
            return cursor.lastrowid

        try:
            new_id = await self._run(_insert)
        except sqlite3.Error as err:
            raise PersistenceError(
                f"could not insert new record for {result.url} into database: {err}"
            ) from err

        logger.debug(f"Saved result {new_id} for {result.url}")
        return result.with_id(new_id)

    async def recent_results(self, limit: int) -> List[ProbeResult]:
        validate_limit(limit)

        def _select(conn: sqlite3.Connection) -> List[ProbeResult]:
            return [map_result(row) for row in conn.execute(SELECT_RECENT_QUERY, (limit,))]

        try:
            return await self._run(_select)
        except (sqlite3.Error, ValueError, TypeError) as err:
            # Unparseable legacy rows are reported like any other read failure
            raise QueryFailure(f"failure reading recent results: {err}") from err

    async def daily_summary(self, days: int) -> List[DailySummary]:
        validate_limit(days)

        def _select(conn: sqlite3.Connection) -> List[DailySummary]:
            return [map_summary(row) for row in conn.execute(SELECT_DAILY_QUERY, (days,))]

        try:
            return await self._run(_select)
        except (sqlite3.Error, ValueError, TypeError) as err:
            raise QueryFailure(f"failure reading daily summary: {err}") from err

    async def close(self) -> None:
        # Connections are per operation, nothing is held open
        logger.debug(f"Closed result store at {self._path}")
