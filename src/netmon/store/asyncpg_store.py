"""
PostgreSQL-based implementation of the ResultStore interface.

This module provides a result store backed by an asyncpg connection pool, for
deployments that keep the probe history in a shared PostgreSQL database
instead of a local SQLite file.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import List

import asyncpg
from asyncpg import Pool, Record

from netmon.contracts import ResultStore, validate_limit
from netmon.domain import DailySummary, ProbeResult
from netmon.errors import PersistenceError, QueryFailure, StorageUnavailable

# Module logger
logger = logging.getLogger(__name__)

# Server-side errors, client-side protocol errors and network failures
DATABASE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError, OSError)

# Applied in a single transaction; every statement is safe to repeat.
MIGRATION_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS call (
        id bigserial PRIMARY KEY,
        created_at timestamptz NOT NULL,
        url text NOT NULL,
        status integer NOT NULL,
        success boolean NOT NULL,
        error text NOT NULL DEFAULT ''
    )
    """,
    "ALTER TABLE call ADD COLUMN IF NOT EXISTS duration_ms double precision",
    "CREATE INDEX IF NOT EXISTS idx_call_created_at ON call (created_at)",
    """
    CREATE OR REPLACE VIEW daily_summary AS
    SELECT (created_at AT TIME ZONE 'UTC')::date AS day,
           COUNT(*) AS total,
           COUNT(*) FILTER (WHERE success) AS success_count,
           COUNT(*) FILTER (WHERE NOT success) AS failure_count,
           AVG(duration_ms) AS avg_duration_ms,
           MAX(duration_ms) AS max_duration_ms
    FROM call
    GROUP BY 1
    ORDER BY 1 DESC
    """,
)

INSERT_QUERY = """
    INSERT INTO call (url, created_at, status, success, error, duration_ms)
    VALUES ($1, $2, $3, $4, $5, $6)
    RETURNING id
"""

SELECT_RECENT_QUERY = """
    SELECT id, url, created_at, status, success, error, duration_ms
    FROM call
    ORDER BY created_at DESC, id DESC
    LIMIT $1
"""

SELECT_DAILY_QUERY = """
    SELECT day, total, success_count, failure_count, avg_duration_ms, max_duration_ms
    FROM daily_summary
    LIMIT $1
"""


def normalize_timestamp(value: datetime) -> datetime:
    """
    Converts a datetime to an aware UTC datetime before it reaches asyncpg.

    asyncpg rejects naive values for timestamptz columns; naive values are
    taken as local time.
    """
    return value.astimezone(timezone.utc)


def map_result(record: Record) -> ProbeResult:
    """
    Converts a database record to a ProbeResult domain object.

    Args:
        record: A record selected with the columns of SELECT_RECENT_QUERY.

    Returns:
        ProbeResult: The persisted result, id included.
    """
    duration = record["duration_ms"]
    return ProbeResult(
        id=record["id"],
        url=record["url"],
        created_at=normalize_timestamp(record["created_at"]),
        status_code=record["status"],
        success=record["success"],
        error_text=record["error"] or "",
        duration_millis=float(duration) if duration is not None else 0.0,
    )


def map_summary(record: Record) -> DailySummary:
    avg_duration = record["avg_duration_ms"]
    max_duration = record["max_duration_ms"]
    return DailySummary(
        day=record["day"],
        total=record["total"],
        success_count=record["success_count"],
        failure_count=record["failure_count"],
        avg_duration_millis=float(avg_duration) if avg_duration is not None else None,
        max_duration_millis=float(max_duration) if max_duration is not None else None,
    )


class PostgresResultStore(ResultStore):
    """
    A PostgreSQL implementation of the ResultStore interface.

    The store owns its pool and closes it in close().
    """

    def __init__(self, pool: Pool) -> None:
        """
        Initializes the store over an existing connection pool.

        Args:
            pool: A connection pool to the PostgreSQL database.
        """
        self._pool: Pool = pool

    @classmethod
    async def open(cls, dsn: str, pool_size: int) -> "PostgresResultStore":
        """
        Create and validate a connection pool, then wrap it in a store.

        If the validation query fails, the pool is closed before raising.

        Args:
            dsn: Connection string for the PostgreSQL database.
            pool_size: Maximum number of connections in the pool.

        Returns:
            PostgresResultStore: A store ready for migrate().

        Raises:
            StorageUnavailable: If the database cannot be reached.
        """
        try:
            pool: Pool = await asyncpg.create_pool(dsn=dsn, min_size=1, max_size=pool_size)
        except DATABASE_ERRORS as err:
            logger.error(f"Error: Could not connect to the database. {err}")
            raise StorageUnavailable(f"could not connect to the database: {err}") from err

        try:
            # Validate the connection by executing a simple query
            async with pool.acquire() as connection:
                await connection.fetchval("SELECT 1")
        except DATABASE_ERRORS as err:
            logger.error(f"Error: Could not connect to the database. {err}")
            await pool.close()
            raise StorageUnavailable(f"could not connect to the database: {err}") from err

        logger.info("Database connection pool successfully created.")
        return cls(pool)

    async def migrate(self) -> None:
        try:
            async with self._pool.acquire() as conn:
                async with conn.transaction():
                    for statement in MIGRATION_STATEMENTS:
                        await conn.execute(statement)
        except DATABASE_ERRORS as err:
            raise StorageUnavailable(
                f"could not apply schema migrations to database: {err}"
            ) from err
        logger.info("Schema migrations applied.")

    async def save(self, result: ProbeResult) -> ProbeResult:
        if result.id is not None:
            raise ValueError(f"result {result.id} has already been saved.")

        try:
            async with self._pool.acquire() as conn:
                new_id = await conn.fetchval(
                    INSERT_QUERY,
                    result.url,
                    normalize_timestamp(result.created_at),
                    result.status_code,
                    result.success,
                    result.error_text,
                    result.duration_millis,
                )
        except DATABASE_ERRORS as err:
            raise PersistenceError(
                f"could not insert new record for {result.url} into database: {err}"
            ) from err

        logger.debug(f"Saved result {new_id} for {result.url}")
        return result.with_id(new_id)

    async def recent_results(self, limit: int) -> List[ProbeResult]:
        validate_limit(limit)
        try:
            async with self._pool.acquire() as conn:
                records = await conn.fetch(SELECT_RECENT_QUERY, limit)
        except DATABASE_ERRORS as err:
            raise QueryFailure(f"failure reading recent results: {err}") from err
        return [map_result(record) for record in records]

    async def daily_summary(self, days: int) -> List[DailySummary]:
        validate_limit(days)
        try:
            async with self._pool.acquire() as conn:
                records = await conn.fetch(SELECT_DAILY_QUERY, days)
        except DATABASE_ERRORS as err:
            raise QueryFailure(f"failure reading daily summary: {err}") from err
        return [map_summary(record) for record in records]

    async def close(self) -> None:
        await self._pool.close()
        logger.debug("Database connection pool closed.")
