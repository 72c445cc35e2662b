"""
Result store configuration module for the network monitor.

This module chooses the storage backend from the configuration context, opens
it and applies the schema migrations. It is the only place that knows which
concrete ResultStore is in use.
"""

import logging

from netmon.config.netmon_context import NetmonContext
from netmon.contracts import ResultStore
from netmon.errors import StorageUnavailable
from netmon.store.asyncpg_store import PostgresResultStore
from netmon.store.sqlite_store import SqliteResultStore

# Module logger
logger = logging.getLogger(__name__)


async def open_store(context: NetmonContext) -> ResultStore:
    """
    Open the configured result store and bring its schema up to date.

    A non-empty DSN selects PostgreSQL; otherwise the SQLite file at
    context.db_path is used. If the migration fails, the store is closed
    before the error is raised.

    Args:
        context: Configuration context containing storage settings.

    Returns:
        ResultStore: A migrated store ready for reads and writes.

    Raises:
        StorageUnavailable: If the store cannot be opened or migrated.
    """
    store: ResultStore
    if context.dsn:
        logger.info("Using PostgreSQL result store.")
        store = await PostgresResultStore.open(context.dsn, context.db_pool_size)
    else:
        if not context.db_path:
            raise StorageUnavailable("no result store location configured.")
        logger.info(f"Using SQLite result store at {context.db_path}.")
        store = await SqliteResultStore.open(context.db_path)

    try:
        await store.migrate()
    except StorageUnavailable:
        await store.close()
        raise

    return store
