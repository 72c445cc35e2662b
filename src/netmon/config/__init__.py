"""
Configuration module for the network monitor.

This module provides functionality to parse command-line arguments and environment
variables to create a configuration context for the monitor. It defines
default values and help text for all configurable parameters.
"""

import argparse
import os
import sys
import uuid
from pathlib import Path
from typing import Any, NoReturn, Optional, Sequence

from netmon.config.constants import (
    DEFAULT_DB_FILE_NAME,
    DEFAULT_DB_POOL_SIZE,
    DEFAULT_DSN,
    DEFAULT_HISTORY_LIMIT,
    DEFAULT_LOGGING_CONFIG_FILE,
    DEFAULT_LOGGING_TYPE,
    DEFAULT_MAX_TIMEOUT,
    DEFAULT_RUN_ID_PREFIX,
    DEFAULT_SERVE_HOST,
    DEFAULT_URLS,
    EXIT_FAIL,
)
from netmon.config.netmon_context import NetmonContext
from netmon.contracts import MAX_RECENT_LIMIT


class _ArgumentParser(argparse.ArgumentParser):
    """An ArgumentParser that exits with EXIT_FAIL instead of 2 on bad input."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAIL, f"{self.prog}: error: {message}\n")


def _port(value: str) -> int:
    port = int(value)
    if not 0 < port < 65536:
        raise argparse.ArgumentTypeError(f"invalid port: {value}")
    return port


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


def _history_limit(value: str) -> int:
    limit = _positive_int(value)
    if limit > MAX_RECENT_LIMIT:
        raise argparse.ArgumentTypeError(f"must not exceed {MAX_RECENT_LIMIT}: {value}")
    return limit


def default_db_path() -> str:
    """
    Returns the default location of the SQLite file, in the user's home directory.

    Raises:
        RuntimeError: If the home directory cannot be determined.
    """
    return str(Path.home() / DEFAULT_DB_FILE_NAME)


def get_context(argv: Optional[Sequence[str]] = None) -> NetmonContext:
    """
    Parse command-line arguments and environment variables to create a configuration context.

    For each option, it first checks for a command-line argument, then falls
    back to an environment variable, and finally uses a default value. String
    defaults go through the same type conversion as command-line values, so a
    malformed environment variable is reported like a malformed flag.

    Args:
        argv: Arguments to parse; defaults to sys.argv[1:].

    Returns:
        NetmonContext: A configuration context object containing all parsed settings.
    """
    parser = _ArgumentParser(
        prog="netmon",
        description="Checks whether a set of URLs is reachable and keeps the history.",
    )

    parser.add_argument(
        "--url",
        type=str,
        default=os.getenv("NETMON_URL", ""),
        help="Which URL to use when checking if the internet connection is working.\n"
        "Replaces the default URL set with this single URL.\n"
        "If not provided, the value is read from the NETMON_URL environment variable.\n"
        f"If that is also absent, the default set is used: {', '.join(DEFAULT_URLS)}",
    )

    parser.add_argument(
        "--serve",
        type=_port,
        default=os.getenv("NETMON_SERVE"),
        metavar="PORT",
        help=f"Starts the history web service on {DEFAULT_SERVE_HOST}:PORT instead of running checks.\n"
        "If not provided, the value is read from the NETMON_SERVE environment variable.",
    )

    parser.add_argument(
        "--db-path",
        type=str,
        default=os.getenv("NETMON_DB_PATH", ""),
        help="Location of the SQLite file holding the probe history.\n"
        "If not provided, the value is read from the NETMON_DB_PATH environment variable.\n"
        f"If that is also absent, ~/{DEFAULT_DB_FILE_NAME} is used.",
    )

    parser.add_argument(
        "--dsn",
        type=str,
        default=os.getenv("NETMON_DSN", DEFAULT_DSN),
        help="Specifies the DSN (connection string) of a PostgreSQL database.\n"
        "When set, the history is kept in PostgreSQL instead of the SQLite file.\n"
        "If not provided, the value is read from the NETMON_DSN environment variable.",
    )

    parser.add_argument(
        "--db-pool-size",
        type=_positive_int,
        default=os.getenv("NETMON_DB_POOL_SIZE", str(DEFAULT_DB_POOL_SIZE)),
        help="Specifies the maximum number of connections in the PostgreSQL connection pool.\n"
        "If not provided, the value is read from the NETMON_DB_POOL_SIZE environment variable.\n"
        f"If that is also absent, a default value of {DEFAULT_DB_POOL_SIZE} is used.",
    )

    parser.add_argument(
        "--max-timeout",
        type=_positive_int,
        default=os.getenv("NETMON_MAX_TIMEOUT", str(DEFAULT_MAX_TIMEOUT)),
        help="Specifies the maximum timeout duration in seconds for a single probe.\n"
        "If not provided, the value is read from the NETMON_MAX_TIMEOUT environment variable.\n"
        f"If that is also absent, a default value of {DEFAULT_MAX_TIMEOUT} seconds is used.",
    )

    parser.add_argument(
        "--history-limit",
        type=_history_limit,
        default=os.getenv("NETMON_HISTORY_LIMIT", str(DEFAULT_HISTORY_LIMIT)),
        help=f"Number of recent results served by the history service (1-{MAX_RECENT_LIMIT}).\n"
        "If not provided, the value is read from the NETMON_HISTORY_LIMIT environment variable.\n"
        f"If that is also absent, a default value of {DEFAULT_HISTORY_LIMIT} is used.",
    )

    parser.add_argument(
        "--run-id",
        type=str,
        default=os.getenv("NETMON_RUN_ID", f"{DEFAULT_RUN_ID_PREFIX}{uuid.uuid4()}"),
        help="Identifier added to every log record of this invocation.\n"
        "If not provided, the value is read from the NETMON_RUN_ID environment variable.\n"
        f"If that is also absent, the default value will be {DEFAULT_RUN_ID_PREFIX}uuid4().",
    )

    parser.add_argument(
        "--logging-type",
        type=str,
        default=os.getenv("NETMON_LOGGING_TYPE", DEFAULT_LOGGING_TYPE),
        help="Specifies the logging configuration type to use.\n"
        "Allowed values: dev, prod, custom (case insensitive).\n"
        "For 'dev' and 'prod', system will use built-in configurations.\n"
        "For 'custom', the --logging-config-file argument is required.",
    )

    parser.add_argument(
        "--logging-config-file",
        type=str,
        default=os.getenv("NETMON_LOGGING_CONFIG_FILE", DEFAULT_LOGGING_CONFIG_FILE),
        help="Path to custom logging configuration file.\n"
        "Required when --logging-type is set to 'custom'.",
    )

    # Parse the command-line arguments
    args: Any = parser.parse_args(argv)

    # The home directory is only looked up when no explicit location is given
    db_path: str = args.db_path
    if not db_path and not args.dsn:
        try:
            db_path = default_db_path()
        except RuntimeError as err:
            parser.error(f"could not determine the home directory, use --db-path: {err}")

    # Create and return a NetmonContext with the parsed settings
    return NetmonContext(
        urls=(args.url,) if args.url else DEFAULT_URLS,
        serve_port=args.serve,
        serve_host=DEFAULT_SERVE_HOST,
        db_path=db_path,
        dsn=args.dsn,
        db_pool_size=args.db_pool_size,
        max_timeout=args.max_timeout,
        history_limit=args.history_limit,
        run_id=args.run_id,
        logging_type=args.logging_type,
        logging_config_file=args.logging_config_file,
    )
