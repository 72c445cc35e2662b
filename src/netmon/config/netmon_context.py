"""
Configuration context for the network monitor.

This module defines a data structure that holds all configuration parameters
of a single invocation. It serves as a central point for passing configuration
throughout the application.
"""

from typing import NamedTuple, Optional, Tuple


class NetmonContext(NamedTuple):
    """
    A data structure containing all configuration parameters for the monitor.

    This class is immutable and provides a type-safe way to pass configuration
    throughout the application. It is created by parsing command-line arguments
    and environment variables.

    Attributes:
        urls: The URLs probed by a batch run, in order.
        serve_port: Port of the history service, or None for a batch run.
        serve_host: Interface the history service listens on.
        db_path: Location of the SQLite file.
        dsn: PostgreSQL connection string; when non-empty it replaces the SQLite file.
        db_pool_size: Maximum number of connections in the PostgreSQL pool.
        max_timeout: Total timeout in seconds for a single probe.
        history_limit: Number of results served by the history service.
        run_id: Identifier injected into every log record of this invocation.
        logging_type: Type of logging configuration to use (dev, prod, or custom).
        logging_config_file: Path to custom logging configuration file (if logging_type is 'custom').
    """

    urls: Tuple[str, ...]
    serve_port: Optional[int]
    serve_host: str
    db_path: str
    dsn: str
    db_pool_size: int
    max_timeout: int
    history_limit: int
    run_id: str
    logging_type: str
    logging_config_file: str

    @property
    def serve_mode(self) -> bool:
        return self.serve_port is not None
