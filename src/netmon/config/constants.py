"""
Constants for the network monitor.

This module defines default values for all configurable parameters of the
monitor. These constants are used as fallback values when neither command-line
arguments nor environment variables are provided.
"""

from typing import Tuple

# Probe targets checked when no --url override is given
DEFAULT_URLS: Tuple[str, ...] = (
    "https://www.cloudflare.com/",
    "https://www.google.com/",
    "https://www.amazon.com/",
    "https://www.fastly.com/",
)

# Storage configuration defaults
DEFAULT_DB_FILE_NAME = "netmon.db"
DEFAULT_DSN = ""
DEFAULT_DB_POOL_SIZE = 5

# HTTP configuration defaults
DEFAULT_MAX_TIMEOUT = 10
DEFAULT_SERVE_HOST = "localhost"

# History service defaults
DEFAULT_HISTORY_LIMIT = 10

# Run identification defaults
DEFAULT_RUN_ID_PREFIX = "netmon-"

# Logging configuration defaults
DEFAULT_LOGGING_TYPE = "prod"
DEFAULT_LOGGING_CONFIG_FILE = ""

# Process exit status for unrecoverable startup errors
EXIT_FAIL = 1
