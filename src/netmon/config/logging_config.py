"""
Logging setup for netmon.

The packaged 'dev' and 'prod' files, or a user supplied one for 'custom', are
applied with logging.config.dictConfig. Every record created afterwards
carries a 'run_id' attribute, whichever logger or handler it passes through.
"""

import json
import logging.config
import os
from typing import Any, Callable, Dict

from netmon.config.netmon_context import NetmonContext

PACKAGED_CONFIGS: Dict[str, str] = {
    "dev": "logging-config-dev.json",
    "prod": "logging-config-prod.json",
}

_base_record_factory: Callable[..., logging.LogRecord] = logging.getLogRecordFactory()


def configure_logging(context: NetmonContext) -> None:
    """
    Applies the logging configuration selected by the context.

    Args:
        context: Supplies logging_type, logging_config_file and run_id.

    Raises:
        ValueError: If the type is empty or unknown, or 'custom' comes without a file.
        RuntimeError: If the configuration file cannot be loaded.
    """
    logging_type: str = context.logging_type.lower()
    if not logging_type:
        raise ValueError("Logging type must be provided.")

    if logging_type == "custom":
        if not context.logging_config_file:
            raise ValueError("Custom logging configuration file must be provided.")
        config_file = context.logging_config_file
    elif logging_type in PACKAGED_CONFIGS:
        config_file = _get_local_package_file_path(PACKAGED_CONFIGS[logging_type])
    else:
        raise ValueError(
            f"Invalid logging type: {context.logging_type}. Allowed values are: dev, prod, custom"
        )

    # Tag records before handlers exist so none is ever formatted without run_id
    install_run_id(context.run_id)
    _load_logging_config(config_file)
    logging.getLogger(__name__).debug(f"Logging configured from {config_file}")


def install_run_id(run_id: str) -> None:
    """
    Makes every LogRecord created from now on carry the given run_id.

    Calling it again replaces the previous run ID rather than stacking factories.
    """

    def record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
        record = _base_record_factory(*args, **kwargs)
        record.run_id = run_id
        return record

    logging.setLogRecordFactory(record_factory)


def _load_logging_config(config_file: str) -> None:
    """
    Reads a JSON dictConfig file and applies it.

    Raises:
        RuntimeError: If the file is missing, is not JSON, or is rejected by dictConfig.
    """
    try:
        with open(config_file) as f:
            config: Dict[str, Any] = json.load(f)
            logging.config.dictConfig(config)
    except FileNotFoundError as err:
        raise RuntimeError(f"Logging config file not found: {config_file}") from err
    except json.JSONDecodeError as err:
        raise RuntimeError(f"Invalid JSON format in logging config file: {config_file}") from err
    except Exception as err:
        raise RuntimeError(f"Error loading logging config: {str(err)}") from err


def _get_local_package_file_path(config_file: str) -> str:
    return os.path.join(os.path.dirname(__file__), config_file)
