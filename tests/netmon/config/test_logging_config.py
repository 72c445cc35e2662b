"""
Unit tests for the logging configuration module.

This module contains tests for the logging configuration module, ensuring that
it correctly configures logging based on the provided configuration context
and handles different logging types and error conditions.

The tests follow the Arrange-Act-Assert (AAA) pattern and use proper mocking
of all external dependencies to ensure true unit testing.
"""

import json
import logging
import os
from pathlib import Path
from typing import Generator
from unittest.mock import mock_open, patch

import pytest

from netmon.config.constants import DEFAULT_URLS
from netmon.config.logging_config import (
    _get_local_package_file_path,
    _load_logging_config,
    configure_logging,
    install_run_id,
)
from netmon.config.netmon_context import NetmonContext


def make_context(logging_type: str, logging_config_file: str = "") -> NetmonContext:
    return NetmonContext(
        urls=DEFAULT_URLS,
        serve_port=None,
        serve_host="localhost",
        db_path="/tmp/netmon.db",
        dsn="",
        db_pool_size=5,
        max_timeout=10,
        history_limit=10,
        run_id="test-run",
        logging_type=logging_type,
        logging_config_file=logging_config_file,
    )


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, None, None]:
    """
    Restores the record factory and the root and 'netmon.custom' loggers after each test.
    """
    factory = logging.getLogRecordFactory()
    root = logging.getLogger()
    custom = logging.getLogger("netmon.custom")
    saved = [(lg, list(lg.handlers), list(lg.filters), lg.level) for lg in (root, custom)]
    yield
    logging.setLogRecordFactory(factory)
    for lg, handlers, filters, level in saved:
        lg.handlers[:] = handlers
        lg.filters[:] = filters
        lg.setLevel(level)


def test_get_local_package_file_path_should_point_next_to_module() -> None:
    # Act
    result = _get_local_package_file_path("logging-config-dev.json")

    # Assert
    assert os.path.basename(result) == "logging-config-dev.json"
    assert os.path.isfile(result)


def test_load_logging_config_should_load_and_apply_config() -> None:
    # Arrange
    config_file = "test-config.json"
    mock_config = {"version": 1, "formatters": {}, "handlers": {}, "loggers": {}}

    with patch("builtins.open", mock_open()) as mock_file:
        with patch("json.load", return_value=mock_config) as mock_json_load:
            with patch("logging.config.dictConfig") as mock_dict_config:
                # Act
                _load_logging_config(config_file)

                # Assert
                mock_file.assert_called_once_with(config_file)
                mock_json_load.assert_called_once()
                mock_dict_config.assert_called_once_with(mock_config)


def test_load_logging_config_should_raise_runtime_error_when_file_not_found() -> None:
    # Arrange
    config_file = "non-existent-config.json"

    with patch("builtins.open", side_effect=FileNotFoundError()):
        # Act & Assert
        with pytest.raises(RuntimeError, match=f"Logging config file not found: {config_file}"):
            _load_logging_config(config_file)


def test_load_logging_config_should_raise_runtime_error_when_invalid_json() -> None:
    # Arrange
    config_file = "invalid-json-config.json"

    with patch("builtins.open", mock_open()):
        with patch("json.load", side_effect=json.JSONDecodeError("Invalid JSON", "", 0)):
            # Act & Assert
            with pytest.raises(
                RuntimeError, match=f"Invalid JSON format in logging config file: {config_file}"
            ):
                _load_logging_config(config_file)


def test_load_logging_config_should_wrap_other_errors() -> None:
    with patch("builtins.open", mock_open()):
        with patch("json.load", return_value={"version": 99}):
            with pytest.raises(RuntimeError, match="Error loading logging config"):
                _load_logging_config("bad-version.json")


@pytest.mark.parametrize("logging_type", ["dev", "prod", "DEV"])
def test_configure_logging_should_load_packaged_configs(logging_type: str) -> None:
    """
    Tests that the built-in configurations load and tag records with the run ID.
    """
    # Act
    configure_logging(make_context(logging_type))

    # Assert
    assert logging.getLogger().handlers
    record = logging.getLogger("netmon").makeRecord(
        "netmon", logging.INFO, __file__, 1, "message", None, None
    )
    assert record.run_id == "test-run"


def test_configure_logging_should_tag_records_for_handlers_on_named_loggers(
    tmp_path: Path, capsys: pytest.CaptureFixture
) -> None:
    """
    Tests that a custom file attaching a run_id formatter to a non-root
    logger's handler formats records without errors.
    """
    # Arrange
    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"tagged": {"format": "%(run_id)s|%(message)s"}},
        "handlers": {
            "out": {
                "class": "logging.StreamHandler",
                "formatter": "tagged",
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            "netmon.custom": {"level": "INFO", "handlers": ["out"], "propagate": False}
        },
    }
    config_file = tmp_path / "logging.json"
    config_file.write_text(json.dumps(config))

    # Act
    configure_logging(make_context("custom", str(config_file)))
    logging.getLogger("netmon.custom").info("hello")

    # Assert
    captured = capsys.readouterr()
    assert captured.out == "test-run|hello\n"
    assert "Logging error" not in captured.err


def test_configure_logging_should_load_custom_file() -> None:
    # Arrange
    context = make_context("custom", "/path/to/custom/config.json")

    with patch("netmon.config.logging_config._load_logging_config") as mock_load:
        # Act
        configure_logging(context)

    # Assert
    mock_load.assert_called_once_with("/path/to/custom/config.json")


def test_configure_logging_should_require_file_for_custom_type() -> None:
    with pytest.raises(ValueError, match="Custom logging configuration file must be provided."):
        configure_logging(make_context("custom"))


def test_configure_logging_should_reject_unknown_type() -> None:
    with pytest.raises(ValueError, match="Invalid logging type: invalid"):
        configure_logging(make_context("invalid"))


def test_configure_logging_should_reject_empty_type() -> None:
    with pytest.raises(ValueError, match="Logging type must be provided."):
        configure_logging(make_context(""))


def test_install_run_id_should_replace_previous_run_id() -> None:
    # Arrange
    install_run_id("run-1")

    # Act
    install_run_id("run-42")
    record = logging.getLogger("netmon").makeRecord(
        "netmon", logging.INFO, __file__, 1, "message", None, None
    )

    # Assert
    assert record.run_id == "run-42"
