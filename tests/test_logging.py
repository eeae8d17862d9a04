"""Tests for logging configuration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from autosave_engine.logging import configure_logging

if TYPE_CHECKING:
    from pathlib import Path


def test_configure_logging_sets_root_level() -> None:
    """Verify configure logging sets root level."""
    configure_logging("debug")
    assert logging.getLogger().level == logging.DEBUG
    configure_logging("INFO")
    assert logging.getLogger().level == logging.INFO


def test_configure_logging_quiets_azure_loggers() -> None:
    """Verify configure logging quiets azure loggers."""
    configure_logging("DEBUG")
    assert logging.getLogger("azure.cosmos").level == logging.WARNING
    configure_logging("INFO")


def test_configure_logging_writes_log_file(tmp_path: Path) -> None:
    """Verify configure logging writes log file."""
    log_file = tmp_path / "autosave.log"
    configure_logging("INFO", log_file=str(log_file))
    logging.getLogger("autosave_engine.test").info("hello from test")
    for handler in logging.getLogger().handlers:
        handler.flush()
    assert "hello from test" in log_file.read_text(encoding="utf-8")
    configure_logging("INFO")
