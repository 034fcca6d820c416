"""Tests for the logging destinations."""

from __future__ import annotations

import logging

import pytest

from campus_events.config import Settings
from campus_events.logging_config import configure_logging


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_file_destination_requires_a_path():
    with pytest.raises(RuntimeError, match="CAMPUS_EVENTS_LOG_FILE"):
        configure_logging(Settings(log_destination="file", log_file=None))


def test_file_destination_writes_records(tmp_path, restore_root_logger):
    log_file = tmp_path / "campus.log"

    configure_logging(Settings(log_destination="file", log_file=str(log_file), log_level="info"))
    logging.getLogger("campus_events.test").info("venue booked")
    for handler in logging.getLogger().handlers:
        handler.flush()

    line = log_file.read_text().strip()
    assert line.endswith("INFO campus_events.test venue booked")
