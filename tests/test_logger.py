import logging

import pytest

from tinylsm.logger import LOG_FILE_NAME, LOGGER_NAME, init_file_logging, reset_log_level


def test_init_once_writes_log_file(tmp_path):
    first_dir = tmp_path / "first"
    second_dir = tmp_path / "second"
    logger = init_file_logging(first_dir)
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.DEBUG
    handler_count = len(logger.handlers)

    again = init_file_logging(second_dir)
    assert again is logger
    assert len(again.handlers) == handler_count
    assert not second_dir.exists()

    log_file = first_dir / LOG_FILE_NAME
    assert log_file.exists()
    assert "logging initialized" in log_file.read_text(encoding="utf-8")


@pytest.mark.parametrize(
    "name, expected",
    [
        ("debug", logging.DEBUG),
        ("info", logging.INFO),
        ("warning", logging.WARNING),
        ("err", logging.ERROR),
        ("critical", logging.CRITICAL),
    ],
)
def test_reset_log_level(name, expected):
    assert reset_log_level(name) == expected
    assert logging.getLogger(LOGGER_NAME).level == expected


def test_unknown_level_switches_logging_off():
    level = reset_log_level("no-such-level")
    assert level > logging.CRITICAL
    assert not logging.getLogger(LOGGER_NAME).isEnabledFor(logging.CRITICAL)
    reset_log_level("debug")
    assert logging.getLogger(LOGGER_NAME).isEnabledFor(logging.DEBUG)