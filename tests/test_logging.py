"""Tests for the logging helpers."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from codescope.logging import configure_logging, get_logger


@pytest.fixture(autouse=True)
def _reset_codescope_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("codescope")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def test_loggers_live_under_the_codescope_hierarchy() -> None:
    assert get_logger().name == "codescope"
    assert get_logger("collectors.source").name == "codescope.collectors.source"


def test_console_output_goes_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging()

    get_logger("engine").info("Starting quality analysis")
    get_logger("collectors.source").debug("Skipping unreadable file")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == "[codescope] INFO Starting quality analysis\n"


def test_verbose_shows_debug_records(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(verbose=True)

    get_logger("collectors.source").debug("Skipping unreadable file")

    assert "[codescope] DEBUG Skipping unreadable file" in capsys.readouterr().err


def test_log_file_keeps_debug_records(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    log_file = tmp_path / "logs" / "codescope.log"

    configure_logging(log_file=log_file)
    get_logger("collectors.source").debug("Skipping unreadable directory build")

    assert "DEBUG" not in capsys.readouterr().err
    for handler in logging.getLogger("codescope").handlers:
        handler.flush()
    text = log_file.read_text(encoding="utf-8")
    assert "DEBUG codescope.collectors.source: Skipping unreadable directory build" in text


def test_reconfiguring_replaces_handlers() -> None:
    configure_logging()
    logger = configure_logging(verbose=True)

    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.DEBUG
