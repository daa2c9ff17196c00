"""Unit tests for src/core/logging_setup.py"""

import logging
from pathlib import Path
from typing import Generator

import pytest

from src.core.logging_setup import setup_logging


def _own_handlers() -> list[logging.Handler]:
    return [h for h in logging.getLogger().handlers if getattr(h, "_sumzero_handler", False)]


@pytest.fixture(autouse=True)
def restore_root_logger() -> Generator[None, None, None]:
    """Leave the root logger as we found it (pytest installs its own handlers)."""
    root = logging.getLogger()
    level = root.level
    try:
        yield
    finally:
        for handler in _own_handlers():
            root.removeHandler(handler)
            handler.close()
        root.setLevel(level)


def test_console_only() -> None:
    assert setup_logging(level=logging.DEBUG) is None
    handlers = _own_handlers()
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.StreamHandler)
    assert logging.getLogger().level == logging.DEBUG


def test_repeated_calls_replace_handlers() -> None:
    setup_logging()
    setup_logging()
    setup_logging(level=logging.WARNING)
    assert len(_own_handlers()) == 1
    assert logging.getLogger().level == logging.WARNING


def test_foreign_handlers_are_kept() -> None:
    foreign = logging.NullHandler()
    root = logging.getLogger()
    root.addHandler(foreign)
    try:
        setup_logging()
        assert foreign in root.handlers
    finally:
        root.removeHandler(foreign)


def test_log_file(tmp_path: Path) -> None:
    log_file = setup_logging(log_dir=tmp_path / "logs", run_name="self_play")
    assert log_file == tmp_path / "logs" / "self_play.log"

    logging.getLogger("src.sumzero.game").info("Draft over, entering placement phase")
    for handler in _own_handlers():
        handler.flush()

    content = log_file.read_text(encoding="utf-8")
    assert "src.sumzero.game - INFO - Draft over, entering placement phase" in content
    assert len(_own_handlers()) == 2


def test_log_file_default_name(tmp_path: Path) -> None:
    log_file = setup_logging(log_dir=tmp_path)
    assert log_file is not None
    assert log_file.parent == tmp_path
    assert log_file.suffix == ".log"
    assert log_file.exists()
