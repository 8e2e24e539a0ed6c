"""logging_setup のテスト。"""

import logging
from pathlib import Path

import pytest

from kensa.logging_setup import log_path_for, setup_logging


@pytest.fixture
def fresh_logging(monkeypatch):
    monkeypatch.setattr(setup_logging, "_configured", False, raising=False)
    root_logger = logging.getLogger()
    before = list(root_logger.handlers)
    level = root_logger.level
    yield root_logger
    for h in root_logger.handlers[:]:
        if h not in before:
            root_logger.removeHandler(h)
            h.close()
    root_logger.setLevel(level)


def test_file_handler_under_root(tmp_path: Path, fresh_logging) -> None:
    setup_logging(root=tmp_path, level="debug")

    logging.getLogger("kensa.test").info("hello")
    for h in fresh_logging.handlers:
        h.flush()

    log = log_path_for(tmp_path)
    assert log == tmp_path / ".kensa" / "logs" / "kensa.log"
    assert "kensa.test: hello" in log.read_text(encoding="utf-8")
    assert fresh_logging.level == logging.DEBUG


def test_configures_only_once(tmp_path: Path, fresh_logging) -> None:
    count = len(fresh_logging.handlers)
    setup_logging(root=tmp_path)
    setup_logging(root=tmp_path)
    assert len(fresh_logging.handlers) == count + 1
