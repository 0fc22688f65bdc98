from __future__ import annotations

import logging

import pytest

from futar.config import LoggingConfig
from futar.log import configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_configure_logging_writes_file(tmp_path) -> None:
    path = configure_logging(LoggingConfig(level="debug", log_dir=str(tmp_path / "logs")))

    logging.getLogger("futar.test").debug("hello %s", "world")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert logging.getLogger().level == logging.DEBUG
    assert "hello world" in path.read_text(encoding="utf-8")


def test_configure_logging_rejects_unknown_level(tmp_path) -> None:
    with pytest.raises(ValueError):
        configure_logging(LoggingConfig(level="LOUD", log_dir=str(tmp_path)))
