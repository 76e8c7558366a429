"""Console logging set-up."""

import logging

import coloredlogs
import pytest

from router_deploy.utils import setup_console_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)


def test_log_level_from_env(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    setup_console_logging()
    assert coloredlogs.get_level() == logging.WARNING
    assert logging.getLogger("urllib3.connectionpool").level == logging.WARNING


def test_bad_log_level(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(AssertionError):
        setup_console_logging()


def test_log_file(monkeypatch, tmp_path):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    log_file = tmp_path / "logs" / "deploy.log"
    setup_console_logging(log_file=log_file)
    logging.getLogger("router_deploy.test").info("Deployed WETH9")
    for h in logging.getLogger().handlers:
        h.flush()
    assert "Deployed WETH9" in log_file.read_text()
