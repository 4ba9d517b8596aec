"""Tests for the logging bootstrap."""

import logging

import pytest

from nodemate.config.settings import Settings
from nodemate.providers.openai_compat import OpenAIProvider
from nodemate.utils.logging_setup import _QUIET_LOGGERS, setup_logging

from .conftest import make_openai_client


class _StatusError(Exception):
    def __init__(self, message, status_code):
        super().__init__(message)
        self.status_code = status_code


@pytest.fixture
def configure():
    """Run setup_logging, then drop its handlers and levels after the test."""
    root_logger = logging.getLogger()
    level = root_logger.level
    quiet_levels = {name: logging.getLogger(name).level for name in _QUIET_LOGGERS}
    installed = []

    def _configure(settings):
        setup_logging(settings)
        installed.extend(root_logger.handlers)

    yield _configure

    for handler in installed:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(level)
    for name, quiet_level in quiet_levels.items():
        logging.getLogger(name).setLevel(quiet_level)


@pytest.mark.asyncio
async def test_normal_run_keeps_stderr_clean(configure, tmp_path, capsys):
    configure(Settings(config_dir=tmp_path))
    provider = OpenAIProvider("sk-test-key-123456", timeout=5.0)
    provider.client = make_openai_client(
        models=_StatusError("Incorrect API key provided: sk-test-key-123456", 401)
    )

    assert await provider.validate_key() is False
    logging.getLogger("nodemate.agent.session").error("Chat turn failed: boom")

    assert capsys.readouterr().err == ""


def test_log_file_outside_debug(configure, tmp_path):
    log_file = tmp_path / "logs" / "nodemate.log"
    configure(Settings(config_dir=tmp_path, log_file=log_file))

    logging.getLogger("nodemate.services.npm_service").warning("registry slow")
    logging.getLogger("nodemate.services.npm_service").debug("not at WARNING")

    contents = log_file.read_text(encoding="utf-8")
    assert "WARNING - registry slow" in contents
    assert "not at WARNING" not in contents


def test_debug_writes_everything_to_log_file(configure, tmp_path, capsys):
    settings = Settings(config_dir=tmp_path, debug=True)
    configure(settings)

    logging.getLogger("nodemate.providers").debug("request payload built")

    assert settings.log_file == tmp_path / "debug.log"
    assert "DEBUG - request payload built" in settings.log_file.read_text(encoding="utf-8")
    assert logging.getLogger("httpx").level == logging.INFO
    assert capsys.readouterr().err == ""
