#!/usr/bin/env python3
"""
Logging bootstrap.

Debug runs write everything to a log file. Normal runs keep the console
clean: records only go to ``log_file`` when one is configured and are
dropped otherwise. Console output for the user goes through the
Presenter, never through logging.
"""

import logging

from nodemate.config.settings import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# SDK/HTTP loggers that are noisy at DEBUG.
_QUIET_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "asyncio")


def _file_handler(settings: Settings) -> logging.Handler:
    log_path = settings.log_file
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(str(log_path), mode="w" if settings.debug else "a")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def setup_logging(settings: Settings) -> None:
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    root_logger.setLevel(settings.log_level)
    if settings.log_file:
        root_logger.addHandler(_file_handler(settings))
    else:
        # keeps logging.lastResort from printing to stderr
        root_logger.addHandler(logging.NullHandler())

    if settings.debug:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.INFO)
