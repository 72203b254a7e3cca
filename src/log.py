"""Log utilities."""

import logging
import os

from rich.logging import RichHandler

LOG_LEVEL_ENV_VAR = "CHAT_RELAY_LOG_LEVEL"


def get_logger(name: str) -> logging.Logger:
    """Retrieve logger with the provided name.

    The level defaults to DEBUG and can be overridden by the
    `CHAT_RELAY_LOG_LEVEL` environment variable.
    """
    logger = logging.getLogger(name)
    logger.setLevel(os.environ.get(LOG_LEVEL_ENV_VAR, "DEBUG").upper())
    logger.handlers = [RichHandler(show_path=False)]
    logger.propagate = False
    return logger


def set_log_level(level: int | str) -> None:
    """Change level of all loggers created by `get_logger`."""
    for logger in logging.Logger.manager.loggerDict.values():
        if isinstance(logger, logging.Logger) and any(
            isinstance(handler, RichHandler) for handler in logger.handlers
        ):
            logger.setLevel(level)
