"""Logging setup for the SchoolHub API."""

import logging
import sys

from config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = ("sqlalchemy.engine", "multipart", "httpx")


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure the root logger once with a single stream handler.

    Args:
        level: Log level name, e.g. "INFO" or "DEBUG".
    """
    root = logging.getLogger()
    if getattr(root, "_schoolhub_configured", False):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level, logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root._schoolhub_configured = True
