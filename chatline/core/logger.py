"""
Logging setup shared across the application.
"""

import logging
import sys

from chatline.core.config import get_settings

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logger(name: str = "chatline") -> logging.Logger:
    """
    Get a logger writing to stdout at the configured LOG_LEVEL.

    Handlers are attached once per logger name, so repeated calls are safe.
    """
    log = logging.getLogger(name)
    level = getattr(logging, get_settings().LOG_LEVEL.upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    log.setLevel(level)

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_FORMAT))
        log.addHandler(handler)
        log.propagate = False

    return log


logger = setup_logger()
