"""
Logging setup.

Every module logs through `logging.getLogger(__name__)`; this installs a
single stream handler on the package logger so those records show up under
uvicorn as well as in tests.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the `campconnect` logger. Safe to call more than once."""
    logger = logging.getLogger("campconnect")
    logger.setLevel(level.upper())

    if not any(getattr(h, "_campconnect", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._campconnect = True
        logger.addHandler(handler)

    return logger
