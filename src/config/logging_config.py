"""
Parlor Games - Logging Setup

Configures the "src" package logger for command-line use. Library code
only ever calls logging.getLogger(__name__).
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO", debug: bool = False) -> logging.Logger:
    """Attach a stderr handler to the package logger.

    Args:
        level: Log level name, e.g. "INFO"
        debug: Force DEBUG regardless of level

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("src")
    logger.setLevel(logging.DEBUG if debug else level.upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
