"""
Logging setup for the Secreto Diary service.

Modules log through `logging.getLogger(__name__)`; this only wires the
package logger to stdout once at startup.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the package logger.

    Args:
        level: Log level name, e.g. "INFO" or "debug"

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("secreto_diary")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)

    return logger
