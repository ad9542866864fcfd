"""
Logging setup.

Everything logs through ``logging.getLogger(__name__)``; this module only
attaches the console handler to the package logger once.
"""

import logging

LOGGER_NAME = "filedrop"
FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
DATEFMT = '%Y-%m-%d %H:%M:%S'


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Attach a console handler to the package logger (idempotent)."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Remove handlers from an earlier call (tests build many apps)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(FORMAT, datefmt=DATEFMT))
    logger.addHandler(console_handler)
    return logger
