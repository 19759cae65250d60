"""Logging configuration for the smartspend CLI."""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

LOGGER_NAME = "smartspend"


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """Configure the smartspend logger.

    Args:
        verbose: Show INFO on the console instead of only warnings and errors
        log_file: Optional path for a rotating debug log

    Returns:
        Configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file else logging.INFO)

    # Remove existing handlers to avoid duplicates on repeated CLI invocations
    logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO if verbose else logging.WARNING)
    if verbose:
        console_format = "[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s"
        datefmt = "%H:%M:%S"
    else:
        console_format = "%(levelname)s: %(message)s"
        datefmt = None
    console_handler.setFormatter(logging.Formatter(fmt=console_format, datefmt=datefmt))
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=1_000_000, backupCount=3, encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S")
        )
        logger.addHandler(file_handler)

    return logger
