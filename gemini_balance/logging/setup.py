"""Logging configuration for the proxy."""

import logging
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "gemini-balance"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(debug: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """Set up logging with proper handlers and formatters."""
    logger = logging.getLogger(LOGGER_NAME)
    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)

    # Clear any existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.debug("Logging to %s", log_path)

    # Set logger to propagate to root logger to ensure proper flushing
    logger.propagate = True

    return logger


def mask_secret(value: str) -> str:
    """Mask a credential for log output, keeping the first and last 4 chars."""
    if len(value) > 8:
        return value[:4] + "****" + value[-4:]
    return "****"


# Global logger instance
logger = setup_logging()
