"""Logging configuration for the gateway."""

import logging
import os
import sys

LOGGER_NAME = "llm-gateway"


def setup_logging(level: str | None = None) -> logging.Logger:
    """Set up the gateway logger with a stdout handler.

    The level defaults to INFO and can be overridden with the
    ``LLM_GATEWAY_LOG_LEVEL`` environment variable.
    """
    logger = logging.getLogger(LOGGER_NAME)
    level_name = (level or os.getenv("LLM_GATEWAY_LOG_LEVEL") or "INFO").upper()
    resolved = logging.getLevelName(level_name)
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logger.setLevel(resolved)

    # Clear any existing handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(resolved)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Propagate to the root logger so pytest's caplog sees our records
    logger.propagate = True

    return logger


# Global logger instance
logger = setup_logging()
