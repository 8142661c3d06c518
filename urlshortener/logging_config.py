"""Logging setup for the URL shortener."""

import logging
import sys

ROOT_LOGGER = "urlshortener"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


def setup_logging(level: str = "info") -> logging.Logger:
    """
    Configure the package root logger with a single stdout handler.

    Calling it again only adjusts the level; handlers are not duplicated.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(numeric_level)

    if not any(getattr(h, "_urlshortener", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handler._urlshortener = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(numeric_level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger under the package root, e.g. get_logger("storage.file")."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
