"""Logging helpers."""

from __future__ import annotations

import logging

LOGGER_NAME = "contact_scraper"
LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
# Browser-stack loggers that flood INFO/DEBUG output with driver chatter.
NOISY_LOGGERS = ("WDM", "selenium", "urllib3")


def configure_logging(verbose: bool = False) -> None:
    """Configure application logging once for CLI and server usage."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if not verbose:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


def get_logger() -> logging.Logger:
    """Return the logger shared across the package."""
    return logging.getLogger(LOGGER_NAME)
