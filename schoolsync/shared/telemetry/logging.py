"""Logging configuration for the sync layer."""

import logging
import sys

from schoolsync.core.config import Settings, get_settings

# httpx logs every request at INFO, which floods the output under a live change feed.
_TRANSPORT_LOGGERS = ("httpx", "httpcore")


def setup_logging(settings: Settings | None = None) -> None:
    """Configure process-wide logging.

    Level is DEBUG when settings.debug is True, otherwise INFO.
    Transport loggers stay at WARNING unless debugging. Output goes to stdout.
    """
    if settings is None:
        settings = get_settings()
    log_level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    transport_level = logging.DEBUG if settings.debug else logging.WARNING
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name."""
    return logging.getLogger(name)
