import logging
import sys
from enum import Enum

from jobboard_scraper.core.config import settings


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class RUNTIME(str, Enum):
    HEARTBEAT = "heartbeat"
    SCRAPE = "scrape"
    PERSIST = "persist"
    PUBLISH = "publish"

    def __str__(self) -> str:
        return self.value


def setup_logger(name: str) -> logging.Logger:
    """Return a module logger writing to stderr at the configured level."""
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    return logger
