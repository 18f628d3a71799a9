import logging
from typing import Optional

from focusflow import config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Apply the application-wide logging format. Safe to call more than once."""
    logging.basicConfig(
        level=(level or config.LOG_LEVEL),
        format=LOG_FORMAT,
    )
