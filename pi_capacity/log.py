"""
Logging setup shared by the planner modules.
"""

import logging
import sys
from typing import Optional

from .config import config


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a configured logger instance."""
    logger = logging.getLogger(name or "pi_capacity")
    if not logger.handlers:
        logger.setLevel(getattr(logging, config.log_level, logging.INFO))
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    return logger
