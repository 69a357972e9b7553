"""
Centralized logging configuration.
Modules obtain loggers with ``logging.getLogger(__name__)``; this only sets up the root handler.
"""

import logging
import sys
from typing import Optional

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_initialized = False


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure the root logger once.

    Args:
        level: Log level name; defaults to the configured settings.log_level
    """
    global _initialized
    if _initialized:
        return

    if level is None:
        from lightbnb.config import get_settings
        level = get_settings().log_level

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)
    _initialized = True
