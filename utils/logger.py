"""
utils/logger.py
---------------
Process-wide logging setup.
Modules call ``get_logger(__name__)``; the first call installs a stdout
handler on the root logger at the level named by ``LOG_LEVEL``.
"""

import logging
import sys

from config import LOG_LEVEL

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_HANDLER_NAME = "duetrack-stdout"


def _configure_root() -> None:
    root = logging.getLogger()
    if any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    root.addHandler(handler)
    # getLevelName returns a "Level X" string for unknown names
    level = logging.getLevelName(LOG_LEVEL)
    root.setLevel(level if isinstance(level, int) else logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """
    Named logger with the shared handler in place.

    Args:
        name: Usually ``__name__`` of the calling module.
    """
    _configure_root()
    return logging.getLogger(name)
