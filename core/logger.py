"""Logging setup for the recipe service.

All modules log through `get_logger`, which attaches one console handler and
one size-rotated file handler shared by the whole process. The destination
and verbosity come from the environment:

- ``LOG_DIR``: directory of ``recipes.log`` (default: ``logs/`` at the repo root)
- ``LOG_LEVEL``: level name such as ``DEBUG`` or ``WARNING`` (default ``INFO``)
"""

import logging
import os
from logging.handlers import RotatingFileHandler

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3


def parse_level(name: str, default: int = logging.INFO) -> int:
    """Return the numeric level for `name`, or `default` for unknown names."""
    level = logging.getLevelName((name or "").strip().upper())
    return level if isinstance(level, int) else default


LOG_DIR = os.getenv("LOG_DIR", os.path.join(os.path.dirname(__file__), "..", "logs"))
os.makedirs(LOG_DIR, exist_ok=True)
LOG_FILE = os.path.join(LOG_DIR, "recipes.log")
LOG_LEVEL = parse_level(os.getenv("LOG_LEVEL", "INFO"))

_formatter = logging.Formatter(LOG_FORMAT)
_console = logging.StreamHandler()
_console.setFormatter(_formatter)
_rotating_file = RotatingFileHandler(LOG_FILE, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS)
_rotating_file.setFormatter(_formatter)


def get_logger(name: str = __name__, level: int = LOG_LEVEL) -> logging.Logger:
    """Return the named logger, wiring the shared handlers on first use only."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(level)
        logger.addHandler(_console)
        logger.addHandler(_rotating_file)
    return logger
