# marksheet/core/logger.py
import logging
import sys

from marksheet.core.config import CONFIG

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = CONFIG.LOG_LEVEL) -> logging.Logger:
    """Attach the stdout handler once; later calls only change the level."""
    root = logging.getLogger("marksheet")
    level = level.upper()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)
    root.setLevel(level)
    for handler in root.handlers:
        handler.setLevel(level)
    return root


_logger = configure_logging()


def get_logger(name: str | None = None) -> logging.Logger:
    if name:
        return _logger.getChild(name)
    return _logger
