"""
Logging helpers.

The library logs through module loggers under the ``datsleep`` namespace and
stays silent until an application configures logging, for example with
setup_logging().
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

__all__ = ["setup_logging"]

LOG_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: int = logging.INFO, log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Attach handlers to the ``datsleep`` logger.

    Args:
        level (int): Logging level for the package logger
        log_file: Optional file that receives the same records (UTF-8)

    Returns:
        logging.Logger: The configured package logger
    """
    logger = logging.getLogger("datsleep")
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
