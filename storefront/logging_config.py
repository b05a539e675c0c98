"""
Logging setup for the storefront API.

Console output plus an optional rotating file under logs/.
"""
import logging
import logging.handlers
import sys
from pathlib import Path

from .settings import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def setup_logging(level: str | None = None, log_file: str | None = None) -> logging.Logger:
    """Configure the root logger once. Later calls are no-ops."""
    global _configured

    root_logger = logging.getLogger()
    if _configured:
        return root_logger

    root_logger.setLevel((level or settings.log_level).upper())
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_file = settings.log_file if log_file is None else log_file
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    _configured = True
    logging.getLogger(__name__).info("Logging initialized (level=%s, file=%s)", root_logger.level, log_file or "-")
    return root_logger
