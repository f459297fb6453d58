import logging
import sys
from logging.handlers import RotatingFileHandler

from subtracker.config import LOG_FILE, LOG_LEVEL

FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logger(name: str = "subtracker", log_file: str = LOG_FILE, level=LOG_LEVEL) -> logging.Logger:
    """Configure and return a logger with a console handler and an optional rotating file handler.

    Safe to call repeatedly: a logger that already has handlers is returned as is.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        return logger

    formatter = logging.Formatter(FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
