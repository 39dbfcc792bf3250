import logging
from logging.handlers import RotatingFileHandler

from .config import log_dir, log_level

LOG_FILE_NAME = "memory_helper.log"


def setup_logger(name: str) -> logging.Logger:
    """Return the ``memory_helper.<name>`` logger, writing to the console and a rotating file."""
    logger = logging.getLogger(f"memory_helper.{name}")
    if logger.handlers:
        return logger

    directory = log_dir()
    directory.mkdir(parents=True, exist_ok=True)
    logger.setLevel(log_level())
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handlers = [
        RotatingFileHandler(directory / LOG_FILE_NAME, maxBytes=2_000_000, backupCount=5, encoding="utf-8"),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
