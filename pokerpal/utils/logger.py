import logging
import sys
from datetime import datetime
from pathlib import Path

from pokerpal.config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _daily_log_file() -> Path:
    log_dir = Path(Config.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f'pokerpal_{datetime.now():%Y%m%d}.log'


def setup_logger(name: str) -> logging.Logger:
    """
    Get a module logger writing to stdout and to the day's log file.

    Calling it again for the same name returns the already configured logger.
    The file always records DEBUG; stdout follows Config.DEBUG.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = logging.DEBUG if Config.DEBUG else logging.INFO
    logger.setLevel(logging.DEBUG)
    # uvicorn configures the root logger; records must not be printed twice
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [
        (logging.StreamHandler(sys.stdout), level),
        (logging.FileHandler(_daily_log_file(), encoding='utf-8'), logging.DEBUG),
    ]
    for handler, handler_level in handlers:
        handler.setLevel(handler_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
