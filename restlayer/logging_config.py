from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from typing import Optional

import logging
import os


def setup_logging(
    log_dir: Optional[str] = None,
    level: str = 'warning',
) -> logging.Logger:
    log_dir = log_dir or os.path.join(os.path.expanduser('~'), '.restlayer_logs')
    os.makedirs(log_dir, exist_ok=True)
    log_file = f"restlayer_{datetime.now().strftime('%Y-%m-%d')}.log"
    log_path = os.path.join(log_dir, log_file)

    logger: logging.Logger = logging.getLogger('restlayer')
    logger.setLevel(logging.DEBUG)
    if logger.handlers:
        return logger

    # Rotate every day, keep logs for 7 days.
    file_handler = TimedRotatingFileHandler(log_path, when='midnight', interval=1, backupCount=7)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    ))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.getLevelName(level.upper()))
    console_handler.setFormatter(logging.Formatter('%(levelname)s - %(message)s'))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger
