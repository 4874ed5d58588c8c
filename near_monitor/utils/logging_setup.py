"""
Logging Setup
=============

Root logger configuration shared by the CLI and the bot entry script.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Union

from ..config import config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Third-party loggers that are noisy at INFO
_NOISY_LOGGERS = ("urllib3", "requests", "httpx", "telegram")


def dated_log_path(log_file: Union[str, Path]) -> Path:
    """logs/near_monitor.log -> logs/near_monitor_YYYY-MM-DD.log"""
    log_path = Path(log_file)
    date_str = datetime.now().strftime("%Y-%m-%d")
    return log_path.parent / f"{log_path.stem}_{date_str}{log_path.suffix}"


def setup_logging(
    log_level: str = None,
    log_file: Union[str, Path, None] = None,
    to_file: bool = True,
) -> None:
    """
    Configure the root logger with console and date-stamped file output.

    Args:
        log_level: Level name (default from config)
        log_file: Base log file path (default from config)
        to_file: If False, only log to stdout
    """
    log_level = (log_level or config.log_level).upper()
    log_file = log_file or config.log_file

    # Clear handlers left over from earlier basicConfig calls
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, log_level, logging.INFO))

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if to_file:
        dated_log_file = dated_log_path(log_file)
        try:
            dated_log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(dated_log_file)
        except OSError as e:
            root_logger.warning(f"File logging disabled, cannot open {dated_log_file}: {e}")
        else:
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            root_logger.info(f"Logging to: {dated_log_file}")

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
