"""
Logging setup for the catalog command line and long-running watchers.

Everything goes through the root logger; library modules only call
logging.getLogger(__name__).
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logging(
    log_dir: Optional[str] = None,
    log_level: str = "INFO",
    service_name: str = "consul-catalog",
    enable_file: bool = True,
    enable_console: bool = True,
    max_bytes: Optional[int] = None,
    backup_count: Optional[int] = None,
    rotation_strategy: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        log_dir: Directory for log files; no files are written when None
        log_level: Level name for the root logger and the console
        service_name: Base name of the log files
        enable_file: Write <service_name>.log and <service_name>_errors.log
        enable_console: Log to stderr, leaving stdout to command output
        max_bytes: Size limit per file for 'size' rotation (default: 10MB)
        backup_count: Rotated files to keep (default: 5)
        rotation_strategy: 'size' or 'time' (daily at midnight); default 'size'

    Returns:
        logging.Logger: Configured root logger
    """
    level = logging.getLevelName(log_level.upper())
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if enable_file and log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_formatter = logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

        for suffix, handler_level in (("", logging.DEBUG), ("_errors", logging.ERROR)):
            handler = _rotating_handler(
                log_path / f"{service_name}{suffix}.log",
                (rotation_strategy or "size").lower(),
                DEFAULT_MAX_BYTES if max_bytes is None else max_bytes,
                DEFAULT_BACKUP_COUNT if backup_count is None else backup_count,
            )
            handler.setLevel(handler_level)
            handler.setFormatter(file_formatter)
            root_logger.addHandler(handler)

    if enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        root_logger.addHandler(console_handler)

    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))

    return root_logger


def _rotating_handler(
    log_file: Path, rotation_strategy: str, max_bytes: int, backup_count: int
) -> logging.Handler:
    if rotation_strategy == "time":
        return logging.handlers.TimedRotatingFileHandler(
            log_file, when="midnight", backupCount=backup_count, encoding="utf-8"
        )
    return logging.handlers.RotatingFileHandler(
        log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
