"""
NetLog Logging Configuration

Central logging setup so the store, persistence worker and CLI share one
format.

Usage:
    from utils.logging_config import setup_logging
    setup_logging(level=logging.DEBUG, log_file="~/.local/share/netlog/netlog.log")

Modules themselves only do:
    logger = logging.getLogger(__name__)
"""

import logging
import logging.handlers
import sys
import threading
from pathlib import Path
from typing import Optional

_initialized = False
_lock = threading.Lock()

DEFAULT_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
SIMPLE_FORMAT = "%(levelname)s: %(message)s"
DEBUG_FORMAT = "%(asctime)s | %(name)s:%(lineno)d | %(levelname)s | %(message)s"

LEVEL_COLORS = {
    'DEBUG': '\033[36m',     # Cyan
    'INFO': '\033[32m',      # Green
    'WARNING': '\033[33m',   # Yellow
    'ERROR': '\033[31m',     # Red
    'CRITICAL': '\033[35m',  # Magenta
}
RESET = '\033[0m'

# Third-party loggers kept at WARNING
NOISY_LOGGERS = ['urllib3', 'asyncio']


class ColoredFormatter(logging.Formatter):
    """Formatter that colors level names on a terminal."""

    def __init__(self, fmt=None, datefmt=None, use_colors=True, stream=None):
        super().__init__(fmt, datefmt)
        stream = stream or sys.stderr
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()

    def format(self, record):
        if self.use_colors and record.levelname in LEVEL_COLORS:
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{LEVEL_COLORS[record.levelname]}{record.levelname}{RESET}"
        return super().format(record)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    use_colors: bool = True,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
    force: bool = False,
) -> None:
    """
    Configure the root logger.

    Console output goes to stderr so exported CSV on stdout stays clean.

    Args:
        level: Logging level (default INFO)
        log_file: Optional rotating log file
        log_format: Format string (default depends on level)
        use_colors: Color level names on a terminal
        max_bytes: Max log file size before rotation
        backup_count: Number of rotated files to keep
        force: Reconfigure even if already set up
    """
    global _initialized

    with _lock:
        if _initialized and not force:
            return

        if log_format is None:
            log_format = DEBUG_FORMAT if level <= logging.DEBUG else SIMPLE_FORMAT

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(ColoredFormatter(log_format, use_colors=use_colors))
        root_logger.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file).expanduser()
            log_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=max_bytes,
                backupCount=backup_count,
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
            root_logger.addHandler(file_handler)

        for lib_name in NOISY_LOGGERS:
            logging.getLogger(lib_name).setLevel(logging.WARNING)

        _initialized = True


def is_initialized() -> bool:
    return _initialized
