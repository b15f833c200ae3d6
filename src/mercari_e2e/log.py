import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from .config import get_settings


LOGGER_NAME = "mercari_e2e"

RESET = "\x1b[0m"
GREEN = "\x1b[32m"
YELLOW = "\x1b[33m"

LEVEL_COLORS = {
    logging.DEBUG: "\x1b[38;5;32m",
    logging.INFO: "\x1b[34m",
    logging.WARNING: YELLOW,
    logging.ERROR: "\x1b[31m",
    logging.CRITICAL: "\x1b[35m",
}


class LineFormatter(logging.Formatter):
    """Renders ``<timestamp> [<level>]: <message>`` with an ISO-8601 UTC timestamp."""

    def __init__(self, colorize: bool = False):
        super().__init__("%(asctime)s [%(levelname)s]: %(message)s")
        self.colorize = colorize

    def formatTime(self, record, datefmt=None):
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{int(record.msecs):03d}Z"

    def format(self, record):
        line = f"{self.formatTime(record)} [{record.levelname.lower()}]: {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        if self.colorize:
            color = LEVEL_COLORS.get(record.levelno)
            if color:
                return f"{color}{line}{RESET}"
        return line


class StrictFileHandler(logging.FileHandler):
    """File handler whose write failures propagate instead of being printed to stderr."""

    def handleError(self, record):
        raise


def configure_logging(log_file: str | None = None, level: str | None = None) -> logging.Logger:
    """Attach console and file handlers to the package logger once.

    An unwritable log file raises here; it is not caught.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if getattr(logger, "_mercari_configured", False):
        return logger

    settings = get_settings()
    log_file = log_file or settings.log_file
    logger.setLevel(level or settings.log_level)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(LineFormatter(colorize=True))
    logger.addHandler(console)

    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = StrictFileHandler(path, encoding="utf-8")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(LineFormatter())
    logger.addHandler(file_handler)

    logger._mercari_configured = True
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    if not name:
        return logging.getLogger(LOGGER_NAME)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
