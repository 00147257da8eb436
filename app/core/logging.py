import logging
import sys
from typing import Any

from app.core.config import settings

CONSOLE_HANDLER_NAME = "energy_calculator.console"

# Third-party loggers and the level they are held at
LIBRARY_LEVELS = {
    "uvicorn": "INFO",
    "uvicorn.access": "INFO" if settings.DEBUG else "WARNING",
    "sqlalchemy.engine": "WARNING",
    "redis": "WARNING",
    "aiosmtplib": "WARNING",
}


def setup_logging() -> None:
    """Attach the stdout handler to the root logger and quiet library loggers.

    Safe to call more than once: the handler is looked up by name and only
    added when missing.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(settings.LOG_LEVEL)

    if not any(h.get_name() == CONSOLE_HANDLER_NAME for h in root_logger.handlers):
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.set_name(CONSOLE_HANDLER_NAME)
        console_handler.setFormatter(logging.Formatter(fmt=settings.LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        console_handler.setLevel(settings.LOG_LEVEL)
        root_logger.addHandler(console_handler)

    for logger_name, level in LIBRARY_LEVELS.items():
        logging.getLogger(logger_name).setLevel(level)


class StructuredLogger:
    """Logger that appends keyword fields as ``key=value`` pairs"""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    @staticmethod
    def format(message: str, **fields: Any) -> str:
        extra = " | ".join(f"{k}={v}" for k, v in fields.items() if v is not None)
        return f"{message} | {extra}" if extra else message

    def _log(self, level: int, message: str, **fields: Any) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, self.format(message, **fields))

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        self._log(logging.ERROR, message, **fields)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance"""
    return StructuredLogger(name)
