"""Structured logger shared by all bytescope components."""

import logging
import threading
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "bytescope"

_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(threadName)s %(message)s"


def _format_extra(message: str, extra: Optional[Dict[str, Any]]) -> str:
    """Append structured context to a log message as key=value pairs."""
    if not extra:
        return message
    context = " ".join(f"{key}={value}" for key, value in extra.items())
    return f"{message} [{context}]"


class ByteScopeLogger:
    """
    Process-wide logger with structured context.

    Every call accepts an ``extra`` mapping which is rendered into the
    message, so the same context shows up on the console and in the
    log file regardless of handler formatting.
    """

    _instance: Optional["ByteScopeLogger"] = None
    _instance_lock = threading.Lock()

    def __init__(self, name: str = LOGGER_NAME):
        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.INFO)

    @classmethod
    def get_instance(cls) -> "ByteScopeLogger":
        """Return the shared logger, creating it on first use."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls):
        """Drop the shared logger and its handlers (used by tests)."""
        with cls._instance_lock:
            if cls._instance is not None:
                cls._instance._remove_handlers()
                cls._instance._logger.propagate = True
            cls._instance = None

    @property
    def level(self) -> int:
        return self._logger.level

    def configure(
        self,
        level: str = "INFO",
        console: bool = True,
        log_file: Optional[str] = None,
        rotation: str = "daily",
        retention_days: int = 30,
        rich_console: Optional[Console] = None,
    ):
        """
        Install handlers according to the logging configuration.

        Args:
            level: Logging level name
            console: Log to stderr through rich
            log_file: Optional log file path
            rotation: "daily" for midnight rotation, "none" for a plain file
            retention_days: Number of rotated files to keep
            rich_console: Console to log through (defaults to stderr)
        """
        self._remove_handlers()
        self._logger.setLevel(getattr(logging, level.upper()))
        self._logger.propagate = False

        if console:
            handler = RichHandler(
                console=rich_console or Console(stderr=True),
                show_path=False,
                rich_tracebacks=True,
            )
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)

        if log_file:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            if rotation == "daily":
                file_handler: logging.Handler = TimedRotatingFileHandler(
                    path, when="midnight", backupCount=retention_days, encoding="utf-8"
                )
            else:
                file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
            self._logger.addHandler(file_handler)

        if not self._logger.handlers:
            self._logger.addHandler(logging.NullHandler())

    def _remove_handlers(self):
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._logger.debug(_format_extra(message, extra))

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._logger.info(_format_extra(message, extra))

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        self._logger.warning(_format_extra(message, extra))

    def error(
        self,
        message: str,
        extra: Optional[Dict[str, Any]] = None,
        exc_info: bool = False,
    ):
        self._logger.error(_format_extra(message, extra), exc_info=exc_info)
