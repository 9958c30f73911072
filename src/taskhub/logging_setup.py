# src/taskhub/logging_setup.py

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from pathlib import Path

APP_LOGGER = "taskhub"
LOG_FILE_NAME = "taskhub.log"

# Chatty app sub-loggers: shown on the console only from WARNING.
QUIET_NAMESPACES = ("taskhub.storage",)

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console view of the log stream.

    taskhub records pass, except quiet namespaces below WARNING.
    Everything else (third-party, py.warnings) needs ERROR.
    """

    def __init__(self, quiet: Iterable[str] = QUIET_NAMESPACES) -> None:
        super().__init__()
        self._quiet = tuple(quiet)

    @staticmethod
    def _under(name: str, namespace: str) -> bool:
        return name == namespace or name.startswith(namespace + ".")

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._under(record.name, APP_LOGGER):
            return record.levelno >= logging.ERROR
        if any(self._under(record.name, ns) for ns in self._quiet):
            return record.levelno >= logging.WARNING
        return True


def _console_handler(level: int, formatter: logging.Formatter, quiet: Iterable[str]) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(_ConsoleNoiseFilter(quiet))
    return handler


def _file_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.FileHandler(str(path), encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskhub",
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    quiet: Iterable[str] = QUIET_NAMESPACES,
) -> Path:
    """
    Install a filtered stderr handler and a full file handler on the root logger.

    Replaces any handlers already installed. Returns the log file path.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)
    root.addHandler(_console_handler(console_level, formatter, quiet))
    root.addHandler(_file_handler(log_file, file_level, formatter))

    logging.captureWarnings(True)
    return log_file
