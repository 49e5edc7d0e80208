"""Logging for the hookcats logger tree.

Records carry their keyword fields in ``record.fields``. Two renderings:
``json`` (one object per line, for pipes and log files) and ``rich``
(readable console lines). Both write to stderr because command output
owns stdout.
"""

import logging
import json
import os
import sys
from datetime import datetime, UTC
from typing import Any, Dict, IO, Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "hookcats"


def _record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = getattr(record, "fields", None) or {}
    return {key: value for key, value in fields.items() if value is not None}


class JSONFormatter(logging.Formatter):
    _BASE_KEYS = ("timestamp", "level", "logger", "message")

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in _record_fields(record).items():
            log_entry[f"field_{key}" if key in self._BASE_KEYS else key] = value
        if record.exc_info:
            log_entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


class KeyValueFormatter(logging.Formatter):
    """``message key=value ...`` for the rich console handler."""

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        pairs = " ".join(f"{key}={value}" for key, value in _record_fields(record).items())
        return f"{message} {pairs}" if pairs else message


def _build_handler(log_format: str, stream: Optional[IO[str]]) -> logging.Handler:
    if log_format == "rich":
        handler: logging.Handler = RichHandler(
            console=Console(file=stream or sys.stderr),
            show_path=False,
            rich_tracebacks=False,
        )
        handler.setFormatter(KeyValueFormatter())
        return handler
    if log_format == "json":
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(JSONFormatter())
        return handler
    raise ValueError(f"Unknown log format '{log_format}'")


def setup_logging(level: str = "WARNING", log_format: str = "json", stream: Optional[IO[str]] = None) -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.upper())
    logger.handlers = [_build_handler(log_format.lower(), stream)]
    logger.propagate = False

    # The file log is always JSON so it stays machine-readable
    log_dir = os.getenv("HOOKCATS_LOG_DIR")
    if log_dir:
        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = logging.FileHandler(os.path.join(log_dir, "hookcats.log"))
            file_handler.setFormatter(JSONFormatter())
            logger.addHandler(file_handler)
        except OSError as e:
            sys.stderr.write(f"Failed to setup file logging: {e}\n")

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return logger


def get_logger(name: str) -> logging.Logger:
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


class StructuredLogger:
    """Keyword-field logger. ``bind`` returns a child that repeats fixed fields on every record."""

    def __init__(self, name: str, **context: Any):
        self.logger = get_logger(name)
        self.context = context

    def bind(self, **fields: Any) -> "StructuredLogger":
        return StructuredLogger(self.logger.name, **{**self.context, **fields})

    def _log(self, level: int, msg: str, fields: Dict[str, Any], exc_info: bool = False) -> None:
        if self.logger.isEnabledFor(level):
            self.logger.log(level, msg, exc_info=exc_info, extra={"fields": {**self.context, **fields}})

    def debug(self, msg: str, **kwargs):
        self._log(logging.DEBUG, msg, kwargs)

    def info(self, msg: str, **kwargs):
        self._log(logging.INFO, msg, kwargs)

    def warning(self, msg: str, **kwargs):
        self._log(logging.WARNING, msg, kwargs)

    def error(self, msg: str, **kwargs):
        self._log(logging.ERROR, msg, kwargs)

    def exception(self, msg: str, **kwargs):
        self._log(logging.ERROR, msg, kwargs, exc_info=True)
