"""
Media Service logging
=====================
JSON lines on stdout, one object per record. Context passed with
``extra={...}`` is merged into the object as top-level keys; production and
staging also write rotating files under ``app/logs``.
"""

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

SERVICE = "media_service"

# Attributes every LogRecord carries; anything else came in through extra=
_STANDARD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {
    "message",
    "asctime",
    "taskName",
}


class MediaJSONFormatter(logging.Formatter):
    def __init__(self, exclude_fields: Optional[Iterable[str]] = None):
        super().__init__()
        self.exclude_fields = frozenset(exclude_fields or ())

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "service": SERVICE,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and key not in self.exclude_fields
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def _rotating(
    path: Path, level: int, formatter: logging.Formatter, max_bytes: int, backups: int
) -> logging.Handler:
    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backups)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_media_logging(
    service_name: str = SERVICE,
    log_level: str = "INFO",
    enable_file_logging: bool = False,
    log_dir: Optional[str] = None,
    max_file_size: int = 100 * 1024 * 1024,
    backup_count: int = 5,
    exclude_fields: Optional[Iterable[str]] = None,
) -> logging.Logger:
    """Return the named logger, (re)configured to emit JSON lines."""
    level = logging.getLevelName(log_level.upper())
    formatter = MediaJSONFormatter(exclude_fields)

    logger = logging.getLogger(service_name)
    logger.setLevel(level)
    logger.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if enable_file_logging:
        directory = Path(log_dir) if log_dir else Path(__file__).parent.parent / "logs"
        directory.mkdir(parents=True, exist_ok=True)
        logger.addHandler(
            _rotating(
                directory / f"{service_name}.log",
                level,
                formatter,
                max_file_size,
                backup_count,
            )
        )
        logger.addHandler(
            _rotating(
                directory / f"{service_name}_errors.log",
                logging.ERROR,
                formatter,
                max_file_size,
                backup_count,
            )
        )

    return logger
