"""
Secure Logging
==============

Logging helpers that keep key material and plaintext out of log output.

Library modules log through ``logging.getLogger("hybridset.<area>")`` and
attach no handlers of their own. Applications call get_secure_logger() or
configure_root_logger() to get console and rotating-file output, with every
record passed through SecureLogFilter first.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Final, Iterable, Optional, Pattern

from hybridset.core.config import HybridSetConfig, LoggingConfig


_REDACTED: Final[str] = "[REDACTED]"

# "name=value" pairs whose value is dropped, keeping the name.
_SECRET_ASSIGNMENT: Final[Pattern[str]] = re.compile(
    r'(?i)\b(secret|shared[_-]?secret|private[_-]?key|key[_-]?data|dem[_-]?key|plaintext)'
    r'(\s*[=:]\s*)["\']?[^\s"\']+["\']?'
)

# Bare runs that look like encoded key material.
_ENCODED_MATERIAL: Final[tuple[Pattern[str], ...]] = (
    re.compile(r'[A-Za-z0-9+/]{40,}={0,2}'),
    re.compile(r'(?i)(?:0x)?[a-f0-9]{32,}'),
)

_FILE_FORMAT: Final[str] = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
)


class SecureLogFilter(logging.Filter):
    """
    Redact key material from log records in place.

    String arguments and the message template are scrubbed; bytes
    arguments are replaced outright. Records are never dropped.
    """

    def __init__(self, name: str = "", extra_patterns: Iterable[Pattern[str]] = ()) -> None:
        super().__init__(name)
        self._extra_patterns = tuple(extra_patterns)

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.scrub(record.msg)

        args = record.args
        if isinstance(args, dict):
            record.args = {key: self._scrub_arg(value) for key, value in args.items()}
        elif isinstance(args, tuple):
            record.args = tuple(self._scrub_arg(value) for value in args)
        return True

    def scrub(self, text: str) -> str:
        text = _SECRET_ASSIGNMENT.sub(lambda m: f"{m.group(1)}{m.group(2)}{_REDACTED}", text)
        for pattern in _ENCODED_MATERIAL + self._extra_patterns:
            text = pattern.sub(_REDACTED, text)
        return text

    def _scrub_arg(self, value: Any) -> Any:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return _REDACTED
        if isinstance(value, str):
            return self.scrub(value)
        return value


class StructuredLogFormatter(logging.Formatter):
    """One JSON object per line, for log shippers."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class SecureRotatingFileHandler(RotatingFileHandler):
    """RotatingFileHandler that refuses ``..`` in its path and creates the directory."""

    def __init__(self, path: str | Path, max_bytes: int = 10 * 1024 * 1024, backup_count: int = 5) -> None:
        path = Path(path)
        if ".." in path.parts:
            raise ValueError("Log path cannot contain path traversal sequences")
        path = path.resolve()
        path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")


def _build_handlers(config: LoggingConfig, log_file_stem: str) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []

    if config.enable_console:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(logging.Formatter(config.format, datefmt="%H:%M:%S"))
        handlers.append(console)

    if config.enable_file:
        file_handler = SecureRotatingFileHandler(
            config.log_dir / f"{log_file_stem}.log",
            max_bytes=config.max_file_size_bytes,
            backup_count=config.backup_count,
        )
        if config.enable_json:
            file_handler.setFormatter(StructuredLogFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=config.date_format))
        handlers.append(file_handler)

    redactor = SecureLogFilter()
    for handler in handlers:
        handler.addFilter(redactor)
    return handlers


def _attach(logger: logging.Logger, config: Optional[LoggingConfig], log_file_stem: str) -> None:
    if config is None:
        config = HybridSetConfig.get_instance().logging
    logger.setLevel(config.level.upper())
    for handler in _build_handlers(config, log_file_stem):
        logger.addHandler(handler)


def get_secure_logger(name: str, config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Return a logger with redacting console/file handlers attached.

    A logger that already has real handlers is returned unchanged, so
    calling this repeatedly for one name is safe. The logger does not
    propagate to the root logger.
    """
    logger = logging.getLogger(name)
    if any(not isinstance(h, logging.NullHandler) for h in logger.handlers):
        return logger

    _attach(logger, config, name.replace(".", "_"))
    logger.propagate = False
    return logger


def configure_root_logger(config: Optional[LoggingConfig] = None) -> None:
    """Replace the root logger's handlers with redacting ones. Call once at start-up."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    _attach(root, config, "hybridset")
