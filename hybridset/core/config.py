"""
Configuration
=============

Process-wide settings for hybridset: streaming segment sizes and the
logging layer.

Settings are frozen once loaded. Each field can be overridden from the
environment as ``HYBRIDSET_<SECTION>__<FIELD>``; names that look like they
could carry secrets are never read.
"""

from __future__ import annotations

import hashlib
import os
import platform
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Final, Optional


_SENSITIVE_KEYS: Final[frozenset[str]] = frozenset({
    "password", "secret", "key_data", "token", "private", "credential", "salt",
})

MIN_SEGMENT_SIZE: Final[int] = 64
DEFAULT_SEGMENT_SIZE: Final[int] = 4096
DEFAULT_MAX_SEGMENT_SIZE: Final[int] = 1024 * 1024

_VALID_LOG_LEVELS: Final[frozenset[str]] = frozenset({
    "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL",
})


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


# section.field -> parser for the raw environment string
_ENV_PARSERS: Final[dict[str, Callable[[str], Any]]] = {
    "streaming.segment_size": int,
    "streaming.max_segment_size": int,
    "logging.level": str.upper,
    "logging.enable_console": _parse_bool,
    "logging.enable_file": _parse_bool,
    "logging.enable_json": _parse_bool,
    "logging.log_dir": Path,
}


def _looks_sensitive(name: str) -> bool:
    lowered = name.lower()
    return any(word in lowered for word in _SENSITIVE_KEYS)


def _default_log_dir() -> Path:
    """Per-user log directory for the current OS."""
    home = Path.home()
    system = platform.system()
    if system == "Windows":
        return Path(os.environ.get("LOCALAPPDATA", home / "AppData" / "Local")) / "HybridSet" / "Logs"
    if system == "Darwin":
        return home / "Library" / "Logs" / "HybridSet"
    state = Path(os.environ.get("XDG_STATE_HOME", home / ".local" / "state"))
    return state / "hybridset" / "logs"


@dataclass(frozen=True, slots=True)
class StreamingConfig:
    """
    Segment sizing for streaming hybrid encryption.

    segment_size is what new writers use; max_segment_size is the largest
    segment a reader accepts from a stream header.
    """

    segment_size: int = DEFAULT_SEGMENT_SIZE
    max_segment_size: int = DEFAULT_MAX_SEGMENT_SIZE

    def __post_init__(self) -> None:
        if self.max_segment_size < MIN_SEGMENT_SIZE:
            raise ValueError(f"max_segment_size must be at least {MIN_SEGMENT_SIZE}")
        if not MIN_SEGMENT_SIZE <= self.segment_size <= self.max_segment_size:
            raise ValueError(
                f"segment_size must be between {MIN_SEGMENT_SIZE} "
                f"and {self.max_segment_size}"
            )


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    level: str = "WARNING"
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    enable_console: bool = True
    enable_file: bool = False
    enable_json: bool = False
    max_file_size_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    log_dir: Path = field(default_factory=_default_log_dir)

    def __post_init__(self) -> None:
        if self.level.upper() not in _VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.level}")
        if not self.log_dir.is_absolute():
            raise ValueError(f"log_dir must be an absolute path: {self.log_dir}")


@dataclass(frozen=True, slots=True)
class AppConfig:
    app_name: str = "hybridset"
    version: str = "0.1.0"


class HybridSetConfig:
    """
    Immutable aggregate of all configuration sections.

    Usage:
        config = HybridSetConfig.get_instance()
        config.streaming.segment_size
        config.logging.level
    """

    __slots__ = ("streaming", "logging", "app", "config_hash", "_frozen")

    _instance: Optional[HybridSetConfig] = None

    def __init__(
        self,
        streaming: Optional[StreamingConfig] = None,
        logging: Optional[LoggingConfig] = None,
        app: Optional[AppConfig] = None,
    ) -> None:
        sections = {
            "streaming": streaming or StreamingConfig(),
            "logging": logging or LoggingConfig(),
            "app": app or AppConfig(),
        }
        for name, section in sections.items():
            object.__setattr__(self, name, section)

        digest = hashlib.sha256("|".join(map(repr, sections.values())).encode())
        object.__setattr__(self, "config_hash", digest.hexdigest()[:16])
        object.__setattr__(self, "_frozen", True)

    @classmethod
    def load(cls, env_prefix: str = "HYBRIDSET") -> HybridSetConfig:
        """
        Build a configuration from defaults and environment overrides.

        Examples:
            HYBRIDSET_LOGGING__LEVEL=DEBUG
            HYBRIDSET_STREAMING__SEGMENT_SIZE=65536
            HYBRIDSET_LOGGING__LOG_DIR=/var/log/hybridset

        Raises:
            ValueError: If an override has the wrong form or leaves a
                section invalid
        """
        per_section: dict[str, dict[str, Any]] = {"streaming": {}, "logging": {}}
        for name, raw in cls._parse_env_overrides(env_prefix).items():
            parser = _ENV_PARSERS.get(name)
            if parser is None:
                continue
            section, key = name.split(".", 1)
            per_section[section][key] = parser(raw)

        return cls(
            streaming=StreamingConfig(**per_section["streaming"]) if per_section["streaming"] else None,
            logging=LoggingConfig(**per_section["logging"]) if per_section["logging"] else None,
        )

    @staticmethod
    def _parse_env_overrides(prefix: str) -> dict[str, str]:
        """Map PREFIX_SECTION__FIELD variables to section.field names."""
        head = prefix.upper() + "_"
        found: dict[str, str] = {}
        for var, value in os.environ.items():
            if not var.startswith(head):
                continue
            name = var[len(head):].lower().replace("__", ".")
            if not _looks_sensitive(name):
                found[name] = value
        return found

    @classmethod
    def get_instance(cls) -> HybridSetConfig:
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the cached instance. Tests only."""
        cls._instance = None

    def as_dict(self) -> dict[str, dict[str, Any]]:
        """Plain-data view of every section."""
        return {
            name: {f.name: getattr(section, f.name) for f in fields(section)}
            for name, section in (("streaming", self.streaming), ("logging", self.logging), ("app", self.app))
        }

    def __repr__(self) -> str:
        return f"HybridSetConfig(hash={self.config_hash}, app={self.app.app_name})"

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("HybridSetConfig is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("HybridSetConfig is immutable")
