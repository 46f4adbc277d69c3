"""
Logging configuration for HTTP Pipeline.

File logging is on when file_path is set. slow_request_threshold turns
"Request completed" into a WARNING "Slow request" record for flights
that took at least that many seconds.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from ..exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def levelno(self) -> int:
        """Numeric level of the standard logging module."""
        return logging.getLevelName(self.value)


class LogFormat(str, Enum):
    """Log output formats."""
    JSON = "json"
    TEXT = "text"
    COLORED = "colored"


def _parse_enum(enum_cls, raw: Any, what: str):
    if isinstance(raw, enum_cls):
        return raw
    normalized = str(raw).upper() if enum_cls is LogLevel else str(raw).lower()
    try:
        return enum_cls(normalized)
    except ValueError:
        choices = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(f"Unknown log {what} {raw!r}. Available: {choices}") from None


@dataclass(frozen=True)
class LoggingConfig:
    """
    Configuration for pipeline logging.

    Attributes:
        level: Minimal level for the pipeline logger
        format: json, text or colored
        enable_console: Write records to stdout
        file_path: Rotating log file (None = no file logging)
        max_bytes: Rotation size of the log file
        backup_count: Rotated files to keep
        enable_correlation_id: Stamp records with the per-call correlation id
        slow_request_threshold: Seconds after which a flight is logged as slow
        extra_fields: Static fields added to every record (service, env...)

    Example:
        >>> config = LoggingConfig.create(level="DEBUG", format="json", slow_request_threshold=2.0)
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    enable_console: bool = True
    file_path: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    enable_correlation_id: bool = True
    slow_request_threshold: Optional[float] = None
    extra_fields: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'level', _parse_enum(LogLevel, self.level, "level"))
        object.__setattr__(self, 'format', _parse_enum(LogFormat, self.format, "format"))
        object.__setattr__(self, 'extra_fields', MappingProxyType(dict(self.extra_fields or {})))

        if self.max_bytes <= 0:
            raise ConfigurationError("log max_bytes must be positive")
        if self.backup_count < 0:
            raise ConfigurationError("log backup_count must be >= 0")
        if self.slow_request_threshold is not None and self.slow_request_threshold < 0:
            raise ConfigurationError("slow_request_threshold must be >= 0")

    @property
    def enable_file(self) -> bool:
        return bool(self.file_path)

    def is_slow(self, duration: float) -> bool:
        """Flight duration (seconds) reaches slow_request_threshold."""
        return self.slow_request_threshold is not None and duration >= self.slow_request_threshold

    @classmethod
    def create(
        cls,
        level: str = "INFO",
        format: str = "text",
        enable_console: bool = True,
        enable_file: bool = False,
        file_path: Optional[str] = None,
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
        enable_correlation_id: bool = True,
        slow_request_threshold: Optional[float] = None,
        extra_fields: Optional[Mapping[str, Any]] = None,
    ) -> "LoggingConfig":
        """
        Build a config from plain values (env vars, YAML).

        Raises:
            ConfigurationError: Unknown level/format, or enable_file without file_path
        """
        if enable_file and not file_path:
            raise ConfigurationError("file_path is required when enable_file=True")
        return cls(
            level=level,
            format=format,
            enable_console=enable_console,
            file_path=file_path if enable_file else None,
            max_bytes=max_bytes,
            backup_count=backup_count,
            enable_correlation_id=enable_correlation_id,
            slow_request_threshold=slow_request_threshold,
            extra_fields=extra_fields or {},
        )
