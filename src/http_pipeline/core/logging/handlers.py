"""
Handlers for PipelineLogger.

build_handlers() turns a LoggingConfig into the stdout and rotating file
handlers, sharing one formatter and the correlation / static field filters.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import IO, List, Optional

from .config import LoggingConfig
from .filters import CorrelationIdFilter, ExtraFieldsFilter
from .formatters import get_formatter


def _attach(handler: logging.Handler, level: int, formatter: logging.Formatter,
            filters: Optional[List[logging.Filter]]) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    for f in filters or ():
        handler.addFilter(f)


def create_console_handler(
    level: int,
    formatter: logging.Formatter,
    filters: Optional[List[logging.Filter]] = None,
    stream: Optional[IO[str]] = None,
) -> logging.StreamHandler:
    """Handler writing to stream (stdout by default)."""
    handler = logging.StreamHandler(stream or sys.stdout)
    _attach(handler, level, formatter, filters)
    return handler


def create_file_handler(
    file_path: str,
    level: int,
    formatter: logging.Formatter,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    filters: Optional[List[logging.Filter]] = None,
) -> RotatingFileHandler:
    """Rotating UTF-8 file handler; the parent directory is created if missing."""
    Path(file_path).parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(file_path, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8')
    _attach(handler, level, formatter, filters)
    return handler


def build_filters(config: LoggingConfig) -> List[logging.Filter]:
    filters: List[logging.Filter] = []
    if config.enable_correlation_id:
        filters.append(CorrelationIdFilter())
    if config.extra_fields:
        filters.append(ExtraFieldsFilter(dict(config.extra_fields)))
    return filters


def build_handlers(config: LoggingConfig) -> List[logging.Handler]:
    """
    Handlers described by config: stdout if enable_console, a rotating
    file if file_path is set. Empty list means records are dropped.

    Example:
        >>> for handler in build_handlers(LoggingConfig.create(format="json")):
        ...     logging.getLogger("http_pipeline").addHandler(handler)
    """
    level = config.level.levelno
    formatter = get_formatter(config.format)
    filters = build_filters(config)

    handlers: List[logging.Handler] = []
    if config.enable_console:
        handlers.append(create_console_handler(level, formatter, filters))
    if config.file_path:
        handlers.append(create_file_handler(
            config.file_path, level, formatter,
            max_bytes=config.max_bytes,
            backup_count=config.backup_count,
            filters=filters,
        ))
    return handlers
