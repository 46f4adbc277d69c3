"""
Logging system for HTTP Pipeline.

Provides structured logging with multiple formats, handlers, and filters.

Example:
    >>> from http_pipeline.core.logging import get_logger, LoggingConfig
    >>>
    >>> logger = get_logger(LoggingConfig.create(level="DEBUG", format="colored"))
    >>> logger.info("Request started", method="GET", url="https://api.com")
"""

from .config import LoggingConfig, LogLevel, LogFormat
from .logger import PipelineLogger, get_logger, configure_logging
from .formatters import JSONFormatter, TextFormatter, ColoredFormatter, get_formatter
from .filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    set_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    clear_correlation_id,
)
from .handlers import build_handlers, create_console_handler, create_file_handler

__all__ = [
    # Config
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    # Logger
    "PipelineLogger",
    "get_logger",
    "configure_logging",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "ColoredFormatter",
    "get_formatter",
    # Filters
    "CorrelationIdFilter",
    "ExtraFieldsFilter",
    "set_correlation_id",
    "get_correlation_id",
    "reset_correlation_id",
    "clear_correlation_id",
    # Handlers
    "build_handlers",
    "create_console_handler",
    "create_file_handler",
]
