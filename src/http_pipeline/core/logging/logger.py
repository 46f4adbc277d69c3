"""
Main logger for HTTP Pipeline.

Wraps a standard library logger with configured handlers, formatters
and filters. Extra keyword fields are masked before they reach a record.
"""

import logging
from typing import Any, Optional

from .config import LoggingConfig
from .handlers import build_handlers
from ...utils.sanitizer import mask_sensitive_data

DEFAULT_LOGGER_NAME = "http_pipeline"

# LogRecord refuses extra keys that shadow its own attributes
_RESERVED_FIELDS = frozenset(logging.makeLogRecord({}).__dict__) | {'message', 'asctime'}


class PipelineLogger:
    """
    Structured logger for the request pipeline.

    Example:
        >>> config = LoggingConfig.create(level="INFO", format="colored")
        >>> logger = PipelineLogger(config)
        >>> logger.info("Request started", method="GET", url="https://api.com")
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = DEFAULT_LOGGER_NAME):
        self.config = config or LoggingConfig()
        self.name = name
        self._closed = False

        self._logger = logging.getLogger(name)
        self._logger.setLevel(self.config.level.levelno)
        self._logger.propagate = False

        # Reinitialising replaces previous handlers
        for handler in self._logger.handlers[:]:
            self._logger.removeHandler(handler)

        for handler in build_handlers(self.config):
            self._logger.addHandler(handler)

    @property
    def logger(self) -> logging.Logger:
        """Underlying standard library logger."""
        return self._logger

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def _log(self, level: int, message: str, fields: dict, exc_info: bool = False) -> None:
        if not self._logger.isEnabledFor(level):
            return
        extra = {
            (f"{key}_" if key in _RESERVED_FIELDS else key): value
            for key, value in mask_sensitive_data(fields).items()
        }
        self._logger.log(level, message, extra=extra, exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        """
        Log debug message.

        Example:
            >>> logger.debug("Cache hit", key="GET:https://api.com/users::")
        """
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """
        Log info message.

        Example:
            >>> logger.info("Request completed", status_code=200, duration=0.15)
        """
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log error with traceback. Call from an exception handler."""
        self._log(logging.ERROR, message, kwargs, exc_info=True)

    def close(self) -> None:
        """
        Flush and close all handlers.

        Idempotent, safe to call more than once.
        """
        if self._closed:
            return

        for handler in self._logger.handlers[:]:
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)

        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


_default_logger: Optional[PipelineLogger] = None


def get_logger(config: Optional[LoggingConfig] = None) -> PipelineLogger:
    """
    Get global logger instance.

    The config is only used on the first call.

    Example:
        >>> logger = get_logger()
        >>> logger.info("Hello")
    """
    global _default_logger

    if _default_logger is None:
        _default_logger = PipelineLogger(config)

    return _default_logger


def configure_logging(config: LoggingConfig) -> PipelineLogger:
    """
    Replace the global logger with a freshly configured one.

    Example:
        >>> logger = configure_logging(LoggingConfig.create(level="DEBUG", format="json"))
    """
    global _default_logger
    if _default_logger is not None:
        _default_logger.close()
    _default_logger = PipelineLogger(config)
    return _default_logger
