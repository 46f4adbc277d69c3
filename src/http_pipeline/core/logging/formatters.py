"""
Formatters for pipeline log records.

HttpClient records carry request fields (method, url, status_code,
duration, attempts, fingerprint...). JSON output keeps them in a fixed
order right after the message; text output folds them into a one-line
request summary.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Tuple, Union

from .config import LogFormat

# Поля запроса в порядке вывода
REQUEST_FIELDS = (
    "method", "url", "status_code", "duration",
    "attempt", "attempts", "from_cache", "fingerprint",
)

_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


def split_fields(record: logging.LogRecord) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Extra поля записи: (поля запроса в порядке REQUEST_FIELDS, остальные)."""
    extra = {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS and not key.startswith('_')
    }
    request = {name: extra.pop(name) for name in REQUEST_FIELDS if name in extra}
    return request, extra


def _utc_timestamp(record: logging.LogRecord) -> str:
    moment = datetime.fromtimestamp(record.created, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Example output:
        {"timestamp": "2024-01-15T10:30:45.123Z", "level": "INFO",
         "logger": "http_pipeline", "correlation_id": "3f2a9c1e0b7d4a55",
         "message": "Request completed", "method": "GET",
         "url": "https://api.example.com/users", "status_code": 200,
         "duration": 0.153, "attempts": 1}
    """

    def format(self, record: logging.LogRecord) -> str:
        request, extra = split_fields(record)

        payload: Dict[str, Any] = {
            "timestamp": _utc_timestamp(record),
            "level": record.levelname,
            "logger": record.name,
        }
        correlation_id = extra.pop("correlation_id", None)
        if correlation_id:
            payload["correlation_id"] = correlation_id
        payload["message"] = record.getMessage()
        payload.update(request)
        payload.update(extra)

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """
    Human readable line.

    Example output:
        [2024-01-15 10:30:45] [INFO] [http_pipeline] (3f2a9c1e0b7d4a55) Request completed:
        GET https://api.example.com/users -> 200 in 0.153s attempts=1
    """

    def __init__(self):
        super().__init__(datefmt='%Y-%m-%d %H:%M:%S')

    def format(self, record: logging.LogRecord) -> str:
        request, extra = split_fields(record)
        correlation_id = extra.pop("correlation_id", None)

        line = (
            f"[{self.formatTime(record, self.datefmt)}] "
            f"[{self.level_label(record.levelname)}] [{record.name}] "
        )
        if correlation_id:
            line += f"({correlation_id}) "
        line += record.getMessage()

        summary = self.summarize(request)
        if summary:
            line += ": " + summary
        if extra:
            line += " " + " ".join(f"{key}={value}" for key, value in extra.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line

    def level_label(self, levelname: str) -> str:
        return levelname

    def status_label(self, status_code: Any) -> str:
        return str(status_code)

    def summarize(self, request: Dict[str, Any]) -> str:
        """'GET https://... -> 200 in 0.153s (cache) attempts=2'"""
        pieces = [str(request[name]) for name in ("method", "url") if request.get(name)]
        if request.get("status_code") is not None:
            pieces.append(f"-> {self.status_label(request['status_code'])}")
        if request.get("duration") is not None:
            pieces.append(f"in {request['duration']}s")
        if request.get("from_cache"):
            pieces.append("(cache)")
        pieces.extend(
            f"{name}={request[name]}" for name in ("attempt", "attempts", "fingerprint") if name in request
        )
        return " ".join(pieces)


class ColoredFormatter(TextFormatter):
    """TextFormatter with ANSI colored level and HTTP status."""

    RESET = '\033[0m'
    LEVEL_COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[1;31m',
    }

    def level_label(self, levelname: str) -> str:
        color = self.LEVEL_COLORS.get(levelname)
        return f"{color}{levelname}{self.RESET}" if color else levelname

    def status_label(self, status_code: Any) -> str:
        if not isinstance(status_code, int):
            return str(status_code)
        if status_code >= 500:
            color = '\033[31m'
        elif status_code >= 400:
            color = '\033[33m'
        else:
            color = '\033[32m'
        return f"{color}{status_code}{self.RESET}"


_FORMATTERS = {
    LogFormat.JSON: JSONFormatter,
    LogFormat.TEXT: TextFormatter,
    LogFormat.COLORED: ColoredFormatter,
}


def get_formatter(format_type: Union[str, LogFormat]) -> logging.Formatter:
    """
    Formatter for a LogFormat or its name (case-insensitive).

    Raises:
        ValueError: If format_type is unknown
    """
    try:
        key = LogFormat(format_type.lower())
    except ValueError:
        raise ValueError(
            f"Unknown format type: {format_type}. "
            f"Available: {', '.join(f.value for f in LogFormat)}"
        ) from None
    return _FORMATTERS[key]()
