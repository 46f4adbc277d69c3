"""Счётчики запросов клиента."""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from .storage import Storage


@dataclass
class _Counters:
    total: int = 0
    success: int = 0
    error: int = 0
    total_time: float = 0.0
    cache_hits: int = 0
    retries: int = 0


class RequestStats:
    """
    Статистика запросов.

    Если передан storage, снимок сохраняется под storage_key после
    каждой записи.

    Example:
        >>> stats = RequestStats()
        >>> stats.record(success=True, duration=0.12)
        >>> stats.snapshot()["success_rate"]
        1.0
    """

    def __init__(self, storage: Optional[Storage] = None, storage_key: str = "http_pipeline:stats"):
        self.storage = storage
        self.storage_key = storage_key
        self._counters = _Counters()

    def record(self, success: bool, duration: float, from_cache: bool = False, retries: int = 0) -> None:
        c = self._counters
        c.total += 1
        c.total_time += duration
        if success:
            c.success += 1
        else:
            c.error += 1
        if from_cache:
            c.cache_hits += 1
        if retries > 0:
            c.retries += retries

        if self.storage is not None:
            self.storage.set(self.storage_key, self.snapshot())

    def snapshot(self) -> Dict[str, Any]:
        """Счётчики и производные метрики."""
        data: Dict[str, Any] = asdict(self._counters)
        total = self._counters.total

        def rate(value: float) -> float:
            return value / total if total > 0 else 0.0

        data.update(
            success_rate=rate(self._counters.success),
            error_rate=rate(self._counters.error),
            average_time=rate(self._counters.total_time),
            cache_hit_rate=rate(self._counters.cache_hits),
            retry_rate=rate(self._counters.retries),
        )
        return data

    def reset(self) -> None:
        self._counters = _Counters()
