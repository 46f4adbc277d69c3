# src/http_pipeline/core/cache.py
"""
Кэш ответов с TTL.

Истечение ленивое: запись удаляется только при следующем чтении,
фонового удаления нет.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, List, Optional

from .clock import Clock, MonotonicClock

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Запись кэша."""
    value: Any
    stored_at: float
    ttl: float

    def is_fresh(self, now: float) -> bool:
        return now - self.stored_at < self.ttl


class CacheStore:
    """
    In-memory кэш, ключ - fingerprint запроса.

    Example:
        >>> cache = CacheStore()
        >>> cache.set("GET:https://api.example.com/users:{}:{}", envelope, ttl=5)
        >>> cache.get("GET:https://api.example.com/users:{}:{}") is envelope
        True
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        default_ttl: float = 300.0,
        max_size: Optional[int] = None,
    ):
        """
        Args:
            clock: Монотонные часы
            default_ttl: TTL по умолчанию (сек)
            max_size: Максимум записей (None = без ограничения)
        """
        self.clock = clock or MonotonicClock()
        self.default_ttl = default_ttl
        self.max_size = max_size
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[Any]:
        """Вернуть значение, если now - stored_at < ttl; иначе удалить и вернуть None."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return None

        if not entry.is_fresh(self.clock.now()):
            del self._entries[key]
            self._misses += 1
            logger.debug("Cache entry expired: %s", key)
            return None

        self._hits += 1
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Сохранить безусловно, перезаписывая существующую запись."""
        if key in self._entries:
            del self._entries[key]
        elif self.max_size is not None and len(self._entries) >= self.max_size:
            oldest, _ = self._entries.popitem(last=False)
            logger.debug("Cache full, dropped oldest entry: %s", oldest)

        self._entries[key] = CacheEntry(
            value=value,
            stored_at=self.clock.now(),
            ttl=self.default_ttl if ttl is None else ttl,
        )

    def delete(self, key: str) -> bool:
        """Удалить запись. True если она была."""
        return self._entries.pop(key, None) is not None

    def clear(self, pattern: Optional[str] = None) -> int:
        """
        Очистить кэш.

        Args:
            pattern: Удалить только ключи, содержащие подстроку

        Returns:
            Количество удалённых записей
        """
        if pattern is None:
            removed = len(self._entries)
            self._entries.clear()
            return removed

        matched = [key for key in self._entries if pattern in key]
        for key in matched:
            del self._entries[key]
        return len(matched)

    def keys(self) -> List[str]:
        return list(self._entries.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.is_fresh(self.clock.now())

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses
