"""
Хранилище ключ/значение для токенов и статистики.

Клиент работает и без хранилища; его используют только плагины
(AuthPlugin) и RequestStats.
"""

from typing import Any, Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class Storage(Protocol):
    """Минимальный контракт persistent хранилища."""

    def get(self, key: str) -> Optional[Any]:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryStorage:
    """
    Хранилище в памяти процесса.

    Example:
        >>> storage = MemoryStorage({"token": "abc"})
        >>> storage.get("token")
        'abc'
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data
