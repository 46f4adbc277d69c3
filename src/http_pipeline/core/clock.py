"""Источник времени для TTL кэша и задержек retry."""

import asyncio
import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Монотонные часы + асинхронный сон."""

    def now(self) -> float:
        """Текущее время в секундах (монотонное)."""
        ...

    async def sleep(self, seconds: float) -> None:
        """Приостановить задачу на seconds."""
        ...


class MonotonicClock:
    """Часы по умолчанию: time.monotonic() и asyncio.sleep()."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
