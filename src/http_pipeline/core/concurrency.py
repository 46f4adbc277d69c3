"""
Single-flight: не более одного одновременного вызова на fingerprint.

Одновременные вызовы с одинаковым ключом получают один и тот же
результат (успех или ошибку). Отмена только удаляет учётную запись,
уже запущенный вызов транспорта продолжается.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ConcurrencyController:
    """
    Реестр выполняющихся операций по ключу.

    Example:
        >>> controller = ConcurrencyController()
        >>> a, b = await asyncio.gather(
        ...     controller.execute("GET:/users", fetch_users),
        ...     controller.execute("GET:/users", fetch_users),
        ... )  # fetch_users вызван один раз
    """

    def __init__(self):
        self._pending: Dict[str, "asyncio.Task[Any]"] = {}

    async def execute(self, key: str, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Вернуть результат выполняющейся операции key или запустить новую.

        Регистрация удаляется, когда задача завершается, независимо от
        исхода. Ожидание через shield: отмена одного ожидающего не
        отменяет общий вызов.
        """
        task = self._pending.get(key)
        if task is not None:
            logger.debug("Joining in-flight request: %s", key)
        else:
            task = asyncio.ensure_future(operation())
            self._pending[key] = task
            task.add_done_callback(lambda finished: self._release(key, finished))

        return await asyncio.shield(task)

    def _release(self, key: str, task: "asyncio.Task[Any]") -> None:
        # по ключу уже может быть зарегистрирована другая задача (после cancel)
        if self._pending.get(key) is task:
            del self._pending[key]
        if not task.cancelled():
            # ошибку уже получили ожидающие; помечаем как извлечённую
            task.exception()

    def owns(self, key: str) -> bool:
        """Текущая задача всё ещё зарегистрирована под key (не отменена)."""
        try:
            current = asyncio.current_task()
        except RuntimeError:
            return False
        return current is not None and self._pending.get(key) is current

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    def cancel(self, key: str) -> None:
        """Забыть операцию key. Сам вызов не прерывается."""
        if self._pending.pop(key, None) is not None:
            logger.debug("Request bookkeeping cancelled: %s", key)

    def cancel_all(self) -> None:
        """Забыть все операции."""
        self._pending.clear()

    def pending_keys(self) -> List[str]:
        return list(self._pending.keys())

    def __len__(self) -> int:
        return len(self._pending)
