"""
Цепочки перехватчиков (interceptors) запроса и ответа.

Слоты хранятся в разреженном словаре index -> пара обработчиков:
eject очищает слот, но его индекс никогда не переиспользуется и не
сдвигается, поэтому id остальных слотов остаются валидными.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Generic, Iterator, Optional, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar('T')

FulfilledHandler = Callable[[T], Union[T, Awaitable[T]]]
RejectedHandler = Callable[[BaseException], Any]


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass
class InterceptorSlot(Generic[T]):
    """Позиция в цепочке: обработчик успеха и обработчик ошибки."""
    on_fulfilled: Optional[FulfilledHandler] = None
    on_rejected: Optional[RejectedHandler] = None

    @property
    def ejected(self) -> bool:
        return self.on_fulfilled is None and self.on_rejected is None


class InterceptorChain(Generic[T]):
    """
    Упорядоченная изменяемая цепочка обработчиков.

    Обработчики могут быть sync или async; каждый дожидается завершения
    предыдущего (строго последовательно).

    Example:
        >>> chain = InterceptorChain()
        >>> slot_id = chain.use(lambda request: request.with_headers({"X-Id": "1"}))
        >>> request = await chain.run(request)
        >>> chain.eject(slot_id)
    """

    def __init__(self, name: str = "interceptors"):
        self.name = name
        self._slots: Dict[int, InterceptorSlot] = {}
        self._next_id = 0

    def use(
        self,
        on_fulfilled: Optional[FulfilledHandler] = None,
        on_rejected: Optional[RejectedHandler] = None,
    ) -> int:
        """
        Добавить слот в конец цепочки.

        Returns:
            Стабильный индекс слота для eject()
        """
        slot_id = self._next_id
        self._next_id += 1
        self._slots[slot_id] = InterceptorSlot(on_fulfilled, on_rejected)
        return slot_id

    register = use

    def eject(self, slot_id: int) -> None:
        """Очистить слот. No-op для уже очищенного или несуществующего id."""
        slot = self._slots.get(slot_id)
        if slot is not None:
            slot.on_fulfilled = None
            slot.on_rejected = None

    def clear(self) -> None:
        """Очистить все слоты (индексы сохраняются)."""
        for slot_id in list(self._slots):
            self.eject(slot_id)

    def _live(self) -> Iterator[InterceptorSlot]:
        for slot_id in sorted(self._slots):
            slot = self._slots[slot_id]
            if not slot.ejected:
                yield slot

    def __len__(self) -> int:
        return sum(1 for _ in self._live())

    async def run(self, value: T) -> T:
        """
        Провести значение через все обработчики успеха по порядку.

        Если обработчик бросает исключение, вызывается rejection handler
        того же слота (только для наблюдения), и исключение пробрасывается.
        """
        for slot in list(self._live()):
            if slot.on_fulfilled is None:
                continue
            try:
                value = await _maybe_await(slot.on_fulfilled(value))
            except Exception as error:
                logger.debug("%s: fulfilled handler raised %s", self.name, type(error).__name__)
                if slot.on_rejected is not None:
                    await _maybe_await(slot.on_rejected(error))
                raise
        return value

    async def recover(self, error: Exception) -> Any:
        """
        Провести ошибку через все обработчики ошибок по порядку.

        - handler вернул None: ошибка замечена, идём дальше
        - handler бросил исключение: оно становится текущей ошибкой
        - handler вернул значение: ошибка превращена в успех

        Raises:
            Последнюю текущую ошибку, если никто не восстановил запрос
        """
        current = error
        for slot in list(self._live()):
            if slot.on_rejected is None:
                continue
            try:
                result = await _maybe_await(slot.on_rejected(current))
            except Exception as replaced:
                current = replaced
                continue
            if result is not None:
                logger.debug("%s: rejected handler recovered from %s", self.name, type(current).__name__)
                return result
        raise current


class Interceptors:
    """Пара цепочек клиента: request и response."""

    def __init__(self):
        self.request: InterceptorChain = InterceptorChain("request interceptors")
        self.response: InterceptorChain = InterceptorChain("response interceptors")
