"""
Retry engine для повторных попыток.

Включает:
- Exponential backoff: retry_delay * backoff_factor ** attempt
- Опциональный потолок и jitter
- Предикат retry_condition над ClientError
"""

import logging
import random
from typing import Awaitable, Callable, Optional, TypeVar

from .clock import Clock, MonotonicClock
from .config import RetryConfig
from .error_handler import default_retry_condition
from .exceptions import ClientError

logger = logging.getLogger(__name__)

T = TypeVar('T')


class RetryEngine:
    """
    Механизм retry.

    Всего попыток = retries + 1. Ошибка последней попытки (или первая
    ошибка, не прошедшая предикат) пробрасывается без изменений.

    Examples:
        >>> engine = RetryEngine(RetryConfig(retries=2, retry_delay=0.1))
        >>> response = await engine.run(lambda: client.request(descriptor))
        >>> engine.attempts
        1
    """

    def __init__(
        self,
        config: RetryConfig,
        clock: Optional[Clock] = None,
        on_retry: Optional[Callable[[Exception, int, float], None]] = None,
    ):
        """
        Args:
            config: Политика повторов
            clock: Часы для задержек (по умолчанию MonotonicClock)
            on_retry: Вызывается перед сном: (ошибка, номер попытки, задержка)
        """
        self.config = config
        self.clock = clock or MonotonicClock()
        self.on_retry = on_retry
        self._attempt = 0

    def should_retry(self, error: Exception, attempt: Optional[int] = None) -> bool:
        """
        Решить нужен ли retry после неудачной попытки attempt (0-based).

        Args:
            error: Исключение попытки
            attempt: Номер попытки (по умолчанию текущий)
        """
        attempt = self._attempt if attempt is None else attempt
        if attempt >= self.config.retries:
            return False
        if not isinstance(error, ClientError):
            return False
        condition = self.config.retry_condition or default_retry_condition
        return bool(condition(error))

    def get_wait_time(self, attempt: Optional[int] = None) -> float:
        """
        Задержка перед повтором после попытки attempt (0-based).

        Returns:
            Секунды для ожидания
        """
        attempt = self._attempt if attempt is None else attempt
        wait = self.config.retry_delay * (self.config.backoff_factor ** attempt)

        if self.config.max_retry_delay is not None:
            wait = min(wait, self.config.max_retry_delay)

        if self.config.jitter:
            wait = wait * (0.5 + random.random())  # 0.5 to 1.5

        return wait

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Выполнить operation с повторами.

        Args:
            operation: Фабрика корутины одной попытки

        Returns:
            Результат первой успешной попытки
        """
        self.reset()
        while True:
            try:
                return await operation()
            except Exception as error:
                if not self.should_retry(error):
                    if self._attempt > 0:
                        logger.debug(
                            "Giving up after %d attempt(s): %s", self._attempt + 1, error
                        )
                    raise

                wait = self.get_wait_time()
                logger.info(
                    "Attempt %d/%d failed (%s), retrying in %.3fs",
                    self._attempt + 1, self.config.max_attempts, error, wait,
                )
                if self.on_retry is not None:
                    self.on_retry(error, self._attempt, wait)
                await self.clock.sleep(wait)
                self.increment()

    def increment(self):
        """Увеличить счётчик попыток."""
        self._attempt += 1

    def reset(self):
        """Сбросить счётчик."""
        self._attempt = 0

    @property
    def attempt(self) -> int:
        """Текущая попытка (0-based)."""
        return self._attempt

    @property
    def attempts(self) -> int:
        """Сколько попыток сделано в последнем run()."""
        return self._attempt + 1
