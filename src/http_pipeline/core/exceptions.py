"""
Иерархия исключений HTTP Pipeline.

Классификация:
- NetworkError / TimeoutError - транспорт не получил статус
- HttpError - статус >= 400
- BusinessError - статус < 300, но тело сообщает об ошибке
- ConfigurationError - невалидная конфигурация

Можно ли ретраить - свойство самого значения ошибки (retryable),
а не место, где её поймали.
"""

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional, Union

if TYPE_CHECKING:
    from .models import RequestDescriptor, ResponseEnvelope


class ErrorKind(str, Enum):
    """Вид ошибки клиента."""
    NETWORK = "network"
    TIMEOUT = "timeout"
    HTTP = "http"
    BUSINESS = "business"


# Коды сбоев, случившихся до отправки запроса (тело, URL)
LOCAL_FAILURE_CODES = frozenset({"EENCODE", "InvalidURL"})


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ClientError(Exception):
    """
    Базовая ошибка клиента.

    Args:
        message: Сообщение
        request: RequestDescriptor, который привёл к ошибке
        code: Машинный код (errno транспорта, HTTP статус или бизнес-код)
        response: ResponseEnvelope, если ответ был получен
        status_code: HTTP статус (по умолчанию берётся из response)
    """

    kind: Optional[ErrorKind] = None

    def __init__(
        self,
        message: str,
        request: Optional['RequestDescriptor'] = None,
        code: Optional[Union[str, int]] = None,
        response: Optional['ResponseEnvelope'] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message
        self.request = request
        self.code = code
        self.response = response
        if status_code is None and response is not None and response.status_code:
            status_code = response.status_code
        self.status_code = status_code
        super().__init__(message)

    @property
    def url(self) -> Optional[str]:
        """URL запроса (если известен)."""
        return self.request.url if self.request is not None else None

    @property
    def retryable(self) -> bool:
        """
        Подходит ли ошибка для повтора по умолчанию.

        Нет статуса (сеть), статус >= 500 или 408.
        """
        return (
            not self.status_code
            or self.status_code >= 500
            or self.status_code == 408
        )

    def to_dict(self) -> Dict[str, Any]:
        """Структурированное представление для логов."""
        return {
            "error_type": type(self).__name__,
            "kind": self.kind.value if self.kind else None,
            "message": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "url": self.url,
            "method": self.request.method if self.request is not None else None,
        }


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TRANSPORT
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class NetworkError(ClientError):
    """Транспорт упал до получения статуса."""

    kind = ErrorKind.NETWORK

    @property
    def retryable(self) -> bool:
        # запрос не был отправлен: повтор даст тот же результат
        return self.code not in LOCAL_FAILURE_CODES


class TimeoutError(NetworkError):
    """
    Транспорт сообщил об истечении таймаута.

    Args:
        timeout: Значение таймаута (сек), если известно
    """

    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str, request=None, code=None, response=None, timeout: Optional[float] = None):
        self.timeout = timeout
        super().__init__(message, request=request, code=code, response=response)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# APPLICATION
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class HttpError(ClientError):
    """
    HTTP статус >= 400.

    Args:
        status_code: HTTP статус
        request: Дескриптор запроса
        response: Конверт ответа (тело доступно через response.data)
        message: Сообщение (по умолчанию строится из статуса)
    """

    kind = ErrorKind.HTTP

    def __init__(self, status_code: int, request=None, response=None, message: str = ""):
        url = request.url if request is not None else None
        msg = message or f"HTTP {status_code} error"
        if url and not message:
            msg += f" for {url}"
        super().__init__(msg, request=request, code=status_code, response=response, status_code=status_code)


class BusinessError(ClientError):
    """
    Статус < 300, но поле статуса в теле ответа сообщает о неудаче.

    Args:
        business_code: Значение бизнес-поля
    """

    kind = ErrorKind.BUSINESS

    def __init__(self, message: str, business_code: Any, request=None, response=None):
        self.business_code = business_code
        super().__init__(message, request=request, code=business_code, response=response)

    @property
    def retryable(self) -> bool:
        """Ответ приложения, а не сбой транспорта: не повторяется."""
        return False


class ConfigurationError(ValueError):
    """Ошибка конфигурации."""
    pass
