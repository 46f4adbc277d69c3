# src/http_pipeline/core/error_handler.py

from typing import Any, Callable, Optional, Union

from .config import BusinessRule
from .error_messages import get_error_message
from .exceptions import (
    BusinessError,
    ClientError,
    HttpError,
    NetworkError,
    TimeoutError,
)
from .models import RequestDescriptor, ResponseEnvelope
from .transport import TransportFailure

TIMEOUT_CODES = {"ETIMEDOUT", "timeout", "TIMEOUT"}


def default_retry_condition(error: ClientError) -> bool:
    """Повтор при отсутствии статуса, статусе >= 500 или 408."""
    return error.retryable


class ErrorClassifier:
    """
    Превращает сбои транспорта и статусы ответа в типизированные ClientError.

    Классификация чистая и синхронная: никакого I/O.
    """

    def __init__(self, business_rule: Optional[Union[BusinessRule, Callable[[Any], Any]]] = None):
        """
        Args:
            business_rule: BusinessRule или callable(data) -> (code, message) | None
        """
        self.business_rule = business_rule

    def classify_failure(self, failure: Exception, request: RequestDescriptor) -> NetworkError:
        """Сбой транспорта (статуса нет) -> NetworkError или TimeoutError"""
        message = getattr(failure, 'message', None) or str(failure) or "Network request failed"
        code = getattr(failure, 'code', None)
        envelope = ResponseEnvelope(data=None, status_code=0, headers={}, err_msg=message)

        timed_out = isinstance(failure, TransportFailure) and failure.timed_out
        if timed_out or code in TIMEOUT_CODES:
            return TimeoutError(message, request=request, code=code, response=envelope, timeout=request.timeout)
        return NetworkError(message, request=request, code=code, response=envelope)

    def classify_response(self, response: ResponseEnvelope, request: RequestDescriptor) -> Optional[ClientError]:
        """Статус >= 400 -> HttpError, бизнес-неудача при статусе < 300 -> BusinessError, иначе None"""
        status = response.status_code

        if status >= 400:
            reason = get_error_message(status, "HTTP error")
            return HttpError(
                status,
                request=request,
                response=response,
                message=f"HTTP {status} error for {request.url}: {reason}",
            )

        if status < 300 and self.business_rule is not None:
            verdict = self._check_business(response.data)
            if verdict is not None:
                business_code, message = verdict
                return BusinessError(
                    message or get_error_message(business_code, "Business request failed"),
                    business_code,
                    request=request,
                    response=response,
                )

        return None

    def _check_business(self, data: Any):
        rule = self.business_rule
        if isinstance(rule, BusinessRule):
            return rule.check(data)
        return rule(data)
