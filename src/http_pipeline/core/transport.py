# src/http_pipeline/core/transport.py
"""
Граница с транспортом: протокол send() и адаптер на базе httpx.

Транспорт делает ровно одну попытку. Успех - RawResponse (любой статус),
неудача без статуса - исключение TransportFailure.
"""

import base64
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, runtime_checkable

import httpx

from .models import RequestDescriptor

logger = logging.getLogger(__name__)


@dataclass
class RawResponse:
    """Сырой результат транспорта."""
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    cookies: Optional[List[str]] = None


class TransportFailure(Exception):
    """
    Транспорт не смог получить ответ.

    Args:
        message: Сообщение транспорта
        code: Код ошибки (errno, имя исключения)
        timed_out: Истёк таймаут
    """

    def __init__(self, message: str, code: Optional[Any] = None, timed_out: bool = False):
        self.message = message
        self.code = code
        self.timed_out = timed_out
        super().__init__(message)


@runtime_checkable
class Transport(Protocol):
    """Внешний коллаборатор, выполняющий сетевой вызов."""

    async def send(self, descriptor: RequestDescriptor) -> RawResponse:
        ...


class HttpxTransport:
    """
    Транспорт на httpx.AsyncClient.

    Клиенты создаются лениво, отдельно для ssl_verify=True и False
    (verify в httpx задаётся на уровне клиента).

    Example:
        >>> transport = HttpxTransport()
        >>> raw = await transport.send(RequestDescriptor(url="https://api.example.com/users", method="GET"))
        >>> await transport.aclose()
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, **client_kwargs: Any):
        """
        Args:
            client: Готовый httpx.AsyncClient (не закрывается транспортом)
            **client_kwargs: Параметры для создаваемых httpx.AsyncClient
        """
        self._external_client = client
        self._client_kwargs = client_kwargs
        self._clients: Dict[bool, httpx.AsyncClient] = {}

    def _get_client(self, verify: bool) -> httpx.AsyncClient:
        """Получить или создать httpx клиент."""
        if self._external_client is not None:
            return self._external_client
        client = self._clients.get(verify)
        if client is None:
            client = httpx.AsyncClient(verify=verify, **self._client_kwargs)
            self._clients[verify] = client
        return client

    async def aclose(self) -> None:
        """Закрыть созданные транспортом клиенты."""
        for client in self._clients.values():
            await client.aclose()
        self._clients.clear()

    def _build_kwargs(self, descriptor: RequestDescriptor) -> Dict[str, Any]:
        method = descriptor.method or 'GET'
        kwargs: Dict[str, Any] = {"headers": dict(descriptor.headers or {})}
        if descriptor.timeout is not None:
            kwargs["timeout"] = descriptor.timeout

        body = descriptor.data
        if body is None:
            return kwargs

        if method in ('GET', 'HEAD'):
            # тело GET уходит в query string, поэтому только mapping
            if not isinstance(body, Mapping):
                raise TypeError(f"{method} data must be a mapping, got {type(body).__name__}")
            kwargs["params"] = {k: v for k, v in body.items() if v is not None}
        elif isinstance(body, (bytes, bytearray, str)):
            kwargs["content"] = body
        elif isinstance(body, Mapping):
            kwargs["json"] = dict(body)
        else:
            kwargs["json"] = body
        return kwargs

    @staticmethod
    def _decode(response: httpx.Response, descriptor: RequestDescriptor) -> Any:
        """Декодировать тело согласно data_type / response_type."""
        if descriptor.response_type == 'arraybuffer':
            return response.content
        if descriptor.data_type == 'base64':
            return base64.b64encode(response.content).decode('ascii')
        if descriptor.data_type == 'json' and response.content:
            try:
                return response.json()
            except ValueError:
                return response.text
        return response.text

    async def send(self, descriptor: RequestDescriptor) -> RawResponse:
        """
        Выполнить один HTTP вызов.

        Raises:
            TransportFailure: таймаут, ошибка соединения или протокола,
                некорректный URL или тело, которое нельзя закодировать
        """
        verify = descriptor.ssl_verify if descriptor.ssl_verify is not None else True
        client = self._get_client(verify)
        method = descriptor.method or 'GET'

        try:
            response = await client.request(method, descriptor.url or '', **self._build_kwargs(descriptor))
        except httpx.TimeoutException as e:
            raise TransportFailure(str(e) or "request timeout", code="ETIMEDOUT", timed_out=True) from e
        except httpx.HTTPError as e:
            raise TransportFailure(str(e) or type(e).__name__, code=type(e).__name__) from e
        except httpx.InvalidURL as e:
            raise TransportFailure(f"invalid URL: {e}", code="InvalidURL") from e
        except (TypeError, ValueError) as e:
            # json.dumps тела запроса
            raise TransportFailure(f"cannot encode request body: {e}", code="EENCODE") from e

        cookies = [f"{name}={value}" for name, value in response.cookies.items()]
        return RawResponse(
            status=response.status_code,
            headers=dict(response.headers),
            body=self._decode(response, descriptor),
            cookies=cookies or None,
        )
