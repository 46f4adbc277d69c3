# src/http_pipeline/plugins/plugin.py

import weakref
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, Tuple

from ..core.exceptions import ClientError
from ..core.models import RequestDescriptor, ResponseEnvelope

if TYPE_CHECKING:
    from ..core.http_client import HttpClient


class PluginPriority:
    """
    Константы приоритетов для плагинов.

    Плагины с меньшим приоритетом устанавливаются раньше, и их
    перехватчики стоят раньше в цепочках.

    Example:
        >>> class MyAuthPlugin(Plugin):
        ...     priority = PluginPriority.FIRST
    """
    FIRST = 0       # Auth
    HIGH = 25       # Headers
    NORMAL = 50     # По умолчанию
    LOW = 75        # Cache buster
    LAST = 100      # Logging


class Plugin(ABC):
    """
    Базовый класс плагинов: набор перехватчиков, устанавливаемых в клиент.

    install() регистрирует on_request в цепочке запросов и пару
    on_response / on_error в цепочке ответов.

    Attributes:
        priority: Порядок установки (меньше = раньше)
    """

    priority: int = PluginPriority.NORMAL

    def __init__(self):
        # клиент -> (слот запроса, слот ответа); запись уходит вместе с клиентом
        self._installed: "weakref.WeakKeyDictionary[HttpClient, Tuple[int, int]]" = weakref.WeakKeyDictionary()

    @abstractmethod
    def on_request(self, request: RequestDescriptor) -> RequestDescriptor:
        """Вызывается перед отправкой запроса, возвращает новый дескриптор"""

    def on_response(self, response: ResponseEnvelope) -> ResponseEnvelope:
        """Вызывается для успешного ответа"""
        return response

    def on_error(self, error: ClientError) -> Optional[ResponseEnvelope]:
        """
        Вызывается при ошибке запроса.

        Returns:
            None чтобы пропустить ошибку дальше,
            ResponseEnvelope чтобы превратить ошибку в успех
        """
        return None

    def install(self, client: "HttpClient") -> Tuple[int, int]:
        """
        Зарегистрировать перехватчики в клиенте.

        Returns:
            (id слота запроса, id слота ответа)
        """
        if client in self._installed:
            return self._installed[client]
        request_id = client.interceptors.request.use(self.on_request)
        response_id = client.interceptors.response.use(self.on_response, self.on_error)
        self._installed[client] = (request_id, response_id)
        return request_id, response_id

    def uninstall(self, client: "HttpClient") -> None:
        """Удалить перехватчики плагина из клиента. No-op если не установлен."""
        slots = self._installed.pop(client, None)
        if slots is None:
            return
        request_id, response_id = slots
        client.interceptors.request.eject(request_id)
        client.interceptors.response.eject(response_id)

    def is_installed(self, client: "HttpClient") -> bool:
        return client in self._installed
