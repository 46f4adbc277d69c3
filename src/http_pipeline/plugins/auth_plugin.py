# src/http_pipeline/plugins/auth_plugin.py

import logging
from typing import Optional

from ..core.exceptions import ClientError
from ..core.models import RequestDescriptor, ResponseEnvelope
from ..core.storage import Storage
from .plugin import Plugin, PluginPriority

logger = logging.getLogger(__name__)


class AuthPlugin(Plugin):
    """
    Плагин аутентификации по токену из хранилища.

    Токен читается при каждом запросе, поэтому смена токена в storage
    сразу влияет на следующие запросы. Ответ 401 удаляет токен.

    Example:
        >>> storage = MemoryStorage({"token": "abc"})
        >>> AuthPlugin(storage).install(client)
    """

    priority = PluginPriority.FIRST

    def __init__(self, storage: Storage, token_key: str = "token", scheme: str = "Bearer"):
        """
        Args:
            storage: Хранилище токена
            token_key: Ключ токена в хранилище
            scheme: Схема заголовка Authorization
        """
        super().__init__()
        self.storage = storage
        self.token_key = token_key
        self.scheme = scheme

    def on_request(self, request: RequestDescriptor) -> RequestDescriptor:
        """Добавляет Authorization, если токен есть"""
        token = self.storage.get(self.token_key)
        if not token:
            return request
        return request.with_headers({"Authorization": f"{self.scheme} {token}"})

    def on_error(self, error: ClientError) -> Optional[ResponseEnvelope]:
        """401: токен истёк, удаляем его из хранилища"""
        if getattr(error, "status_code", None) == 401:
            self.storage.remove(self.token_key)
            logger.warning("Received 401, stored token removed")
        return None

    def update_token(self, token: str):
        """Сохраняет новый токен"""
        self.storage.set(self.token_key, token)
