# src/http_pipeline/plugins/headers_plugin.py

from typing import Mapping

from ..core.merger import merge_headers
from ..core.models import RequestDescriptor
from .plugin import Plugin, PluginPriority


class HeadersPlugin(Plugin):
    """
    Добавляет статические заголовки к каждому запросу.

    Example:
        >>> HeadersPlugin({"Device-Type": "ios", "App-Version": "1.0.0"}).install(client)
    """

    priority = PluginPriority.HIGH

    def __init__(self, headers: Mapping[str, str], override: bool = True):
        """
        Args:
            headers: Заголовки
            override: Заменять заголовки запроса с тем же именем
        """
        super().__init__()
        self.headers = dict(headers)
        self.override = override

    def on_request(self, request: RequestDescriptor) -> RequestDescriptor:
        if self.override:
            merged = merge_headers(request.headers, self.headers)
        else:
            merged = merge_headers(self.headers, request.headers)
        return request.evolve(headers=merged)
