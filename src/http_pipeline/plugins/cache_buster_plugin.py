# src/http_pipeline/plugins/cache_buster_plugin.py

import time
from typing import Callable, Optional

from ..core.merger import build_url
from ..core.models import RequestDescriptor
from .plugin import Plugin, PluginPriority


def _millis() -> int:
    return int(time.time() * 1000)


class CacheBusterPlugin(Plugin):
    """
    Добавляет к GET запросам параметр с временной меткой (мс),
    чтобы промежуточные кэши не отдавали старый ответ.

    Метка меняет fingerprint, поэтому при включённом плагине кэш и
    de-duplication клиента для GET фактически не срабатывают.
    """

    priority = PluginPriority.LOW

    def __init__(self, param: str = "_t", timestamp: Optional[Callable[[], int]] = None):
        """
        Args:
            param: Имя query параметра
            timestamp: Источник метки (по умолчанию time.time() в мс)
        """
        super().__init__()
        self.param = param
        self.timestamp = timestamp or _millis

    def on_request(self, request: RequestDescriptor) -> RequestDescriptor:
        if request.method != "GET":
            return request
        stamp = self.timestamp()
        params = dict(request.params or {})
        params[self.param] = stamp
        return request.evolve(
            url=build_url(None, request.url or "", {self.param: stamp}),
            params=params,
        )
