# src/http_pipeline/plugins/logging_plugin.py

from typing import Optional

from ..core.exceptions import ClientError
from ..core.logging import PipelineLogger, get_logger
from ..core.models import RequestDescriptor, ResponseEnvelope
from .plugin import Plugin, PluginPriority


class LoggingPlugin(Plugin):
    """
    Плагин для логирования запросов, ответов и ошибок.

    Priority: LAST (100) - видит запрос после всех остальных плагинов.
    Заголовки и тела маскируются PipelineLogger.
    """

    priority = PluginPriority.LAST

    def __init__(self, logger: Optional[PipelineLogger] = None, log_bodies: bool = False):
        """
        Args:
            logger: PipelineLogger (по умолчанию глобальный get_logger())
            log_bodies: Логировать тела запросов и ответов (DEBUG)
        """
        super().__init__()
        self.logger = logger or get_logger()
        self.log_bodies = log_bodies

    def on_request(self, request: RequestDescriptor) -> RequestDescriptor:
        self.logger.info(
            f"Sending {request.method} request",
            method=request.method,
            url=request.url,
            headers=dict(request.headers or {}),
        )
        if self.log_bodies and request.data is not None:
            self.logger.debug("Request body", body=request.data)
        return request

    def on_response(self, response: ResponseEnvelope) -> ResponseEnvelope:
        self.logger.info(f"Received response: {response.status_code}", status_code=response.status_code)
        if self.log_bodies:
            self.logger.debug("Response body", body=str(response.data)[:200])
        return response

    def on_error(self, error: ClientError) -> Optional[ResponseEnvelope]:
        self.logger.error(
            f"Request failed: {error}",
            error_type=type(error).__name__,
            status_code=getattr(error, "status_code", None),
            url=getattr(error, "url", None),
        )
        return None
