# src/http_pipeline/core/http_client.py
"""
Асинхронный HTTP клиент: фасад конвейера запроса.

Порядок: слияние конфигурации -> перехватчики запроса ->
(кэш | de-duplication) -> транспорт -> классификация ошибок ->
перехватчики ответа. request_with_retry оборачивает отправку и
классификацию в цикл повторов.
"""

import uuid
from dataclasses import replace
from typing import Any, Awaitable, Callable, Iterable, List, Optional, Union

from .cache import CacheStore
from .clock import Clock, MonotonicClock
from .concurrency import ConcurrencyController
from .config import BusinessRule, ClientConfig, RetryConfig
from .error_handler import ErrorClassifier
from .exceptions import ClientError
from .interceptors import Interceptors
from .logging import PipelineLogger, get_correlation_id, reset_correlation_id, set_correlation_id
from .merger import fingerprint, merge_config
from .models import RequestDescriptor, ResponseEnvelope
from .retry_engine import RetryEngine
from .stats import RequestStats
from .storage import MemoryStorage, Storage
from .transport import HttpxTransport, Transport, TransportFailure

DescriptorLike = Union[RequestDescriptor, str, None]


class HttpClient:
    """
    Асинхронный HTTP клиент с перехватчиками, retry, кэшем и
    de-duplication одинаковых запросов.

    Example:
        >>> async with HttpClient(ClientConfig(base_url="https://api.example.com")) as client:
        ...     response = await client.get("/users", params={"page": 1})
        ...     print(response.data)

        >>> # Retry и кэш
        >>> response = await client.get_with_retry("/users", retries=2, retry_delay=0.1,
        ...                                        cache=True, cache_ttl=60)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[Transport] = None,
        clock: Optional[Clock] = None,
        storage: Optional[Storage] = None,
        plugins: Optional[Iterable[Any]] = None,
        **kwargs: Any,
    ):
        """
        Args:
            config: ClientConfig (если указан, kwargs игнорируются)
            transport: Транспорт (по умолчанию HttpxTransport)
            clock: Часы для TTL и задержек (по умолчанию MonotonicClock)
            storage: Хранилище для статистики
            plugins: Плагины, устанавливаются по priority
            **kwargs: Параметры ClientConfig.create()
        """
        self._config = config if config is not None else ClientConfig.create(**kwargs)
        self._clock = clock or MonotonicClock()

        self._owns_transport = transport is None
        self._transport: Transport = transport if transport is not None else HttpxTransport()

        self._classifier = ErrorClassifier(self._config.business_rule)
        self._cache = CacheStore(
            clock=self._clock,
            default_ttl=self._config.cache.ttl,
            max_size=self._config.cache.max_size,
        )
        self._concurrency = ConcurrencyController()
        self.storage = storage
        self._stats = RequestStats(storage=storage)
        self.interceptors = Interceptors()

        self._logger: Optional[PipelineLogger] = (
            PipelineLogger(self._config.logging) if self._config.logging is not None else None
        )

        self._plugins: List[Any] = []
        for plugin in sorted(plugins or (), key=lambda p: getattr(p, 'priority', 50)):
            self.add_plugin(plugin)

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Закрыть транспорт (если создан клиентом) и логгер."""
        if self._owns_transport and hasattr(self._transport, "aclose"):
            await self._transport.aclose()
        if self._logger is not None:
            self._logger.close()

    # ==================== Конвейер ====================

    @staticmethod
    def _coerce(descriptor: DescriptorLike, options: dict) -> RequestDescriptor:
        """Дескриптор вызова из RequestDescriptor, URL-строки и/или опций."""
        if isinstance(descriptor, str):
            options = {"url": descriptor, **options}
            descriptor = None
        if descriptor is None:
            return RequestDescriptor.from_options(**options)
        if options:
            return RequestDescriptor.from_options(**{**descriptor.to_dict(), **options})
        return descriptor

    @staticmethod
    def _wrap(error: Exception, request: Optional[RequestDescriptor]) -> ClientError:
        """Исключение пользовательского кода -> ClientError (оригинал в __cause__)."""
        return ClientError(f"{type(error).__name__}: {error}", request=request)

    async def _prepare(self, call: RequestDescriptor) -> RequestDescriptor:
        """Слияние с дефолтами и перехватчики запроса."""
        merged = merge_config(self._config.defaults(), call)
        try:
            return await self.interceptors.request.run(merged)
        except ClientError:
            raise
        except Exception as error:
            raise self._wrap(error, merged) from error

    async def _dispatch(self, request: RequestDescriptor) -> ResponseEnvelope:
        """Одна попытка: транспорт + классификация."""
        try:
            raw = await self._transport.send(request)
        except (TransportFailure, OSError) as failure:
            raise self._classifier.classify_failure(failure, request) from failure
        except ClientError:
            raise
        except Exception as error:
            raise self._wrap(error, request) from error

        envelope = ResponseEnvelope(
            data=raw.body,
            status_code=raw.status,
            headers=raw.headers,
            cookies=raw.cookies,
        )
        error = self._classifier.classify_response(envelope, request)
        if error is not None:
            raise error
        return envelope

    async def _settle(
        self,
        request: RequestDescriptor,
        attempt: Callable[[], Awaitable[ResponseEnvelope]],
    ):
        """
        Выполнить attempt и провести результат через перехватчики ответа.

        Returns:
            (envelope, recovered) - recovered=True если ошибку превратил
            в успех обработчик ошибок
        """
        try:
            envelope = await attempt()
        except ClientError as error:
            self._log_failure(request, error)
            try:
                return await self.interceptors.response.recover(error), True
            except ClientError:
                raise
            except Exception as final:
                raise self._wrap(final, request) from final

        try:
            return await self.interceptors.response.run(envelope), False
        except ClientError:
            raise
        except Exception as error:
            raise self._wrap(error, request) from error

    def _enter_correlation(self):
        if get_correlation_id() is not None:
            return None
        return set_correlation_id(uuid.uuid4().hex[:16])

    async def request(self, descriptor: DescriptorLike = None, **options: Any) -> ResponseEnvelope:
        """
        Одна попытка: без кэша, без de-duplication, без retry.

        Args:
            descriptor: RequestDescriptor или URL
            **options: Поля RequestDescriptor (неизвестные уходят в extra)

        Returns:
            ResponseEnvelope

        Raises:
            ClientError: NetworkError / TimeoutError / HttpError / BusinessError
        """
        call = self._coerce(descriptor, options)
        token = self._enter_correlation()
        started = self._clock.now()
        try:
            request = await self._prepare(call)
            self._log_start(request)
            envelope, _ = await self._settle(request, lambda: self._dispatch(request))
        except ClientError:
            self._stats.record(success=False, duration=self._clock.now() - started)
            raise
        else:
            duration = self._clock.now() - started
            self._stats.record(success=True, duration=duration)
            self._log_complete(request, envelope, duration)
            return envelope
        finally:
            if token is not None:
                reset_correlation_id(token)

    def _retry_policy(self, **changes: Any) -> RetryConfig:
        changes = {key: value for key, value in changes.items() if value is not None}
        if not changes:
            return self._config.retry
        return replace(self._config.retry, **changes)

    async def request_with_retry(
        self,
        descriptor: DescriptorLike = None,
        *,
        retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        retry_condition: Optional[Callable[[ClientError], bool]] = None,
        max_retry_delay: Optional[float] = None,
        cache: Optional[bool] = None,
        cache_ttl: Optional[float] = None,
        **options: Any,
    ) -> ResponseEnvelope:
        """
        Запрос с повторами, кэшем GET ответов и de-duplication.

        Кэш и de-duplication проверяются один раз на внешний вызов;
        перехватчики ответа выполняются один раз на сетевой полёт,
        после завершения цикла повторов.

        Args:
            descriptor: RequestDescriptor или URL
            retries: Количество повторов (по умолчанию из config.retry)
            retry_delay: Базовая задержка (сек)
            retry_condition: Предикат над ClientError
            max_retry_delay: Потолок задержки (сек)
            cache: Использовать кэш (только GET)
            cache_ttl: TTL записи (сек)
            **options: Поля RequestDescriptor

        Example:
            >>> response = await client.request_with_retry("/users", retries=2, retry_delay=0.1)
        """
        policy = self._retry_policy(
            retries=retries,
            retry_delay=retry_delay,
            retry_condition=retry_condition,
            max_retry_delay=max_retry_delay,
        )
        use_cache = self._config.cache.enabled if cache is None else cache
        ttl = self._config.cache.ttl if cache_ttl is None else cache_ttl

        call = self._coerce(descriptor, options)
        token = self._enter_correlation()
        started = self._clock.now()
        try:
            request = await self._prepare(call)
            key = fingerprint(request)
            cacheable = use_cache and request.method == 'GET'

            if cacheable:
                cached = self._cache.get(key)
                if cached is not None:
                    self._log("debug", "Cache hit", method=request.method, url=request.url,
                              from_cache=True, fingerprint=key)
                    self._stats.record(success=True, duration=self._clock.now() - started, from_cache=True)
                    return cached

            if self._concurrency.is_pending(key):
                self._log("debug", "Joining in-flight request", method=request.method, url=request.url,
                          fingerprint=key)

            return await self._concurrency.execute(
                key, lambda: self._flight(request, key, policy, cacheable, ttl)
            )
        finally:
            if token is not None:
                reset_correlation_id(token)

    async def _flight(
        self,
        request: RequestDescriptor,
        key: str,
        policy: RetryConfig,
        cacheable: bool,
        ttl: float,
    ) -> ResponseEnvelope:
        """Один сетевой полёт: цикл повторов, перехватчики ответа, запись в кэш."""
        engine = RetryEngine(policy, self._clock, on_retry=self._make_retry_logger(request))
        started = self._clock.now()
        self._log_start(request)

        try:
            envelope, recovered = await self._settle(request, lambda: engine.run(lambda: self._dispatch(request)))
        except ClientError:
            self._stats.record(
                success=False,
                duration=self._clock.now() - started,
                retries=engine.attempts - 1,
            )
            raise

        # после cancel_request поздний результат не кэшируется
        if cacheable and not recovered and self._concurrency.owns(key):
            self._cache.set(key, envelope, ttl)

        duration = self._clock.now() - started
        self._stats.record(success=True, duration=duration, retries=engine.attempts - 1)
        self._log_complete(request, envelope, duration, attempts=engine.attempts)
        return envelope

    # ==================== Удобные методы ====================

    async def get(self, url: str, params: Any = None, **options: Any) -> ResponseEnvelope:
        """GET запрос."""
        return await self.request(url=url, method='GET', params=params, **options)

    async def post(self, url: str, data: Any = None, **options: Any) -> ResponseEnvelope:
        """POST запрос."""
        return await self.request(url=url, method='POST', data=data, **options)

    async def put(self, url: str, data: Any = None, **options: Any) -> ResponseEnvelope:
        """PUT запрос."""
        return await self.request(url=url, method='PUT', data=data, **options)

    async def patch(self, url: str, data: Any = None, **options: Any) -> ResponseEnvelope:
        """PATCH запрос."""
        return await self.request(url=url, method='PATCH', data=data, **options)

    async def delete(self, url: str, **options: Any) -> ResponseEnvelope:
        """DELETE запрос."""
        return await self.request(url=url, method='DELETE', **options)

    async def head(self, url: str, **options: Any) -> ResponseEnvelope:
        """HEAD запрос."""
        return await self.request(url=url, method='HEAD', **options)

    async def options(self, url: str, **options: Any) -> ResponseEnvelope:
        """OPTIONS запрос."""
        return await self.request(url=url, method='OPTIONS', **options)

    async def get_with_retry(self, url: str, params: Any = None, **options: Any) -> ResponseEnvelope:
        """GET с retry/кэшем (опции как у request_with_retry)."""
        return await self.request_with_retry(url=url, method='GET', params=params, **options)

    async def post_with_retry(self, url: str, data: Any = None, **options: Any) -> ResponseEnvelope:
        """POST с retry (кэш к POST не применяется)."""
        return await self.request_with_retry(url=url, method='POST', data=data, **options)

    # ==================== Кэш и отмена ====================

    def fingerprint(self, descriptor: DescriptorLike = None, **options: Any) -> str:
        """
        Ключ кэша/de-duplication для запроса.

        Считается по дескриптору после слияния с дефолтами клиента, но до
        перехватчиков запроса.
        """
        return fingerprint(merge_config(self._config.defaults(), self._coerce(descriptor, options)))

    def clear_cache(self, pattern: Optional[str] = None) -> int:
        """Очистить кэш (или только ключи, содержащие pattern). Возвращает число удалённых записей."""
        return self._cache.clear(pattern)

    def cancel_request(self, key: str) -> None:
        """Забыть выполняющийся запрос. Сетевой вызов не прерывается, его результат не кэшируется."""
        self._concurrency.cancel(key)

    def cancel_all_requests(self) -> None:
        self._concurrency.cancel_all()

    def pending_requests(self) -> List[str]:
        """Ключи выполняющихся запросов."""
        return self._concurrency.pending_keys()

    # ==================== Плагины ====================

    def add_plugin(self, plugin: Any) -> None:
        """Установить плагин (его перехватчики встают в конец цепочек)."""
        plugin.install(self)
        self._plugins.append(plugin)

    def remove_plugin(self, plugin: Any) -> None:
        """Удалить плагин и его перехватчики."""
        if plugin in self._plugins:
            plugin.uninstall(self)
            self._plugins.remove(plugin)

    @property
    def plugins(self) -> List[Any]:
        return list(self._plugins)

    # ==================== Логирование ====================

    def _log(self, level: str, message: str, **fields: Any) -> None:
        if self._logger is not None:
            getattr(self._logger, level)(message, **fields)

    def _log_start(self, request: RequestDescriptor) -> None:
        self._log("info", "Request started", method=request.method, url=request.url)

    def _log_complete(self, request: RequestDescriptor, envelope: ResponseEnvelope,
                      duration: float, attempts: int = 1) -> None:
        if self._logger is not None and self._logger.config.is_slow(duration):
            level, message = "warning", "Slow request"
        else:
            level, message = "info", "Request completed"
        self._log(
            level, message,
            method=request.method,
            url=request.url,
            status_code=envelope.status_code,
            duration=round(duration, 4),
            attempts=attempts,
        )

    def _log_failure(self, request: RequestDescriptor, error: ClientError) -> None:
        self._log(
            "error", "Request failed",
            method=request.method,
            url=request.url,
            error_type=type(error).__name__,
            status_code=error.status_code,
            error=error.message,
        )

    def _make_retry_logger(self, request: RequestDescriptor):
        if self._logger is None:
            return None

        def on_retry(error: Exception, attempt: int, wait: float) -> None:
            self._log(
                "warning", "Retrying request",
                method=request.method,
                url=request.url,
                attempt=attempt + 1,
                wait=round(wait, 4),
                error=str(error),
            )

        return on_retry

    # ==================== Properties ====================

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def cache(self) -> CacheStore:
        return self._cache

    @property
    def stats(self) -> RequestStats:
        """Статистика запросов (snapshot() для словаря)."""
        return self._stats

    @property
    def logger(self) -> Optional[PipelineLogger]:
        return self._logger


def create_client(config: Optional[ClientConfig] = None, **kwargs: Any) -> HttpClient:
    """
    Создать клиент без плагинов.

    Example:
        >>> client = create_client(base_url="https://api.example.com", timeout=5)
    """
    return HttpClient(config, **kwargs)


def create_default_client(
    storage: Optional[Storage] = None,
    *,
    config: Optional[ClientConfig] = None,
    transport: Optional[Transport] = None,
    clock: Optional[Clock] = None,
    static_headers: Optional[dict] = None,
    cache_buster: bool = False,
    **config_kwargs: Any,
) -> HttpClient:
    """
    Клиент с плагинами по умолчанию.

    - AuthPlugin: Bearer токен из storage["token"], удаление токена на 401
    - HeadersPlugin: static_headers (например Device-Type, App-Version)
    - CacheBusterPlugin: только при cache_buster=True
    - BusinessRule(): тело {"code": ...} вне {200, 0} -> BusinessError

    Example:
        >>> storage = MemoryStorage({"token": "abc"})
        >>> client = create_default_client(storage, base_url="https://api.example.com",
        ...                                static_headers={"App-Version": "1.0.0"})
    """
    from ..plugins import AuthPlugin, CacheBusterPlugin, HeadersPlugin

    storage = storage if storage is not None else MemoryStorage()
    if config is None:
        config_kwargs.setdefault('business_rule', BusinessRule())
        config = ClientConfig.create(**config_kwargs)

    plugins: List[Any] = [AuthPlugin(storage)]
    if static_headers:
        plugins.append(HeadersPlugin(static_headers))
    if cache_buster:
        plugins.append(CacheBusterPlugin())

    return HttpClient(config, transport=transport, clock=clock, storage=storage, plugins=plugins)
