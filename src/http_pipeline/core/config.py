"""
Система конфигурации для HTTP Pipeline.

Все конфиги immutable (frozen dataclasses). Длительности в секундах.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, FrozenSet, Mapping, Optional, Union

from .exceptions import ConfigurationError
from .models import RequestDescriptor

if TYPE_CHECKING:
    from .exceptions import ClientError
    from .logging import LoggingConfig

DEFAULT_HEADERS = {'Content-Type': 'application/json'}

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RETRY CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class RetryConfig:
    """
    Политика повторов.

    Args:
        retries: Количество повторов (НЕ включая первую попытку)
        retry_delay: Базовая задержка (сек)
        retry_condition: Предикат над ClientError (None = default_retry_condition)
        backoff_factor: Множитель exponential backoff
        max_retry_delay: Потолок задержки (None = без потолка)
        jitter: Умножать задержку на случайное 0.5-1.5

    Examples:
        >>> RetryConfig(retries=2, retry_delay=0.1)
        >>> RetryConfig(retries=5, retry_delay=1.0, max_retry_delay=10.0)
    """
    retries: int = 0
    retry_delay: float = 1.0
    retry_condition: Optional[Callable[['ClientError'], bool]] = None
    backoff_factor: float = 2.0
    max_retry_delay: Optional[float] = None
    jitter: bool = False

    def __post_init__(self):
        """Валидация."""
        if self.retries < 0:
            raise ConfigurationError("retries must be non-negative")
        if self.retry_delay < 0:
            raise ConfigurationError("retry_delay must be non-negative")
        if self.backoff_factor < 1:
            raise ConfigurationError("backoff_factor must be >= 1")
        if self.max_retry_delay is not None and self.max_retry_delay < 0:
            raise ConfigurationError("max_retry_delay must be non-negative")

    @property
    def max_attempts(self) -> int:
        """Всего попыток, включая первую."""
        return self.retries + 1


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CACHE CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class CacheConfig:
    """
    Конфигурация кэша GET ответов.

    Args:
        enabled: Кэшировать по умолчанию в request_with_retry
        ttl: Время жизни записи (сек)
        max_size: Максимум записей (None = без ограничения)
    """
    enabled: bool = False
    ttl: float = 300.0
    max_size: Optional[int] = None

    def __post_init__(self):
        if self.ttl <= 0:
            raise ConfigurationError("cache ttl must be positive")
        if self.max_size is not None and self.max_size <= 0:
            raise ConfigurationError("cache max_size must be positive")


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BUSINESS STATUS CONVENTION
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class BusinessRule:
    """
    Соглашение о бизнес-статусе в теле ответа.

    Тело-словарь с полем code_field, значение которого не входит в
    success_codes, считается бизнес-ошибкой.

    Example:
        >>> rule = BusinessRule()
        >>> rule.check({"code": 10002, "message": "Wrong password"})
        (10002, 'Wrong password')
        >>> rule.check({"code": 0, "data": []}) is None
        True
    """
    code_field: str = "code"
    success_codes: FrozenSet[Any] = frozenset({200, 0})
    message_field: str = "message"

    def check(self, data: Any):
        """Вернуть (code, message) для неуспешного тела, иначе None."""
        if not isinstance(data, Mapping) or self.code_field not in data:
            return None
        code = data[self.code_field]
        if code in self.success_codes:
            return None
        return code, data.get(self.message_field)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MAIN CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class ClientConfig:
    """
    Главная конфигурация HttpClient.

    Args:
        base_url: Префикс для относительных URL
        timeout: Таймаут транспорта (сек)
        headers: Заголовки по умолчанию
        method: Метод по умолчанию
        data_type / response_type / ssl_verify / with_credentials /
        enable_cache / enable_cookie / enable_http2: Дефолты дескриптора
        retry: Политика повторов по умолчанию
        cache: Конфигурация кэша
        business_rule: BusinessRule или callable(data) -> (code, message) | None
        logging: Конфигурация логирования (None = без логирования)

    Examples:
        >>> config = ClientConfig(base_url="https://api.example.com")
        >>> config = ClientConfig.create(timeout=30, retries=3)
    """
    base_url: Optional[str] = None
    timeout: float = 10.0
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType(dict(DEFAULT_HEADERS)))
    method: str = 'GET'

    data_type: str = 'json'
    response_type: str = 'text'
    ssl_verify: bool = True
    with_credentials: bool = False
    enable_cache: bool = False
    enable_cookie: bool = True
    enable_http2: bool = False

    retry: RetryConfig = field(default_factory=RetryConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    business_rule: Optional[Union[BusinessRule, Callable[[Any], Any]]] = None
    logging: Optional['LoggingConfig'] = None

    def __post_init__(self):
        """Нормализация base_url, заморозка headers, валидация."""
        if isinstance(self.headers, dict):
            object.__setattr__(self, 'headers', MappingProxyType(dict(self.headers)))
        if self.base_url:
            normalized = self.base_url.rstrip('/')
            if normalized != self.base_url:
                object.__setattr__(self, 'base_url', normalized)
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")
        object.__setattr__(self, 'method', self.method.upper())

    @classmethod
    def create(
        cls,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        headers: Optional[Dict[str, str]] = None,
        retries: int = 0,
        retry_delay: float = 1.0,
        retry_condition: Optional[Callable[['ClientError'], bool]] = None,
        max_retry_delay: Optional[float] = None,
        cache: bool = False,
        cache_ttl: float = 300.0,
        cache_max_size: Optional[int] = None,
        logging: Optional['LoggingConfig'] = None,
        **kwargs
    ) -> 'ClientConfig':
        """
        Удобный конструктор из плоских опций.

        headers объединяются с DEFAULT_HEADERS.

        Example:
            >>> config = ClientConfig.create(
            ...     base_url="https://api.example.com",
            ...     retries=2, retry_delay=0.5,
            ...     cache=True, cache_ttl=60,
            ... )
        """
        merged_headers = dict(DEFAULT_HEADERS)
        merged_headers.update(headers or {})

        return cls(
            base_url=base_url,
            timeout=timeout,
            headers=merged_headers,
            retry=RetryConfig(
                retries=retries,
                retry_delay=retry_delay,
                retry_condition=retry_condition,
                max_retry_delay=max_retry_delay,
            ),
            cache=CacheConfig(enabled=cache, ttl=cache_ttl, max_size=cache_max_size),
            logging=logging,
            **kwargs
        )

    def defaults(self) -> RequestDescriptor:
        """Дефолты клиента в виде RequestDescriptor для ConfigMerger."""
        return RequestDescriptor(
            method=self.method,
            headers=self.headers,
            timeout=self.timeout,
            base_url=self.base_url,
            data_type=self.data_type,
            response_type=self.response_type,
            ssl_verify=self.ssl_verify,
            with_credentials=self.with_credentials,
            enable_cache=self.enable_cache,
            enable_cookie=self.enable_cookie,
            enable_http2=self.enable_http2,
        )

    def with_headers(self, headers: Dict[str, str]) -> 'ClientConfig':
        """
        Новый конфиг с дополнительными заголовками.

        Example:
            >>> new_config = config.with_headers({"X-API-Key": "secret"})
        """
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)

    def with_retry(self, **changes: Any) -> 'ClientConfig':
        """
        Новый конфиг с изменённой политикой повторов.

        Example:
            >>> new_config = config.with_retry(retries=3, retry_delay=0.2)
        """
        return replace(self, retry=replace(self.retry, **changes))

    def with_base_url(self, base_url: Optional[str]) -> 'ClientConfig':
        """Новый конфиг с другим base_url."""
        return replace(self, base_url=base_url)
