# src/http_pipeline/core/models.py
"""
Модели данных конвейера: описание запроса и конверт ответа.

Оба типа immutable (frozen dataclasses): каждый слой конвейера создаёт
новый RequestDescriptor через evolve(), а не меняет объект вызывающего.
"""

from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

HTTP_METHODS = frozenset(
    {'GET', 'POST', 'PUT', 'DELETE', 'PATCH', 'HEAD', 'OPTIONS', 'TRACE', 'CONNECT'}
)


def _freeze(value: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    """Обернуть dict в MappingProxyType (None остаётся None)."""
    if value is None or isinstance(value, MappingProxyType):
        return value
    return MappingProxyType(dict(value))


@dataclass(frozen=True)
class RequestDescriptor:
    """
    Описание HTTP запроса.

    Все поля по умолчанию None, что означает "не задано": при слиянии
    с дефолтами клиента побеждает любое явно заданное значение.

    Args:
        url: URL (абсолютный или относительный к base_url)
        method: HTTP метод
        data: Тело запроса
        params: Query параметры (порядок сохраняется)
        headers: Заголовки
        timeout: Таймаут в секундах
        base_url: Базовый URL
        data_type: Как декодировать тело ответа ('json', 'text', 'base64')
        response_type: 'text' или 'arraybuffer'
        ssl_verify: Проверять TLS сертификат
        with_credentials: Отправлять cookies/credentials
        enable_cache: Подсказка транспорту о кэшировании
        enable_cookie: Разрешить cookies
        enable_http2: Разрешить HTTP/2
        extra: Прочие опции транспорта, передаются без изменений

    Examples:
        >>> RequestDescriptor(url="/users", params={"page": 1})
        >>> RequestDescriptor(url="/users", method="POST", data={"name": "alice"})
    """
    url: Optional[str] = None
    method: Optional[str] = None
    data: Any = None
    params: Optional[Mapping[str, Any]] = None
    headers: Optional[Mapping[str, str]] = None
    timeout: Optional[float] = None
    base_url: Optional[str] = None

    data_type: Optional[str] = None
    response_type: Optional[str] = None
    ssl_verify: Optional[bool] = None
    with_credentials: Optional[bool] = None
    enable_cache: Optional[bool] = None
    enable_cookie: Optional[bool] = None
    enable_http2: Optional[bool] = None

    extra: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self):
        if self.method is not None and self.method != self.method.upper():
            object.__setattr__(self, 'method', self.method.upper())
        object.__setattr__(self, 'params', _freeze(self.params))
        object.__setattr__(self, 'headers', _freeze(self.headers))
        object.__setattr__(self, 'extra', _freeze(self.extra) or MappingProxyType({}))

    @classmethod
    def from_options(cls, **options: Any) -> 'RequestDescriptor':
        """
        Построить дескриптор из произвольных keyword опций.

        Неизвестные ключи попадают в extra.

        Example:
            >>> RequestDescriptor.from_options(url="/a", firstIpv4=True).extra
            mappingproxy({'firstIpv4': True})
        """
        known = {f.name for f in fields(cls)} - {'extra'}
        kwargs = {k: v for k, v in options.items() if k in known}
        extra = dict(options.get('extra') or {})
        extra.update({k: v for k, v in options.items() if k not in known and k != 'extra'})
        return cls(extra=extra, **kwargs)

    def evolve(self, **changes: Any) -> 'RequestDescriptor':
        """Вернуть копию с изменёнными полями."""
        return replace(self, **changes)

    def with_headers(self, headers: Mapping[str, str]) -> 'RequestDescriptor':
        """Копия с добавленными заголовками (новые побеждают)."""
        merged = dict(self.headers or {})
        merged.update(headers)
        return self.evolve(headers=merged)

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Получить заголовок без учёта регистра."""
        lowered = name.lower()
        for key, value in (self.headers or {}).items():
            if key.lower() == lowered:
                return value
        return default

    def to_dict(self) -> Dict[str, Any]:
        """Только заданные поля, для логов и отладки."""
        result: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name == 'extra':
                if value:
                    result['extra'] = dict(value)
            elif value is not None:
                result[f.name] = dict(value) if isinstance(value, Mapping) else value
        return result


@dataclass(frozen=True)
class ResponseEnvelope:
    """
    Ответ, возвращаемый вызывающему коду.

    Args:
        data: Полезная нагрузка (декодированное тело)
        status_code: HTTP статус
        headers: Заголовки ответа
        cookies: Cookies (если транспорт их вернул)
        err_msg: Сырое сообщение об ошибке транспорта
    """
    data: Any = None
    status_code: int = 0
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    cookies: Optional[List[str]] = None
    err_msg: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'headers', _freeze(self.headers) or MappingProxyType({}))

    @property
    def ok(self) -> bool:
        """2xx статус."""
        return 200 <= self.status_code < 300

    def evolve(self, **changes: Any) -> 'ResponseEnvelope':
        """Вернуть копию с изменёнными полями."""
        return replace(self, **changes)
