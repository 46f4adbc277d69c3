# src/http_pipeline/core/merger.py
"""
Слияние конфигурации запроса и построение URL.

merge_config никогда не бросает исключений: неизвестные опции
проходят насквозь в RequestDescriptor.extra.
"""

import json
import re
from dataclasses import fields
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote, urlencode

from .models import RequestDescriptor

_ABSOLUTE_URL = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.\-]*://')

# Поля, которые сливаются отдельно (по ключам)
_MAPPING_FIELDS = ('headers', 'extra')


def is_absolute_url(url: str) -> bool:
    """URL начинается со схемы (http://, https://, ws://, ...)."""
    return bool(_ABSOLUTE_URL.match(url))


def merge_headers(
    defaults: Optional[Mapping[str, str]],
    overrides: Optional[Mapping[str, str]],
) -> Dict[str, str]:
    """
    Слить заголовки без учёта регистра ключей.

    При конфликте побеждает overrides, и сохраняется его написание ключа.

    Example:
        >>> merge_headers({"Content-Type": "application/json"}, {"content-type": "text/plain"})
        {'content-type': 'text/plain'}
    """
    result: Dict[str, str] = {}
    index: Dict[str, str] = {}  # lower -> фактический ключ в result

    for source in (defaults or {}, overrides or {}):
        for key, value in source.items():
            lowered = str(key).lower()
            existing = index.get(lowered)
            if existing is not None:
                del result[existing]
            result[key] = value
            index[lowered] = key

    return result


def _stringify(value: Any) -> str:
    """Привести значение query параметра к строке."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def serialize_params(params: Optional[Mapping[str, Any]]) -> str:
    """
    Percent-encode query параметров.

    - значения приводятся к строке (bool -> true/false)
    - None пропускается
    - list/tuple повторяют ключ

    Examples:
        >>> serialize_params({"q": "a b", "page": 2})
        'q=a%20b&page=2'
        >>> serialize_params({"id": [1, 2]})
        'id=1&id=2'
    """
    if not params:
        return ''

    pairs: List[Tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            pairs.extend((str(key), _stringify(item)) for item in value if item is not None)
        else:
            pairs.append((str(key), _stringify(value)))

    return urlencode(pairs, quote_via=quote, safe="!~*'()")


def build_url(base_url: Optional[str], url: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """
    Склеить base_url, url и query string.

    Examples:
        >>> build_url("https://api.example.com/", "/users", {"page": 1})
        'https://api.example.com/users?page=1'
        >>> build_url("https://api.example.com", "https://other.com/x?a=1", {"b": 2})
        'https://other.com/x?a=1&b=2'
    """
    full_url = url or ''

    if base_url and not is_absolute_url(full_url):
        full_url = base_url.rstrip('/') + '/' + full_url.lstrip('/')

    query = serialize_params(params)
    if query:
        full_url += ('&' if '?' in full_url else '?') + query

    return full_url


def merge_config(defaults: RequestDescriptor, call: RequestDescriptor) -> RequestDescriptor:
    """
    Слить дефолты клиента и опции вызова в итоговый дескриптор.

    Поле вызова, отличное от None, побеждает; headers и extra сливаются
    по ключам. Относительный URL получает base_url, params дописываются
    в query string.

    Example:
        >>> defaults = RequestDescriptor(method="GET", base_url="https://api.example.com")
        >>> merge_config(defaults, RequestDescriptor(url="/users", params={"page": 1})).url
        'https://api.example.com/users?page=1'
    """
    values: Dict[str, Any] = {}
    for f in fields(RequestDescriptor):
        if f.name in _MAPPING_FIELDS:
            continue
        value = getattr(call, f.name)
        values[f.name] = value if value is not None else getattr(defaults, f.name)

    values['headers'] = merge_headers(defaults.headers, call.headers)
    extra = dict(defaults.extra)
    extra.update(call.extra)
    values['extra'] = extra

    values['url'] = build_url(values['base_url'], values['url'] or '', values['params'])

    return RequestDescriptor(**values)


def _json_default(value: Any) -> Any:
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode('latin-1')
    return str(value)


def _canonical(value: Any) -> str:
    """Детерминированная сериализация для fingerprint."""
    if value is None:
        value = {}
    try:
        return json.dumps(value, sort_keys=True, default=_json_default, separators=(',', ':'))
    except TypeError:
        # ключи разных типов не сортируются
        return json.dumps(value, default=_json_default, separators=(',', ':'))


def fingerprint(descriptor: RequestDescriptor) -> str:
    """
    Ключ идентичности запроса для кэша и de-duplication.

    method + итоговый URL + тело + query параметры.

    Example:
        >>> fingerprint(RequestDescriptor(url="https://a.com/users", method="GET"))
        'GET:https://a.com/users:{}:{}'
    """
    return (
        f"{descriptor.method or 'GET'}:{descriptor.url or ''}:"
        f"{_canonical(descriptor.data)}:{_canonical(descriptor.params)}"
    )
