# src/http_pipeline/utils/sanitizer.py
"""
Утилита для маскирования чувствительных данных в логах.

Защищает пароли, токены, API ключи и cookies от попадания в логи.
"""

import re
from typing import Any, Dict, Mapping

REDACTED = "***REDACTED***"

# Точное совпадение (case-insensitive)
SENSITIVE_KEYS = {
    'password', 'passwd', 'pwd',
    'token', 'access_token', 'refresh_token', 'id_token', 'jwt',
    'secret', 'client_secret', 'api_secret',
    'api_key', 'apikey', 'x-api-key',
    'authorization', 'proxy-authorization',
    'cookie', 'set-cookie', 'cookies',
    'session', 'sessionid', 'session_id',
    'credentials', 'otp', 'pin',
}

# Частичное совпадение: ключ содержит подстроку
SENSITIVE_SUBSTRINGS = ('password', 'token', 'secret', 'api_key', 'authorization', 'cookie')

SENSITIVE_PATTERNS = [
    (re.compile(r'(Bearer\s+)([A-Za-z0-9\-._~+/]+=*)', re.IGNORECASE), r'\1' + REDACTED),
    (re.compile(r'(Basic\s+)([A-Za-z0-9+/]+=*)', re.IGNORECASE), r'\1' + REDACTED),
    (re.compile(r'([?&](?:api[_-]?key|token|access_token|password)=)([^&\s]+)', re.IGNORECASE), r'\1' + REDACTED),
]


def _is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    if lowered in SENSITIVE_KEYS:
        return True
    return any(part in lowered for part in SENSITIVE_SUBSTRINGS)


def mask_sensitive_data(data: Any, mask: str = REDACTED) -> Any:
    """
    Рекурсивно маскирует чувствительные данные в словарях, списках, строках.

    Returns:
        Копия данных с замаскированными полями

    Examples:
        >>> mask_sensitive_data({"Authorization": "Bearer abc", "page": 1})
        {'Authorization': '***REDACTED***', 'page': 1}
        >>> mask_sensitive_data("https://api.example.com/?token=abc&page=1")
        'https://api.example.com/?token=***REDACTED***&page=1'
    """
    if data is None or isinstance(data, (bool, int, float)):
        return data

    if isinstance(data, str):
        return mask_string(data)

    if isinstance(data, Mapping):
        return {
            key: mask if _is_sensitive_key(str(key)) else mask_sensitive_data(value, mask)
            for key, value in data.items()
        }

    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask) for item in data)

    return data


def mask_string(text: str) -> str:
    """Маскирует токены и ключи внутри строки."""
    for pattern, replacement in SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def mask_headers(headers: Mapping[str, str], mask: str = REDACTED) -> Dict[str, str]:
    """
    Маскирует чувствительные HTTP заголовки.

    Example:
        >>> mask_headers({"Authorization": "Bearer t", "Accept": "*/*"})
        {'Authorization': '***REDACTED***', 'Accept': '*/*'}
    """
    return {key: mask if _is_sensitive_key(key) else value for key, value in headers.items()}
