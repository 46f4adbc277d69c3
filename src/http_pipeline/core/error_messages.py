"""Каталог человекочитаемых сообщений для HTTP и бизнес-кодов."""

from typing import Mapping, Optional, Union

HTTP_ERROR_MESSAGES: Mapping[int, str] = {
    400: "Bad request parameters",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Resource not found",
    405: "Method not allowed",
    408: "Request timeout",
    409: "Resource conflict",
    422: "Request validation failed",
    429: "Too many requests",
    500: "Internal server error",
    502: "Bad gateway",
    503: "Service unavailable",
    504: "Gateway timeout",
}

BUSINESS_ERROR_MESSAGES: Mapping[int, str] = {
    10001: "User does not exist",
    10002: "Wrong password",
    10003: "Account is locked",
    10004: "Wrong verification code",
    10005: "Verification code expired",
    20001: "Insufficient permissions",
    20002: "Resource does not exist",
    20003: "Operation failed",
    30001: "Invalid parameter",
    30002: "Malformed data",
    30003: "Data validation failed",
}


def get_error_message(code: Optional[Union[int, str]], default: Optional[str] = None) -> str:
    """
    Получить сообщение для кода.

    Порядок: HTTP статус, бизнес-код, default, "Unknown error".

    Examples:
        >>> get_error_message(404)
        'Resource not found'
        >>> get_error_message(10002)
        'Wrong password'
        >>> get_error_message(777, "custom")
        'custom'
    """
    try:
        numeric = int(code) if code is not None else None
    except (TypeError, ValueError):
        numeric = None

    if numeric is not None:
        if numeric in HTTP_ERROR_MESSAGES:
            return HTTP_ERROR_MESSAGES[numeric]
        if numeric in BUSINESS_ERROR_MESSAGES:
            return BUSINESS_ERROR_MESSAGES[numeric]
    return default or "Unknown error"
