"""Вспомогательные утилиты."""

from .sanitizer import mask_headers, mask_sensitive_data, mask_string

__all__ = [
    "mask_headers",
    "mask_sensitive_data",
    "mask_string",
]
