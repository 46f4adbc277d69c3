"""Готовые плагины перехватчиков."""

from .auth_plugin import AuthPlugin
from .cache_buster_plugin import CacheBusterPlugin
from .headers_plugin import HeadersPlugin
from .logging_plugin import LoggingPlugin
from .plugin import Plugin, PluginPriority

__all__ = [
    "Plugin",
    "PluginPriority",
    "AuthPlugin",
    "CacheBusterPlugin",
    "HeadersPlugin",
    "LoggingPlugin",
]
