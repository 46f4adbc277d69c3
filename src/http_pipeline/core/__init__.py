"""Core HTTP Pipeline модули."""

from .cache import CacheEntry, CacheStore
from .clock import Clock, MonotonicClock
from .concurrency import ConcurrencyController
from .config import BusinessRule, CacheConfig, ClientConfig, RetryConfig
from .error_handler import ErrorClassifier, default_retry_condition
from .exceptions import (
    BusinessError,
    ClientError,
    ConfigurationError,
    ErrorKind,
    HttpError,
    NetworkError,
    TimeoutError,
)
from .http_client import HttpClient, create_client, create_default_client
from .interceptors import InterceptorChain, Interceptors, InterceptorSlot
from .merger import build_url, fingerprint, merge_config, merge_headers, serialize_params
from .models import RequestDescriptor, ResponseEnvelope
from .retry_engine import RetryEngine
from .stats import RequestStats
from .storage import MemoryStorage, Storage
from .transport import HttpxTransport, RawResponse, Transport, TransportFailure

__all__ = [
    "CacheEntry",
    "CacheStore",
    "Clock",
    "MonotonicClock",
    "ConcurrencyController",
    "BusinessRule",
    "CacheConfig",
    "ClientConfig",
    "RetryConfig",
    "ErrorClassifier",
    "default_retry_condition",
    "BusinessError",
    "ClientError",
    "ConfigurationError",
    "ErrorKind",
    "HttpError",
    "NetworkError",
    "TimeoutError",
    "HttpClient",
    "create_client",
    "create_default_client",
    "InterceptorChain",
    "Interceptors",
    "InterceptorSlot",
    "build_url",
    "fingerprint",
    "merge_config",
    "merge_headers",
    "serialize_params",
    "RequestDescriptor",
    "ResponseEnvelope",
    "RetryEngine",
    "RequestStats",
    "MemoryStorage",
    "Storage",
    "HttpxTransport",
    "RawResponse",
    "Transport",
    "TransportFailure",
]
