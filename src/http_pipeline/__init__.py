"""HTTP Pipeline - async HTTP client runtime with interceptors, retry, caching and request de-duplication."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .core.http_client import HttpClient, create_client, create_default_client
from .core.config import BusinessRule, CacheConfig, ClientConfig, RetryConfig
from .core.models import RequestDescriptor, ResponseEnvelope
from .core.exceptions import (
    BusinessError,
    ClientError,
    ConfigurationError,
    ErrorKind,
    HttpError,
    NetworkError,
    TimeoutError,
)
from .core.storage import MemoryStorage, Storage
from .core.transport import HttpxTransport, RawResponse, Transport, TransportFailure
from .core.logging import LoggingConfig
from .core.env_config import ConfigFileLoader, load_from_env
from .plugins import (
    AuthPlugin,
    CacheBusterPlugin,
    HeadersPlugin,
    LoggingPlugin,
    Plugin,
    PluginPriority,
)

# NullHandler prevents "No handler found" warnings.
# Users can configure logging themselves using logging.getLogger('http_pipeline')
logging.getLogger('http_pipeline').addHandler(logging.NullHandler())

try:
    __version__ = version("http-pipeline-core")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__all__ = [
    # Client
    "HttpClient",
    "create_client",
    "create_default_client",

    # Config
    "ClientConfig",
    "RetryConfig",
    "CacheConfig",
    "BusinessRule",
    "LoggingConfig",
    "load_from_env",
    "ConfigFileLoader",

    # Models
    "RequestDescriptor",
    "ResponseEnvelope",

    # Exceptions
    "ClientError",
    "ErrorKind",
    "NetworkError",
    "TimeoutError",
    "HttpError",
    "BusinessError",
    "ConfigurationError",

    # Collaborators
    "Transport",
    "HttpxTransport",
    "RawResponse",
    "TransportFailure",
    "Storage",
    "MemoryStorage",

    # Plugins
    "Plugin",
    "PluginPriority",
    "AuthPlugin",
    "CacheBusterPlugin",
    "HeadersPlugin",
    "LoggingPlugin",

    # Version
    "__version__",
]
