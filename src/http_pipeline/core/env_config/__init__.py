"""
Environment configuration system for HTTP Pipeline.

Load configuration from .env files, environment variables and config files.

Example:
    >>> from http_pipeline.core.env_config import load_from_env
    >>>
    >>> config = load_from_env()
    >>> config = load_from_env(profile="production", base_url="https://custom.api.com")
"""

from .file_loader import ConfigFileLoader, ConfigValidationError
from .loader import build_config, load_from_env, print_config_summary
from .profiles import (
    PROFILE_DEFAULTS,
    ProfileType,
    detect_profile,
    get_env_file_path,
    get_profile_defaults,
)
from .settings import PipelineSettings

__all__ = [
    # Loaders
    "load_from_env",
    "build_config",
    "print_config_summary",
    "ConfigFileLoader",
    "ConfigValidationError",
    # Settings
    "PipelineSettings",
    # Profiles
    "ProfileType",
    "PROFILE_DEFAULTS",
    "detect_profile",
    "get_env_file_path",
    "get_profile_defaults",
]
