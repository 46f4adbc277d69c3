"""
Configuration loader from environment variables and .env files.

Main entry point for loading configuration.
"""

from typing import Any, Dict, Optional

from ..config import BusinessRule, CacheConfig, ClientConfig, RetryConfig
from ..exceptions import ConfigurationError
from ..logging.config import LoggingConfig
from .profiles import ProfileType, detect_profile, get_env_file_path, get_profile_defaults
from .settings import PipelineSettings


def load_from_env(
    profile: Optional[ProfileType] = None,
    env_file: Optional[str] = None,
    **overrides: Any
) -> ClientConfig:
    """
    Load ClientConfig from environment variables.

    Priority (highest to lowest):
    1. **overrides - explicit parameters (PipelineSettings field names)
    2. Environment variables (HTTP_PIPELINE_*)
    3. .env file (profile-specific or default)
    4. Profile defaults
    5. Field defaults

    Raises:
        ConfigurationError: On unknown override keys or invalid override values
        pydantic.ValidationError: On invalid HTTP_PIPELINE_* values

    Example:
        >>> config = load_from_env(profile="production", base_url="https://custom.api.com")
    """
    if profile is None:
        profile = detect_profile()
    if env_file is None:
        env_file = get_env_file_path(profile)

    settings = PipelineSettings(_env_file=env_file)

    values = settings.model_dump()
    for key, value in get_profile_defaults(profile).items():
        if key not in settings.model_fields_set:
            values[key] = value

    unknown = set(overrides) - set(values)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")
    values.update(overrides)

    return build_config(values)


def build_config(values: Dict[str, Any]) -> ClientConfig:
    """Build ClientConfig from flat PipelineSettings-shaped values."""
    retry = RetryConfig(
        retries=values['retries'],
        retry_delay=values['retry_delay'],
        backoff_factor=values['retry_backoff_factor'],
        max_retry_delay=values['retry_max_delay'],
        jitter=values['retry_jitter'],
    )

    cache = CacheConfig(
        enabled=values['cache_enabled'],
        ttl=values['cache_ttl'],
        max_size=values['cache_max_size'],
    )

    logging_config = None
    if values['log_enabled']:
        logging_config = LoggingConfig.create(
            level=values['log_level'],
            format=values['log_format'],
            enable_console=values['log_enable_console'],
            enable_file=values['log_enable_file'],
            file_path=values['log_file_path'],
            max_bytes=values['log_max_bytes'],
            backup_count=values['log_backup_count'],
            enable_correlation_id=values['log_enable_correlation_id'],
            slow_request_threshold=values['log_slow_request_threshold'],
        )

    return ClientConfig(
        base_url=values['base_url'] or None,
        timeout=values['timeout'],
        method=values['method'],
        ssl_verify=values['ssl_verify'],
        enable_cache=values['cache_enabled'],
        retry=retry,
        cache=cache,
        business_rule=BusinessRule() if values['business_check'] else None,
        logging=logging_config,
    )


def print_config_summary(config: ClientConfig) -> None:
    """
    Print configuration summary. Header values are masked.

    Example:
        >>> print_config_summary(load_from_env())
        ClientConfig:
          base_url: https://api.example.com
          ...
    """
    from ...utils.sanitizer import mask_headers

    print("ClientConfig:")
    print(f"  base_url: {config.base_url}")
    print(f"  timeout: {config.timeout}s, method: {config.method}")
    print(f"  headers: {mask_headers(config.headers)}")
    print(f"  retry: retries={config.retry.retries}, delay={config.retry.retry_delay}s, "
          f"backoff={config.retry.backoff_factor}")
    print(f"  cache: enabled={config.cache.enabled}, ttl={config.cache.ttl}s")

    if config.logging:
        print(f"  logging: level={config.logging.level.value}, format={config.logging.format.value}")
        if config.logging.enable_file:
            print(f"    file: {config.logging.file_path}")
        if config.logging.slow_request_threshold is not None:
            print(f"    slow request: >= {config.logging.slow_request_threshold}s")
