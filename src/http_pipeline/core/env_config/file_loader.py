"""
Configuration file loader for YAML and JSON files.

Builds ClientConfig from external configuration files.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..config import BusinessRule, CacheConfig, ClientConfig, RetryConfig
from ..exceptions import ConfigurationError
from ..logging import LoggingConfig

CONFIG_FILE_ENV_VAR = "HTTP_PIPELINE_CONFIG_FILE"


class ConfigValidationError(ConfigurationError):
    """Raised when configuration file is invalid."""


class ConfigFileLoader:
    """
    Загрузчик конфигурации из файлов.

    Секция верхнего уровня `http_pipeline` необязательна.

    Example config.yaml:
        http_pipeline:
          base_url: https://api.example.com
          timeout: 10
          headers:
            X-App: demo
          retry:
            retries: 2
            retry_delay: 0.1
          cache:
            enabled: true
            ttl: 60
          business:
            code_field: code
            success_codes: [0, 200]
          logging:
            level: DEBUG
            format: json

    Examples:
        >>> config = ConfigFileLoader.from_yaml("config.yaml")
        >>> config = ConfigFileLoader.from_file("config.json")  # Auto-detect
    """

    @staticmethod
    def from_yaml(path: Union[str, Path]) -> ClientConfig:
        """
        Загрузить конфиг из YAML файла.

        Raises:
            FileNotFoundError: Если файл не найден
            ConfigValidationError: Если конфиг невалидный
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML syntax in {path}: {e}") from e

        if not data:
            raise ConfigValidationError(f"Empty config file: {path}")

        return ConfigFileLoader._build_config(data, str(path))

    @staticmethod
    def from_json(path: Union[str, Path]) -> ClientConfig:
        """
        Загрузить конфиг из JSON файла.

        Raises:
            FileNotFoundError: Если файл не найден
            ConfigValidationError: Если конфиг невалидный
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid JSON syntax in {path}: {e}") from e

        if not data:
            raise ConfigValidationError(f"Empty config file: {path}")

        return ConfigFileLoader._build_config(data, str(path))

    @staticmethod
    def from_file(path: Union[str, Path]) -> ClientConfig:
        """
        Автоопределение формата по расширению (.yaml, .yml, .json).

        Raises:
            ValueError: Если формат не поддерживается
        """
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            return ConfigFileLoader.from_yaml(path)
        if suffix == ".json":
            return ConfigFileLoader.from_json(path)
        raise ValueError(
            f"Unsupported config file format: {suffix}. "
            f"Supported formats: .yaml, .yml, .json"
        )

    @staticmethod
    def from_env_path() -> Optional[ClientConfig]:
        """
        Загрузить из пути в HTTP_PIPELINE_CONFIG_FILE (None, если не задан).
        """
        config_path = os.environ.get(CONFIG_FILE_ENV_VAR)
        if not config_path:
            return None

        return ConfigFileLoader.from_file(config_path)

    @staticmethod
    def _section(config_data: Dict[str, Any], name: str, source: str) -> Optional[Dict[str, Any]]:
        if name not in config_data:
            return None
        section = config_data[name]
        if not isinstance(section, dict):
            raise ConfigValidationError(f"{name} must be a dictionary in {source}")
        return section

    @staticmethod
    def _build_config(data: Any, source: str) -> ClientConfig:
        """
        Build ClientConfig from parsed data.

        Raises:
            ConfigValidationError: If config is invalid
        """
        if isinstance(data, dict) and "http_pipeline" in data:
            data = data["http_pipeline"]

        if not isinstance(data, dict):
            raise ConfigValidationError(
                f"Config must be a dictionary, got {type(data).__name__} in {source}"
            )

        section = ConfigFileLoader._section

        try:
            kwargs: Dict[str, Any] = {}
            for key in ("base_url", "timeout", "method", "data_type", "response_type",
                        "ssl_verify", "with_credentials", "enable_cookie", "enable_http2"):
                if key in data:
                    kwargs[key] = data[key]

            headers = section(data, "headers", source)
            if headers is not None:
                kwargs["headers"] = {str(k): str(v) for k, v in headers.items()}

            retry_data = section(data, "retry", source)
            if retry_data is not None:
                kwargs["retry"] = RetryConfig(**{
                    key: retry_data[key]
                    for key in ("retries", "retry_delay", "backoff_factor", "max_retry_delay", "jitter")
                    if key in retry_data
                })

            cache_data = section(data, "cache", source)
            if cache_data is not None:
                cache = CacheConfig(
                    enabled=cache_data.get("enabled", False),
                    ttl=cache_data.get("ttl", 300.0),
                    max_size=cache_data.get("max_size"),
                )
                kwargs["cache"] = cache
                kwargs["enable_cache"] = cache.enabled

            business_data = section(data, "business", source)
            if business_data is not None:
                rule_kwargs: Dict[str, Any] = {}
                if "code_field" in business_data:
                    rule_kwargs["code_field"] = business_data["code_field"]
                if "message_field" in business_data:
                    rule_kwargs["message_field"] = business_data["message_field"]
                if "success_codes" in business_data:
                    rule_kwargs["success_codes"] = frozenset(business_data["success_codes"])
                kwargs["business_rule"] = BusinessRule(**rule_kwargs)

            logging_data = section(data, "logging", source)
            if logging_data is not None:
                kwargs["logging"] = LoggingConfig.create(
                    level=logging_data.get("level", "INFO"),
                    format=logging_data.get("format", "text"),
                    enable_console=logging_data.get("enable_console", True),
                    enable_file=logging_data.get("enable_file", False),
                    file_path=logging_data.get("file_path"),
                    max_bytes=logging_data.get("max_bytes", 10 * 1024 * 1024),
                    backup_count=logging_data.get("backup_count", 5),
                    enable_correlation_id=logging_data.get("enable_correlation_id", True),
                    slow_request_threshold=logging_data.get("slow_request_threshold"),
                    extra_fields=logging_data.get("fields"),
                )

            return ClientConfig(**kwargs)

        except (ValueError, TypeError) as e:
            if isinstance(e, ConfigValidationError):
                raise
            raise ConfigValidationError(f"Invalid config in {source}: {e}") from e
