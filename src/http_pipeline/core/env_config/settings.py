"""
Pydantic settings for environment configuration.

Flat HTTP_PIPELINE_* variables validated into one model.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineSettings(BaseSettings):
    """
    HTTP Pipeline configuration from environment variables.

    Reads from:
    1. Environment variables (HTTP_PIPELINE_*)
    2. .env file
    3. Defaults

    Example .env file:
        HTTP_PIPELINE_BASE_URL=https://api.example.com
        HTTP_PIPELINE_TIMEOUT=10.0
        HTTP_PIPELINE_RETRIES=2
        HTTP_PIPELINE_RETRY_DELAY=0.5
        HTTP_PIPELINE_CACHE_ENABLED=true
        HTTP_PIPELINE_LOG_LEVEL=DEBUG

    Usage:
        >>> settings = PipelineSettings()
        >>> settings.base_url
        'https://api.example.com'
    """

    model_config = SettingsConfigDict(
        env_prefix='HTTP_PIPELINE_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # Request defaults
    base_url: str = Field(default="", description="Prefix for relative URLs")
    timeout: float = Field(default=10.0, gt=0, description="Transport timeout in seconds")
    method: Literal["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"] = Field(default="GET")
    ssl_verify: bool = Field(default=True)

    # Retry
    retries: int = Field(default=0, ge=0, le=10)
    retry_delay: float = Field(default=1.0, ge=0)
    retry_backoff_factor: float = Field(default=2.0, ge=1.0)
    retry_max_delay: Optional[float] = Field(default=None, ge=0)
    retry_jitter: bool = Field(default=False)

    # Cache
    cache_enabled: bool = Field(default=False)
    cache_ttl: float = Field(default=300.0, gt=0)
    cache_max_size: Optional[int] = Field(default=None, gt=0)

    # Business status convention in response bodies
    business_check: bool = Field(default=False)

    # Logging
    log_enabled: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text", "colored"] = Field(default="text")
    log_enable_console: bool = Field(default=True)
    log_enable_file: bool = Field(default=False)
    log_file_path: Optional[str] = None
    log_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    log_backup_count: int = Field(default=5, ge=0)
    log_enable_correlation_id: bool = Field(default=True)
    log_slow_request_threshold: Optional[float] = Field(default=None, ge=0)

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator('method', mode='before')
    @classmethod
    def normalize_method(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator('log_file_path')
    @classmethod
    def validate_file_path(cls, v: Optional[str], info) -> Optional[str]:
        """file_path is required when log_enable_file=True."""
        if info.data.get('log_enable_file') and not v:
            raise ValueError("log_file_path is required when log_enable_file=True")
        return v
