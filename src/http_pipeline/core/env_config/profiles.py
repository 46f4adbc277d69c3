"""
Profile management for different environments.

Supports development, production and testing profiles.
"""

import os
from typing import Any, Dict, Literal, Optional

ProfileType = Literal["development", "production", "testing"]

PROFILES = ("development", "production", "testing")

ENV_VAR = "HTTP_PIPELINE_ENV"

# Defaults applied beneath environment variables for each profile
PROFILE_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "development": {
        "base_url": "http://localhost:3000/api",
        "log_enabled": True,
        "log_level": "DEBUG",
        "log_format": "colored",
    },
    "production": {
        "base_url": "https://api.example.com",
        "log_enabled": False,
    },
    "testing": {
        "base_url": "https://test-api.example.com",
        "log_enabled": True,
    },
}


def get_env_file_path(profile: Optional[ProfileType] = None) -> str:
    """
    Get .env file path for profile.

    Example:
        >>> get_env_file_path("development")
        '.env.development'
        >>> get_env_file_path(None)
        '.env'
    """
    if profile is None:
        profile = os.getenv(ENV_VAR)

    if not profile:
        return ".env"

    return f".env.{profile}"


def detect_profile() -> Optional[ProfileType]:
    """
    Auto-detect current profile from environment.

    Checks in order:
    1. HTTP_PIPELINE_ENV environment variable
    2. CI marker (testing)
    3. Container markers (production)

    Example:
        >>> os.environ["HTTP_PIPELINE_ENV"] = "production"
        >>> detect_profile()
        'production'
    """
    env = os.getenv(ENV_VAR)
    if env in PROFILES:
        return env

    if os.getenv("CI") == "true":
        return "testing"

    if os.getenv("KUBERNETES_SERVICE_HOST") or os.getenv("DOCKER_CONTAINER"):
        return "production"

    return None


def get_profile_defaults(profile: Optional[str]) -> Dict[str, Any]:
    """
    Settings defaults for a profile ({} for None).

    Raises:
        ValueError: If profile is unknown
    """
    if profile is None:
        return {}
    if profile not in PROFILE_DEFAULTS:
        raise ValueError(
            f"Unknown profile: {profile}. Available: {', '.join(PROFILES)}"
        )
    return dict(PROFILE_DEFAULTS[profile])
