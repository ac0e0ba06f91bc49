"""Configuration utility for pipedrive-tasks.

This module provides centralized configuration management with:
- Environment variables as the only source
- Type-safe access to configuration values
"""

import os
from typing import Any

DEFAULT_PIPEDRIVE_API_URL = "https://api.pipedrive.com/api/v2"
DEFAULT_PIPEDRIVE_TIMEOUT_SECONDS = 30.0


def parse_config_value(value: str) -> str | bool | int | float:
    if value.lower() == "true":
        return True
    elif value.lower() == "false":
        return False
    else:
        # Try to parse as a number
        try:
            return int(value)
        except ValueError:
            try:
                return float(value)
            except ValueError:
                # Return as string
                return value


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a configuration value from environment variables.

    Args:
        key: Configuration key name (e.g., "PIPEDRIVE_API_URL")
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    env_value = os.environ.get(key)
    if env_value is not None:
        return parse_config_value(env_value)

    return default


def get_config_value_str(key: str) -> str | None:
    """
    Get a configuration value from environment variables, without any parsing.

    Secrets must go through here: an all-digit token would otherwise come back as an int.
    """
    return os.environ.get(key)


def get_pipedrive_environment() -> str:
    """Get the deployment environment from env var."""
    return get_config_value("PIPEDRIVE_TASKS_ENVIRONMENT", "local")


def get_pipedrive_api_token() -> str | None:
    """Get the Pipedrive API token from env."""
    return get_config_value_str("PIPEDRIVE_API_TOKEN")


def get_pipedrive_api_url() -> str:
    """Get the Pipedrive API root, falling back to the production v2 endpoint."""
    return get_config_value_str("PIPEDRIVE_API_URL") or DEFAULT_PIPEDRIVE_API_URL


def get_pipedrive_timeout_seconds() -> float:
    """Get the connect/read/write timeout applied to Pipedrive calls."""
    value = get_config_value("PIPEDRIVE_TIMEOUT_SECONDS", DEFAULT_PIPEDRIVE_TIMEOUT_SECONDS)
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError(f"PIPEDRIVE_TIMEOUT_SECONDS must be a number, got {value!r}")
    return float(value)
