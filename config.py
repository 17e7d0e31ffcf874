"""
Configuration loader for the product API client.

Loads configuration from YAML file with environment variable substitution.
"""

import os
import re
from pathlib import Path

import yaml

from utils.console import VerboseLevel, parse_verbose_level

DEFAULT_BASE_URL = "https://hstockplus.com/api/admin/v2"


def load_config(config_path: str = None) -> dict:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to $PRODUCT_API_CONFIG,
                     then config.yaml in the current dir.

    Returns:
        Configuration dict with env vars substituted, merged over defaults.
    """
    if config_path is None:
        config_path = os.environ.get("PRODUCT_API_CONFIG", "config.yaml")

    path = Path(config_path)
    if not path.exists():
        return _default_config()

    with open(path) as f:
        content = f.read()

    # Substitute environment variables: ${VAR_NAME} or ${VAR_NAME:default}
    content = _substitute_env_vars(content)

    config = yaml.safe_load(content) or {}

    return _merge_with_defaults(config)


def _substitute_env_vars(content: str) -> str:
    """Replace ${VAR} and ${VAR:default} with environment values."""

    def replace(match):
        var_expr = match.group(1)
        if ":" in var_expr:
            var_name, default = var_expr.split(":", 1)
        else:
            var_name, default = var_expr, ""
        return os.environ.get(var_name, default)

    pattern = r"\$\{([^}]+)\}"
    return re.sub(pattern, replace, content)


def _default_config() -> dict:
    """Return default configuration built from the environment."""
    return {
        "api": {
            "key": os.environ.get("PRODUCT_API_KEY", ""),
            "base_url": os.environ.get("PRODUCT_API_BASE_URL", DEFAULT_BASE_URL),
        },
        "console": {
            "verbose": os.environ.get("PRODUCT_API_VERBOSE", "1"),
        },
    }


def _merge_with_defaults(config: dict) -> dict:
    """Merge user config with defaults."""
    defaults = _default_config()

    # Deep merge
    def merge(base, override):
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = merge(result[key], value)
            else:
                result[key] = value
        return result

    return merge(defaults, config)


def get_api_config(config: dict) -> dict:
    """Get the api section (key, base_url), or empty dict if not found."""
    return config.get("api") or {}


def get_verbose_level(config: dict) -> VerboseLevel:
    """Get the console verbose level. Defaults to LIGHT when unset."""
    value = (config.get("console") or {}).get("verbose")
    if value is None or value == "":
        return VerboseLevel.LIGHT
    return parse_verbose_level(value)
