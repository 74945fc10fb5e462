"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
YAML configuration file (~/.layerx/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from layerx.domain.models.common import RetryPolicy

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".layerx"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"

DEFAULT_BASE_URL = "http://localhost:8000/api"

# Dotted keys that map to a conventional environment variable name
ENV_ALIASES = {
    "api.base_url": "API_BASE_URL",
    "api.token": "API_TOKEN",
    "client.timeout_seconds": "LAYERX_TIMEOUT_SECONDS",
    "client.max_retries": "LAYERX_MAX_RETRIES",
    "client.backoff_step_seconds": "LAYERX_BACKOFF_STEP_SECONDS",
    "logging.level": "LAYERX_LOG_LEVEL",
    "logging.file": "LAYERX_LOG_FILE",
}

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flattens nested YAML mappings into dotted keys ('api': {'token': x} -> 'api.token')."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def load_configuration(
    config_file: Path = DEFAULT_CONFIG_FILE,
    env_file: Optional[Path] = None,
    force: bool = False,
) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values passed to get_config

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
        force: Reload even if configuration was already loaded.
    """
    global _config, _loaded
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. Load from .env file (Medium priority)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        # override=False: real environment variables take precedence
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (no file found).")

    # 3. Environment Variables (Highest priority) are handled in get_config
    _loaded = True
    logger.debug("Configuration loading process completed.")


def _coerce(value: str) -> Any:
    """Converts common string forms from the environment to Python values."""
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    try:
        if "." in value:
            return float(value)
        return int(value)
    except (ValueError, TypeError):
        return value


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable (alias or KEY_WITH_UNDERSCORES)
    3. YAML config
    4. Default value

    Args:
        key: The configuration key (e.g. 'api.base_url')
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    for env_key in (ENV_ALIASES.get(key), key.upper().replace(".", "_")):
        if env_key and env_key in os.environ:
            return _coerce(os.environ[env_key])

    if key in _config:
        return _config[key]

    logger.debug(f"Config key '{key}' not found. Returning default: {default}")
    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None


def set_config(key: str, value: Any) -> None:
    """Sets a configuration value in memory for the rest of the process.

    Args:
        key: Configuration key (e.g., 'logging.level')
        value: Value to set
    """
    logger.debug(f"Setting config: {key} = {value}")
    _config[key] = value


# --- Convenience Functions ---

def get_base_url() -> str:
    """Base URL all endpoint paths are relative to."""
    return str(get_config("api.base_url", DEFAULT_BASE_URL))


def get_api_token() -> Optional[str]:
    """Static API token from configuration, if any."""
    token = get_config("api.token")
    return str(token) if token else None


def get_retry_policy() -> RetryPolicy:
    """Builds the retry policy from configuration, falling back to the defaults."""
    defaults = RetryPolicy()
    try:
        return RetryPolicy(
            max_retries=int(get_config("client.max_retries", defaults.max_retries)),
            timeout_per_attempt=float(get_config("client.timeout_seconds", defaults.timeout_per_attempt)),
            backoff_step=float(get_config("client.backoff_step_seconds", defaults.backoff_step)),
        )
    except (TypeError, ValueError) as e:
        logger.warning(f"Invalid retry configuration ({e}), using defaults.")
        return defaults


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
