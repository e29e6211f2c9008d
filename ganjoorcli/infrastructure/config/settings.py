"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
YAML configuration file (~/.ganjoorcli/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from ganjoorcli.domain.models.common import BackoffPolicy

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".ganjoorcli"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
DEFAULT_SESSION_FILE = DEFAULT_CONFIG_DIR / "session.json"
ENV_FILE_NAME = ".env"
ENV_PREFIX = "GANJOOR_"

DEFAULT_API_BASE_URL = "http://localhost:8000/api"
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_CRAWL_PAGE_DELAY = 0.2
DEFAULT_CRAWL_MAX_PAGES = 10
DEFAULT_READ_BACKOFF: BackoffPolicy = {"max_attempts": 5, "initial_delay": 2.0, "factor": 2.0}
DEFAULT_WRITE_BACKOFF: BackoffPolicy = {"max_attempts": 3, "initial_delay": 1.0, "factor": 2.0}

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}  # For testing purposes
_overrides: Dict[str, Any] = {}  # Command-line flags
_loaded = False


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Test overrides
    2. Command-line overrides (set_config)
    3. Environment Variables (GANJOOR_ prefix)
    4. .env file
    5. YAML configuration file
    6. Defaults passed to get_config

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
    """
    global _config, _loaded
    if _loaded:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(yaml_config)
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. Load from .env file; override=False keeps real env vars on top
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (no file found).")

    _loaded = True
    logger.debug("Configuration loading process completed.")


def env_var_name(key: str) -> str:
    """'api.base_url' -> 'GANJOOR_API_BASE_URL'."""
    return ENV_PREFIX + key.upper().replace(".", "_")


def coerce_value(value: str) -> Any:
    """'true' -> True, '3' -> 3, '0.5' -> 0.5; anything else stays a string."""
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


def _lookup(data: Dict[str, Any], key: str) -> Any:
    """Finds a flat 'a.b' key, or walks nested YAML sections."""
    if key in data:
        return data[key]
    node: Any = data
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Args:
        key: Dotted configuration key, e.g. 'api.base_url'
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    if key in _overrides:
        return _overrides[key]

    env_key = env_var_name(key)
    if env_key in os.environ:
        return coerce_value(os.environ[env_key])

    value = _lookup(_config, key)
    if value is not None:
        return value

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default


def set_config(key: str, value: Any) -> None:
    """Overrides a configuration value for the rest of this process.

    Used for command-line flags, so it wins over environment variables and
    every file-based source.
    """
    logger.debug(f"Setting config override: {key} = {value}")
    _overrides[key] = value


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None

# --- Convenience Functions ---

def get_api_base_url() -> str:
    return str(get_config("api.base_url", DEFAULT_API_BASE_URL)).rstrip("/")


def get_request_timeout() -> float:
    return float(get_config("api.timeout", DEFAULT_REQUEST_TIMEOUT))


def _backoff(prefix: str, defaults: BackoffPolicy) -> BackoffPolicy:
    return {
        "max_attempts": int(get_config(f"{prefix}.max_attempts", defaults["max_attempts"])),
        "initial_delay": float(get_config(f"{prefix}.initial_delay", defaults["initial_delay"])),
        "factor": float(get_config(f"{prefix}.factor", defaults["factor"])),
    }


def get_read_backoff() -> BackoffPolicy:
    """Backoff for GET requests (retry.read.* keys)."""
    return _backoff("retry.read", DEFAULT_READ_BACKOFF)


def get_write_backoff() -> BackoffPolicy:
    """Backoff for mutating requests (retry.write.* keys)."""
    return _backoff("retry.write", DEFAULT_WRITE_BACKOFF)


def get_crawl_page_delay() -> float:
    return float(get_config("crawl.page_delay", DEFAULT_CRAWL_PAGE_DELAY))


def get_crawl_max_pages() -> int:
    return int(get_config("crawl.max_pages", DEFAULT_CRAWL_MAX_PAGES))


def get_session_file() -> Path:
    return Path(get_config("session.file", str(DEFAULT_SESSION_FILE))).expanduser()


def get_env_auth_token() -> Optional[str]:
    """Token supplied through GANJOOR_AUTH_TOKEN (or auth.token in YAML)."""
    token = get_config("auth.token")
    return str(token) if token else None


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
