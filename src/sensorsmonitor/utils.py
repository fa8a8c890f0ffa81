"""
sensorsmonitor Utility Functions

This module provides helper functions for:
    - Configuration management
    - Logging utilities
"""

import copy
import logging
import sys
from pathlib import Path
from typing import Dict, Any, Optional

import yaml
from platformdirs import user_config_dir

from .errors import ConfigurationError, EXIT_INVALID_CONFIG

APP_NAME = "sensorsmonitor"

# Configure module logger
logger = logging.getLogger("sensorsmonitor")


# =============================================================================
# Configuration Management
# =============================================================================

def get_default_config_path() -> Path:
    """Return the per-user default config file location."""
    return Path(user_config_dir(APP_NAME)) / "config.yaml"


def get_default_config() -> Dict[str, Any]:
    """Return default configuration values."""
    return {
        "general": {
            "polling_interval": 5,
            "max_per_family": 4,
            "backend": "libsensors",
        },
        "sensors": {
            "config_file": None,
        },
        "channel": {
            "runtime_dir_env": "XDG_RUNTIME_DIR",
            "pipe_name": "sensorsmonitor",
            "mode": 0o644,
            "remove_on_exit": False,
        },
        "debug": {
            "verbose": False,
            "log_level": "INFO",
        },
    }


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge ``override`` into a copy of ``base``.

    Args:
        base: Configuration providing defaults
        override: Values taking precedence

    Returns:
        New merged configuration dictionary
    """
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    A missing file is not an error: defaults are used. A file that exists but
    cannot be parsed is fatal.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary
    """
    if config_path is None:
        config_path = get_default_config_path()

    config_path = Path(config_path)

    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path}. Using defaults.")
        return get_default_config()

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"failed to load config '{config_path}'",
            detail=str(e),
            exit_code=EXIT_INVALID_CONFIG,
        ) from e

    if loaded is None:
        return get_default_config()
    if not isinstance(loaded, dict):
        raise ConfigurationError(
            f"config '{config_path}' is not a mapping",
            exit_code=EXIT_INVALID_CONFIG,
        )

    config = merge_config(get_default_config(), loaded)
    validate_config(config)
    return config


def _invalid(key: str, value: Any, expected: str) -> ConfigurationError:
    return ConfigurationError(
        f"invalid config value for '{key}'",
        detail=f"expected {expected}, got {value!r}",
        exit_code=EXIT_INVALID_CONFIG,
    )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> None:
    """
    Check the types of the settings the monitor acts on.

    Missing keys are fine, the consumers fall back to defaults.

    Raises:
        ConfigurationError: exit 7 on the first bad value
    """
    for section in ("general", "sensors", "channel", "debug"):
        if not isinstance(config.get(section, {}), dict):
            raise _invalid(section, config[section], "a mapping")

    general = config.get("general", {})
    if "polling_interval" in general:
        interval = general["polling_interval"]
        if not (isinstance(interval, (int, float)) and not isinstance(interval, bool)) \
                or not interval > 0:
            raise _invalid("general.polling_interval", interval, "a positive number")
    if "max_per_family" in general:
        limit = general["max_per_family"]
        if not _is_int(limit) or limit < 0:
            raise _invalid("general.max_per_family", limit, "an integer >= 0")

    channel = config.get("channel", {})
    if "mode" in channel:
        mode = channel["mode"]
        # YAML 1.1 reads 0o644 as a string; write 0644 or 420
        if not _is_int(mode) or not 0 <= mode <= 0o7777:
            raise _invalid("channel.mode", mode, "an integer permission mode")
    for key in ("runtime_dir_env", "pipe_name"):
        if key in channel and not isinstance(channel[key], str):
            raise _invalid(f"channel.{key}", channel[key], "a string")

    config_file = config.get("sensors", {}).get("config_file")
    if config_file is not None and not isinstance(config_file, str):
        raise _invalid("sensors.config_file", config_file, "a path")


# =============================================================================
# Logging Utilities
# =============================================================================

def setup_logging(config: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """
    Set up logging for sensorsmonitor.

    All diagnostics go to stderr; stdout is reserved for rendered lines.

    Args:
        config: Configuration dictionary

    Returns:
        Configured logger
    """
    config = config or get_default_config()
    debug_config = config.get("debug", {})

    verbose = debug_config.get("verbose", False)
    level_name = "DEBUG" if verbose else str(debug_config.get("log_level", "INFO"))
    log_level = getattr(logging, level_name.upper(), logging.INFO)

    root = logging.getLogger("sensorsmonitor")
    root.setLevel(log_level)

    # Avoid stacking handlers when called more than once
    for handler in list(root.handlers):
        if getattr(handler, "_sensorsmonitor", False):
            root.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    console_handler._sensorsmonitor = True
    root.addHandler(console_handler)

    return root
