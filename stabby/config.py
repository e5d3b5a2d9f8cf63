# stabby configuration loading

from pathlib import Path
from typing import Any, Dict, Optional
import yaml

from .constants import (
    CONFIG_DIR,
    CONFIG_FILE,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_HOSTS_FILE,
    DEFAULT_PTY_COLS,
    DEFAULT_PTY_ROWS,
    DEFAULT_TERM,
    DEFAULT_USERNAME,
    LOGS_DIR,
)


def ensure_config_dir() -> None:
    """Ensure the configuration directory exists."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load the settings file.

    Args:
        path: Settings file to read (defaults to ~/.config/stabby/config.yaml)

    Returns:
        Configuration dictionary merged over the defaults
    """
    config_file = path or CONFIG_FILE
    if not config_file.exists():
        return get_default_config()

    with open(config_file, "r") as f:
        config = yaml.safe_load(f) or {}

    defaults = get_default_config()
    return merge_dicts(defaults, config)


def save_config(config: Dict[str, Any], path: Optional[Path] = None) -> None:
    """
    Save the settings file.

    Args:
        config: Configuration dictionary
        path: Destination (defaults to ~/.config/stabby/config.yaml)
    """
    config_file = path or CONFIG_FILE
    if path is None:
        ensure_config_dir()
    else:
        config_file.parent.mkdir(parents=True, exist_ok=True)

    with open(config_file, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def get_default_config() -> Dict[str, Any]:
    """Get the default configuration."""
    return {
        "hosts_file": DEFAULT_HOSTS_FILE,
        "ssh": {
            # Used when a host entry has no "user" key
            "username": DEFAULT_USERNAME,
            "connect_timeout": DEFAULT_CONNECT_TIMEOUT,
        },
        "pty": {
            "term": DEFAULT_TERM,
            "rows": DEFAULT_PTY_ROWS,
            "cols": DEFAULT_PTY_COLS,
            # Use the local terminal size when it can be read
            "detect_size": True,
        },
        "logging": {
            # Per-session JSONL event log
            "enabled": True,
            "dir": str(LOGS_DIR),
        },
    }


def merge_dicts(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary with overriding values

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value

    return result


def lookup(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    """Look up a dot-separated path in an already loaded configuration."""
    value = config
    for key in path.split("."):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


def get_config_value(path: str, default: Any = None) -> Any:
    """
    Get a configuration value by dot-separated path.

    Args:
        path: Dot-separated path (e.g., "ssh.connect_timeout")
        default: Default value if not found

    Returns:
        Configuration value
    """
    return lookup(load_config(), path, default)


def set_config_value(path: str, value: Any) -> None:
    """
    Set a configuration value by dot-separated path.

    Args:
        path: Dot-separated path (e.g., "pty.term")
        value: Value to set
    """
    config = load_config()
    keys = path.split(".")

    # Navigate to parent
    current = config
    for key in keys[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]

    current[keys[-1]] = value
    save_config(config)
