#!/usr/bin/env python3
"""
Configuration management for pylings.
Handles watch-mode timing and exercise locations with local JSON storage.
"""

import os
import sys
import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Dict, Any


DEFAULTS: Dict[str, Any] = {
    'exercises_dir': 'exercises',
    'info_file': 'info.json',
    'extension': 'py',
    'debounce_seconds': 1.0,
    'poll_seconds': 1.0,
    'python': None,         # None means the interpreter running pylings
    'run_timeout': None,    # None means no limit on a single exercise
}

NUMERIC_KEYS = {'debounce_seconds', 'poll_seconds', 'run_timeout'}


@dataclass
class WatchSettings:
    """Effective settings for one pylings invocation"""
    exercises_dir: str = DEFAULTS['exercises_dir']
    info_file: str = DEFAULTS['info_file']
    extension: str = DEFAULTS['extension']
    debounce_seconds: float = DEFAULTS['debounce_seconds']
    poll_seconds: float = DEFAULTS['poll_seconds']
    python: Optional[str] = DEFAULTS['python']
    run_timeout: Optional[float] = DEFAULTS['run_timeout']

    @property
    def python_executable(self) -> str:
        return self.python or sys.executable

    @property
    def suffix(self) -> str:
        """Extension with a leading dot, as pathlib reports it"""
        return '.' + self.extension.lstrip('.')


def get_config_dir() -> Path:
    """Get the pylings config directory (~/.pylings or $PYLINGS_HOME)"""
    override = os.environ.get('PYLINGS_HOME')
    config_dir = Path(override) if override else Path.home() / '.pylings'
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_path() -> Path:
    """Get the config file path"""
    return get_config_dir() / 'config.json'


def load_config() -> Dict[str, Any]:
    """Load configuration from file"""
    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            return {}
    return {}


def save_config(config: Dict[str, Any]) -> None:
    """Save configuration to file"""
    config_path = get_config_path()
    with open(config_path, 'w') as f:
        json.dump(config, f, indent=2)


def load_settings() -> WatchSettings:
    """
    Build settings from stored values layered over the defaults.

    Unknown keys in the config file are ignored so that a newer config
    does not break an older pylings.
    """
    stored = load_config()
    known = {f.name for f in fields(WatchSettings)}
    values = {key: value for key, value in stored.items() if key in known}
    return WatchSettings(**values)


def coerce_value(key: str, value: str) -> Any:
    """
    Convert a command-line string into the type stored for `key`.

    Raises:
        KeyError: if the key is not a known setting
        ValueError: if a numeric setting gets a non-numeric value
    """
    if key not in DEFAULTS:
        raise KeyError(key)

    if value.lower() in ('', 'none', 'default'):
        return None

    if key in NUMERIC_KEYS:
        number = float(value)
        if number <= 0:
            raise ValueError(f"{key} must be positive")
        return number

    return value


def set_config_value(key: str, value: Any) -> None:
    """Set a specific config value; None removes it so the default applies"""
    config = load_config()
    if value is None:
        config.pop(key, None)
    else:
        config[key] = value
    save_config(config)
