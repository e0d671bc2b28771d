"""
Persistent configuration management for EDFView.

Handles user preferences and config file storage. The config only holds
startup defaults; the live view state of a session is never written back.
"""

import os
import sys
import json
from pathlib import Path

from core.domain.viewer import ViewState


CONFIG_DIR_ENV = 'EDFVIEW_CONFIG_DIR'

DEFAULT_CONFIG = {
    'default_amplitude_scale': 1.0,
    'default_time_window_seconds': 10.0,
    'default_auto_scale': False,
    'drag_sensitivity_divisor': 5.0,
    'error_log_enabled': True,
    'last_directory': '',
}


def get_config_dir():
    """
    Get platform-specific config directory.

    Returns:
        Path: Config directory path

    Platform paths:
    - Windows: C:/Users/{username}/AppData/Roaming/EDFView
    - Mac: ~/Library/Application Support/EDFView
    - Linux: ~/.config/EDFView

    The EDFVIEW_CONFIG_DIR environment variable overrides all of these.
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        config_dir = Path(override)
    elif sys.platform == 'win32':
        base = os.environ.get('APPDATA', os.path.expanduser('~'))
        config_dir = Path(base) / 'EDFView'
    elif sys.platform == 'darwin':
        config_dir = Path.home() / 'Library' / 'Application Support' / 'EDFView'
    else:
        config_dir = Path.home() / '.config' / 'EDFView'

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_path():
    """Full path to config file (e.g., ~/.config/EDFView/config.json)."""
    return get_config_dir() / 'config.json'


def get_error_log_path():
    """Path to the JSON error log."""
    return get_config_dir() / 'error_log.json'


def load_config():
    """
    Load config from file. Returns default config if file doesn't exist.

    Returns:
        dict: Config dictionary; keys missing from the file are filled
        from DEFAULT_CONFIG.
    """
    config_path = get_config_path()
    config = dict(DEFAULT_CONFIG)

    if not config_path.exists():
        return config

    try:
        with open(config_path, 'r') as f:
            stored = json.load(f)
        if not isinstance(stored, dict):
            raise ValueError("config root is not an object")
    except (OSError, ValueError) as e:
        print(f"[Config] Warning: Could not load config: {e}")
        return config

    config.update(stored)
    return config


def save_config(config):
    """
    Save config to file.

    Returns:
        bool: True if successful, False otherwise
    """
    try:
        with open(get_config_path(), 'w') as f:
            json.dump(config, indent=2, fp=f)
        return True
    except (OSError, TypeError) as e:
        print(f"[Config] Warning: Could not save config: {e}")
        return False


def update_config(key, value):
    """Update a single config value and save."""
    config = load_config()
    config[key] = value
    return save_config(config)


# Convenience functions
def is_error_log_enabled():
    return bool(load_config().get('error_log_enabled', True))


def get_drag_sensitivity_divisor():
    try:
        value = float(load_config().get('drag_sensitivity_divisor', 5.0))
    except (TypeError, ValueError):
        return DEFAULT_CONFIG['drag_sensitivity_divisor']
    return value if value > 0 else DEFAULT_CONFIG['drag_sensitivity_divisor']


def get_last_directory():
    return load_config().get('last_directory', '')


def set_last_directory(path):
    return update_config('last_directory', str(path))


def view_state_from_config(config=None):
    """
    Build the initial ViewState from config defaults.

    Bad values are clamped (or ignored) by the ViewState setters.
    """
    if config is None:
        config = load_config()

    state = ViewState()
    for setter, key in ((state.set_amplitude_scale, 'default_amplitude_scale'),
                        (state.set_time_window, 'default_time_window_seconds')):
        try:
            setter(config.get(key, DEFAULT_CONFIG[key]))
        except (TypeError, ValueError):
            print(f"[Config] Ignoring invalid {key}: {config.get(key)!r}")
    state.set_auto_scale(bool(config.get('default_auto_scale', False)))
    return state
