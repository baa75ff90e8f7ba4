"""Preferences manager for secretfetch.

Persistent per-user preferences live in the XDG config location
~/.config/secretfetch/preferences.json. Only a fixed set of keys is accepted.
"""
import json
from pathlib import Path
from typing import Optional, Dict, Any
import logging

from .errors import ConfigError

logger = logging.getLogger(__name__)

PREFERENCES_DIR = Path.home() / ".config" / "secretfetch"
PREFERENCES_FILE = PREFERENCES_DIR / "preferences.json"

CONFIG_PATH_KEY = "config_path"
KNOWN_KEYS = (CONFIG_PATH_KEY,)


def _load_preferences() -> Dict[str, Any]:
    """
    Load preferences from JSON file.

    A missing file means no preferences. An unreadable or corrupt file is
    reported and treated as empty so a bad preference never blocks startup.
    """
    if not PREFERENCES_FILE.exists():
        return {}

    try:
        with open(PREFERENCES_FILE, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Ignoring unreadable preferences file {PREFERENCES_FILE}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.error(f"Ignoring preferences file {PREFERENCES_FILE}: expected a JSON object")
        return {}
    return data


def _save_preferences(preferences: Dict[str, Any]) -> None:
    PREFERENCES_DIR.mkdir(parents=True, exist_ok=True)
    with open(PREFERENCES_FILE, 'w') as f:
        json.dump(preferences, f, indent=2, sort_keys=True)


def _check_key(key: str) -> None:
    if key not in KNOWN_KEYS:
        raise ConfigError(f"Unknown preference '{key}'. Known preferences: {', '.join(KNOWN_KEYS)}")


def get_preference(key: str) -> Optional[str]:
    """Return the stored value for ``key``, or None if unset."""
    return _load_preferences().get(key)


def set_preference(key: str, value: str) -> None:
    """
    Store a preference.

    Raises:
        ConfigError: If ``key`` is not a known preference
    """
    _check_key(key)
    preferences = _load_preferences()
    preferences[key] = value
    _save_preferences(preferences)
    logger.info(f"Preference '{key}' set to: {value}")


def clear_preference(key: str) -> bool:
    """
    Remove a preference.

    Returns:
        True if a value was removed, False if it was not set
    """
    preferences = _load_preferences()
    if key not in preferences:
        logger.debug(f"Preference '{key}' not set, nothing to clear")
        return False
    del preferences[key]
    _save_preferences(preferences)
    logger.info(f"Preference '{key}' cleared")
    return True


def get_all_preferences() -> Dict[str, Any]:
    return _load_preferences()
