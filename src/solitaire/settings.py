# settings.py - persisted user settings for Klondike
import os
import json
import logging

from solitaire.engine.state import GameSettings

logger = logging.getLogger(__name__)

# Defaults (may be overridden by persisted settings)
_DEFAULT_SETTINGS = {
    "card_size": "Medium",   # Small | Medium | Large
    **GameSettings().to_dict(),
}

_CURRENT_SETTINGS = dict(_DEFAULT_SETTINGS)

CARD_SIZES = ("Small", "Medium", "Large")


def settings_dir() -> str:
    # Prefer %APPDATA% on Windows, else ~/.random_red_mage_solitaire
    base = os.environ.get("APPDATA")
    if base:
        return os.path.join(base, "RandomRedMageSolitaire")
    return os.path.join(os.path.expanduser("~"), ".random_red_mage_solitaire")


def _settings_path() -> str:
    return os.path.join(settings_dir(), "settings.json")


def safe_write_json(path: str, data) -> bool:
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.warning("could not write %s: %s", path, e)
        return False


def safe_read_json(path: str):
    if not os.path.isfile(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("could not read %s: %s", path, e)
        return None


def get_current_settings():
    return dict(_CURRENT_SETTINGS)


def load_settings():
    global _CURRENT_SETTINGS
    _CURRENT_SETTINGS = dict(_DEFAULT_SETTINGS)
    data = safe_read_json(_settings_path())
    if isinstance(data, dict):
        size = str(data.get("card_size", "Medium")).capitalize()
        _CURRENT_SETTINGS["card_size"] = size if size in CARD_SIZES else "Medium"
        # GameSettings normalises anything out of range back to defaults
        _CURRENT_SETTINGS.update(GameSettings.from_dict(data).to_dict())
    return get_current_settings()


def save_settings(new_values: dict) -> bool:
    # Merge and write to disk
    merged = dict(_CURRENT_SETTINGS)
    merged.update({k: v for k, v in new_values.items() if k in _DEFAULT_SETTINGS})
    size = str(merged.get("card_size", "Medium")).capitalize()
    merged["card_size"] = size if size in CARD_SIZES else "Medium"
    merged.update(GameSettings.from_dict(merged).to_dict())
    _CURRENT_SETTINGS.clear()
    _CURRENT_SETTINGS.update(merged)
    return safe_write_json(_settings_path(), _CURRENT_SETTINGS)


def game_settings() -> GameSettings:
    return GameSettings.from_dict(_CURRENT_SETTINGS)
