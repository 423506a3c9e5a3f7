# saves.py - Klondike saved-game slot and statistics
import os
import time
import logging
from typing import Optional

from solitaire.engine.state import GameStats
from solitaire.settings import safe_read_json, safe_write_json, settings_dir

logger = logging.getLogger(__name__)

SAVE_MAX_AGE_SECONDS = 24 * 60 * 60


def _save_path() -> str:
    return os.path.join(settings_dir(), "klondike_save.json")


def _stats_path() -> str:
    return os.path.join(settings_dir(), "klondike_stats.json")


def save_game(snapshot: dict) -> bool:
    """Write a KlondikeGame.snapshot() to the save slot."""
    data = dict(snapshot)
    data.setdefault("saved_at", time.time())
    return safe_write_json(_save_path(), data)


def clear_saved_game() -> None:
    path = _save_path()
    if os.path.isfile(path):
        try:
            os.remove(path)
        except OSError as e:
            logger.warning("could not remove %s: %s", path, e)


def load_game(now: Optional[float] = None) -> Optional[dict]:
    """
    The saved snapshot, or None. Saves that are completed, malformed or older
    than a day are deleted.
    """
    data = safe_read_json(_save_path())
    if data is None:
        return None
    now = time.time() if now is None else now
    if not isinstance(data, dict) or "layout" not in data:
        logger.warning("discarding malformed save")
        clear_saved_game()
        return None
    if data.get("is_completed", False):
        clear_saved_game()
        return None
    try:
        age = now - float(data.get("saved_at", 0))
    except (TypeError, ValueError):
        age = SAVE_MAX_AGE_SECONDS + 1
    if age > SAVE_MAX_AGE_SECONDS:
        logger.debug("saved game is %.0f s old, discarding", age)
        clear_saved_game()
        return None
    return data


def has_saved_game(now: Optional[float] = None) -> bool:
    return load_game(now) is not None


def load_stats() -> GameStats:
    return GameStats.from_dict(safe_read_json(_stats_path()))


def save_stats(stats: GameStats) -> bool:
    return safe_write_json(_stats_path(), stats.to_dict())
