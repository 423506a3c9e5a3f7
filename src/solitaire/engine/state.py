"""Game-state sibling of the engine: flags, timer, counters, score and stats.

Nothing here touches cards. The session (game.py) keeps the counters in step
with the engine after each command.
"""

from __future__ import annotations

import logging
import time as _time
from dataclasses import asdict, dataclass, fields
from typing import Callable, Dict, Optional

from solitaire.engine.cards import TOTAL_CARDS
from solitaire.engine.history import DEFAULT_HISTORY_LIMIT
from solitaire.engine.stock import DRAW_COUNTS
from solitaire.engine.validator import PlayContext

logger = logging.getLogger(__name__)


_TRUE_WORDS = ("true", "yes", "on", "1")
_FALSE_WORDS = ("false", "no", "off", "0")


def _as_bool(value, default: bool) -> bool:
    """Read a flag from hand-edited JSON; anything unrecognised keeps `default`."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    logger.warning("ignoring setting value %r, using %r", value, default)
    return default


@dataclass
class GameSettings:
    draw_count: int = 3
    allow_undo: bool = True
    show_timer: bool = True
    auto_complete: bool = True
    hint_enabled: bool = True
    history_limit: int = DEFAULT_HISTORY_LIMIT

    def __post_init__(self):
        if self.draw_count not in DRAW_COUNTS:
            self.draw_count = 3
        try:
            self.history_limit = int(self.history_limit)
        except (TypeError, ValueError):
            self.history_limit = DEFAULT_HISTORY_LIMIT
        if self.history_limit < 1:
            self.history_limit = DEFAULT_HISTORY_LIMIT
        for name in ("allow_undo", "show_timer", "auto_complete", "hint_enabled"):
            setattr(self, name, _as_bool(getattr(self, name), getattr(GameSettings, name)))

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "GameSettings":
        """Build from a JSON dict, ignoring unknown keys."""
        if not isinstance(data, dict):
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict:
        return asdict(self)


def calculate_score(moves: int, time: int, foundation_cards: int) -> int:
    """10 per foundation card, a time bonus that runs out after 5000 s, minus half the moves."""
    time_bonus = max(0, 500 - int(time) // 10)
    return max(0, foundation_cards * 10 + time_bonus - int(moves) // 2)


def format_time(seconds: int) -> str:
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


@dataclass(frozen=True)
class GameInfo:
    is_started: bool
    is_completed: bool
    is_paused: bool
    score: int
    moves: int
    time: int
    foundation_cards: int
    progress: float
    can_undo: bool


class GameState:
    """Flags, timer and counters for one game. `clock` returns seconds."""

    def __init__(self, clock: Callable[[], float] = _time.monotonic):
        self._clock = clock
        self.reset()

    def reset(self) -> None:
        self.is_started = False
        self.is_paused = False
        self.is_completed = False
        self.moves = 0
        self.foundation_cards = 0
        self.elapsed = 0
        self._started_at: Optional[float] = None
        self._paused_at: Optional[float] = None
        self._paused_total = 0.0

    # ----- Flags -----
    def is_playing(self) -> bool:
        return self.is_started and not self.is_paused and not self.is_completed

    def context(self) -> PlayContext:
        return PlayContext(self.is_started, self.is_paused, self.is_completed)

    # ----- Timer -----
    def start_game(self) -> None:
        self.reset()
        self.is_started = True
        self._started_at = self._clock()

    def resume_from(self, elapsed: int, moves: int, foundation_cards: int) -> None:
        """Continue a saved game: the clock restarts from `elapsed` seconds."""
        self.start_game()
        self.moves = max(0, int(moves))
        self.foundation_cards = max(0, int(foundation_cards))
        self.elapsed = max(0, int(elapsed))
        self._started_at = self._clock() - self.elapsed

    def update_time(self) -> int:
        if self.is_started and not self.is_completed and not self.is_paused and self._started_at is not None:
            self.elapsed = int(self._clock() - self._started_at - self._paused_total)
        return self.elapsed

    def toggle_pause(self) -> bool:
        if not self.is_started or self.is_completed:
            return self.is_paused
        if self.is_paused:
            self._paused_total += self._clock() - self._paused_at
            self._paused_at = None
            self.is_paused = False
        else:
            self.update_time()
            self._paused_at = self._clock()
            self.is_paused = True
        logger.debug("pause toggled: %s", self.is_paused)
        return self.is_paused

    def complete_game(self) -> None:
        self.update_time()
        self.is_completed = True
        logger.debug("game completed in %s with %d moves", format_time(self.elapsed), self.moves)

    # ----- Counters -----
    def increment_moves(self) -> None:
        self.moves += 1

    def decrement_moves(self) -> None:
        self.moves = max(0, self.moves - 1)

    def set_foundation_cards(self, count: int) -> None:
        self.foundation_cards = count

    @property
    def score(self) -> int:
        return calculate_score(self.moves, self.elapsed, self.foundation_cards)

    def progress(self) -> float:
        return self.foundation_cards / TOTAL_CARDS

    def can_undo(self, history_len: int) -> bool:
        return self.is_started and not self.is_completed and history_len > 0

    def game_info(self, history_len: int = 0) -> GameInfo:
        return GameInfo(
            is_started=self.is_started,
            is_completed=self.is_completed,
            is_paused=self.is_paused,
            score=self.score,
            moves=self.moves,
            time=self.elapsed,
            foundation_cards=self.foundation_cards,
            progress=self.progress(),
            can_undo=self.can_undo(history_len),
        )


@dataclass
class GameStats:
    games_played: int = 0
    games_won: int = 0
    total_time: int = 0
    total_moves: int = 0
    best_time: Optional[int] = None
    best_score: int = 0

    def record_result(self, won: bool, time: int = 0, moves: int = 0, score: int = 0) -> None:
        self.games_played += 1
        self.total_time += int(time)
        self.total_moves += int(moves)
        if won:
            self.games_won += 1
            if self.best_time is None or time < self.best_time:
                self.best_time = int(time)
            self.best_score = max(self.best_score, int(score))

    def win_rate(self) -> str:
        if self.games_played == 0:
            return "0"
        return f"{self.games_won / self.games_played * 100:.1f}"

    def average_time(self) -> int:
        """Total play time spread over the games won."""
        if self.games_won == 0:
            return 0
        return self.total_time // self.games_won

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> "GameStats":
        if not isinstance(data, dict):
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict:
        return asdict(self)
