# game.py - one Klondike session: engine + state + settings wired together
from __future__ import annotations

import logging
import random
import time as _time
from typing import Callable, Dict, List, Optional, Sequence

from solitaire.engine.cards import Card, make_deck
from solitaire.engine.engine import KlondikeEngine
from solitaire.engine.errors import InvalidDeckError
from solitaire.engine.hints import BestMove
from solitaire.engine.moves import MoveRecord
from solitaire.engine.stacks import Stack
from solitaire.engine.state import GameInfo, GameSettings, GameState, GameStats

logger = logging.getLogger(__name__)


class KlondikeGame:
    """
    The object a front end talks to. Every command forwards to the engine with
    the current PlayContext, then keeps moves/foundation counters and the
    completion flag in step. Settings that disable a feature make the matching
    command return False/None.
    """

    def __init__(self, settings: Optional[GameSettings] = None, stats: Optional[GameStats] = None,
                 clock: Callable[[], float] = _time.monotonic):
        self.settings = settings or GameSettings()
        self.stats = stats or GameStats()
        self.state = GameState(clock=clock)
        self.engine = KlondikeEngine(self.settings.draw_count, self.settings.history_limit)
        self.seed: Optional[int] = None

    # ----- Lifecycle -----
    def new_game(self, seed: Optional[int] = None, deck: Optional[Sequence[Card]] = None) -> None:
        if self.state.is_started and not self.state.is_completed and self.state.moves > 0:
            self.stats.record_result(False, self.state.update_time(), self.state.moves)
        if deck is None:
            self.seed = seed if seed is not None else random.randrange(2 ** 31)
            deck = make_deck(shuffle=True, rng=random.Random(self.seed))
        else:
            self.seed = seed
        self.engine = KlondikeEngine(self.settings.draw_count, self.settings.history_limit)
        self.engine.deal(deck)
        self.state.start_game()
        logger.debug("new game, seed=%s draw=%d", self.seed, self.settings.draw_count)

    def restart(self) -> bool:
        if not self.engine.restart():
            return False
        self.state.start_game()
        return True

    def toggle_pause(self) -> bool:
        return self.state.toggle_pause()

    # ----- Counters -----
    def _after_command(self, recorded: bool) -> None:
        if recorded:
            self.state.increment_moves()
        self.state.set_foundation_cards(self.engine.foundation_card_count())
        self.state.update_time()
        if not self.state.is_completed and self.engine.is_complete():
            self.state.complete_game()
            self.stats.record_result(True, self.state.elapsed, self.state.moves, self.state.score)

    # ----- Commands -----
    def move(self, card: Card, from_stack: Stack, to_stack: Stack) -> bool:
        ok = self.engine.move(card, from_stack, to_stack, self.state.context())
        self._after_command(ok)
        return ok

    def move_run(self, cards: Sequence[Card], from_stack: Stack, to_stack: Stack) -> bool:
        ok = self.engine.move_run(cards, from_stack, to_stack, self.state.context())
        self._after_command(ok)
        return ok

    def send_to_foundation(self, card: Card) -> bool:
        ok = self.engine.send_to_foundation(card, self.state.context())
        self._after_command(ok)
        return ok

    def draw_from_stock(self) -> List[Card]:
        cards = self.engine.draw_from_stock(self.state.context())
        self._after_command(bool(cards))
        return cards

    def flip(self, card: Card) -> bool:
        ok = self.engine.flip(card, self.state.context())
        self._after_command(ok)
        return ok

    def undo(self) -> Optional[MoveRecord]:
        if not self.settings.allow_undo:
            return None
        record = self.engine.undo(self.state.context())
        if record is not None:
            self.state.decrement_moves()
            self.state.set_foundation_cards(self.engine.foundation_card_count())
        return record

    def request_hint(self) -> Optional[BestMove]:
        if not self.settings.hint_enabled:
            return None
        return self.engine.request_hint(self.state.context())

    def can_auto_finish(self) -> bool:
        """Stock and waste are empty and every tableau card is face-up."""
        if not self.settings.auto_complete or not self.state.is_playing():
            return False
        if self.engine.stock.cards or self.engine.waste.cards:
            return False
        return all(c.face_up for t in self.engine.tableau for c in t.cards)

    def auto_complete(self) -> bool:
        if not self.settings.auto_complete:
            return False
        before = self.engine.history.last_sequence
        moved = self.engine.auto_complete(self.state.context())
        # each foundation move is its own history record
        for _ in range(self.engine.history.last_sequence - before):
            self.state.increment_moves()
        self._after_command(False)
        return moved

    def is_blocked(self) -> bool:
        return self.state.is_playing() and self.engine.is_blocked()

    def game_info(self) -> GameInfo:
        self.state.update_time()
        return self.state.game_info(len(self.engine.history))

    # ----- Persistence -----
    def snapshot(self) -> Dict:
        self.state.update_time()
        return {
            "layout": self.engine.to_layout(),
            "moves": self.state.moves,
            "time": self.state.elapsed,
            "is_completed": self.state.is_completed,
            "seed": self.seed,
            "settings": self.settings.to_dict(),
            "saved_at": _time.time(),
        }

    @classmethod
    def from_snapshot(cls, data: Dict, stats: Optional[GameStats] = None,
                      clock: Callable[[], float] = _time.monotonic) -> "KlondikeGame":
        """Rebuild a session from snapshot(). Raises InvalidDeckError on bad data."""
        try:
            elapsed = int(data.get("time", 0))
            moves = int(data.get("moves", 0))
        except (TypeError, ValueError) as e:
            raise InvalidDeckError(f"bad counters in saved game: {e}") from e
        game = cls(GameSettings.from_dict(data.get("settings")), stats, clock=clock)
        game.engine.load_layout(data["layout"])
        game.seed = data.get("seed")
        game.state.resume_from(elapsed, moves, game.engine.foundation_card_count())
        return game
