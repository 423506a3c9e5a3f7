"""KlondikeEngine - owns the stacks and executes the player's commands.

The engine holds no timing or rendering state. Game-state flags come in as a
read-only PlayContext on each command; counters (moves, score, time) belong to
GameState and are kept by the caller.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from solitaire.engine import hints as H
from solitaire.engine import layout as L
from solitaire.engine.cards import Card, is_full_deck
from solitaire.engine.errors import CardNotFoundError, IntegrityError, InvalidDeckError
from solitaire.engine.history import DEFAULT_HISTORY_LIMIT, MoveHistory
from solitaire.engine.moves import CardFlip, CardMove, MoveRecord, MultiCardMove, StockToWaste, WasteToStock
from solitaire.engine.stacks import Stack, StackKind, StackRef
from solitaire.engine.stock import DRAW_COUNTS, draw_cards, recycle_waste
from solitaire.engine.validator import PLAYING, PlayContext, validate_move, validate_multi_card_move

logger = logging.getLogger(__name__)

FOUNDATION_COUNT = 4
TABLEAU_COUNT = 7
DEFAULT_DRAW_COUNT = 3


class KlondikeEngine:
    def __init__(self, draw_count: int = DEFAULT_DRAW_COUNT, history_limit: int = DEFAULT_HISTORY_LIMIT):
        self.draw_count = draw_count if draw_count in DRAW_COUNTS else DEFAULT_DRAW_COUNT
        self.stock = Stack(StackKind.STOCK)
        self.waste = Stack(StackKind.WASTE)
        self.foundations = [Stack(StackKind.FOUNDATION, i) for i in range(FOUNDATION_COUNT)]
        self.tableau = [Stack(StackKind.TABLEAU, i) for i in range(TABLEAU_COUNT)]
        self.history = MoveHistory(history_limit)
        # (suit, rank) order of the last dealt deck, for restart()
        self._dealt_order: Optional[Tuple] = None

    # ----- Stack access -----
    def all_stacks(self) -> List[Stack]:
        return [self.stock, self.waste, *self.foundations, *self.tableau]

    def stack_for(self, ref: StackRef) -> Stack:
        kind = StackKind(ref[0])
        if kind == StackKind.STOCK:
            return self.stock
        if kind == StackKind.WASTE:
            return self.waste
        if kind == StackKind.FOUNDATION:
            return self.foundations[ref[1]]
        return self.tableau[ref[1]]

    def find_stack(self, card: Card) -> Stack:
        stack = card.stack
        if stack is None or card not in stack:
            raise CardNotFoundError(card)
        return stack

    def foundation_card_count(self) -> int:
        return sum(len(f) for f in self.foundations)

    def cards_from(self, card: Card) -> List[Card]:
        """The run a player would pick up by grabbing `card`."""
        stack = self.find_stack(card)
        return stack.sequence_from(card.index)

    def _clear_all(self) -> List[Card]:
        out = []
        for s in self.all_stacks():
            out.extend(s.clear())
        return out

    # ----- Dealing -----
    def deal(self, deck: Sequence[Card]) -> None:
        """
        Lay out a 52-card deck: column c gets c+1 cards popped from the end of
        the deck (only the last one face-up); what remains becomes the stock,
        face-down, keeping its order.
        """
        cards = list(deck)
        if not is_full_deck(cards):
            raise InvalidDeckError("deal needs each of the 52 cards exactly once")
        self._clear_all()
        for c in cards:
            c.stack = None
            c.index = -1
        self._dealt_order = tuple(c.key for c in cards)

        for col in range(TABLEAU_COUNT):
            for r in range(col + 1):
                c = cards.pop()
                c.face_up = (r == col)
                self.tableau[col].push(c)
        for c in cards:
            c.face_up = False
            self.stock.push(c)
        self.history.clear()
        logger.debug("dealt new game: tableau %s, stock %d",
                     [len(t) for t in self.tableau], len(self.stock))

    def restart(self) -> bool:
        """Re-deal the current game's deck in its original order."""
        if self._dealt_order is None:
            return False
        by_key: Dict = {c.key: c for c in self._clear_all()}
        if len(by_key) != len(self._dealt_order):
            raise IntegrityError(["cards went missing before restart"])
        self.deal([by_key[k] for k in self._dealt_order])
        return True

    # ----- Moves -----
    def _snapshot(self, *stacks: Stack):
        return tuple((s.ref, s.snapshot()) for s in stacks)

    def move(self, card: Card, from_stack: Stack, to_stack: Stack, context: PlayContext = PLAYING) -> bool:
        """Move the single top card of `from_stack` onto `to_stack`."""
        if card not in from_stack:
            raise CardNotFoundError(card, from_stack)
        if card is not from_stack.top_card():
            logger.debug("rejected move of %r: not the top of %s", card, from_stack.ref)
            return False
        if not validate_move(card, from_stack, to_stack, context):
            logger.debug("rejected move of %r from %s to %s", card, from_stack.ref, to_stack.ref)
            return False
        before = self._snapshot(from_stack, to_stack)
        from_stack.remove(card)
        to_stack.push(card)
        self.history.record(CardMove(
            sequence=self.history.next_sequence(),
            before=before,
            card=card,
            source=from_stack.ref,
            destination=to_stack.ref,
        ))
        logger.debug("moved %r from %s to %s", card, from_stack.ref, to_stack.ref)
        return True

    def move_run(self, cards: Sequence[Card], from_stack: Stack, to_stack: Stack,
                 context: PlayContext = PLAYING) -> bool:
        """Move a run that ends at the top of `from_stack`."""
        cards = list(cards)
        if not cards:
            return False
        if cards[0] not in from_stack:
            raise CardNotFoundError(cards[0], from_stack)
        tail = from_stack.cards_from(cards[0].index)
        if len(tail) != len(cards) or any(a is not b for a, b in zip(tail, cards)):
            logger.debug("rejected run from %s: cards are not the stack's tail", from_stack.ref)
            return False
        if not validate_multi_card_move(cards, from_stack, to_stack, context):
            logger.debug("rejected run of %d from %s to %s", len(cards), from_stack.ref, to_stack.ref)
            return False
        before = self._snapshot(from_stack, to_stack)
        for c in cards:
            from_stack.remove(c)
        for c in cards:
            to_stack.push(c)
        self.history.record(MultiCardMove(
            sequence=self.history.next_sequence(),
            before=before,
            moved=tuple(cards),
            source=from_stack.ref,
            destination=to_stack.ref,
        ))
        logger.debug("moved run of %d from %s to %s", len(cards), from_stack.ref, to_stack.ref)
        return True

    def send_to_foundation(self, card: Card, context: PlayContext = PLAYING) -> bool:
        """Move `card` to the first foundation that takes it."""
        from_stack = self.find_stack(card)
        if card is not from_stack.top_card():
            return False
        for f in self.foundations:
            if validate_move(card, from_stack, f, context):
                return self.move(card, from_stack, f, context)
        return False

    def draw_from_stock(self, context: PlayContext = PLAYING) -> List[Card]:
        """Draw `draw_count` cards, or recycle the waste when the stock is empty."""
        if not context.is_playing:
            return []
        before = self._snapshot(self.stock, self.waste)
        if self.stock.is_empty():
            if self.waste.is_empty():
                logger.debug("stock and waste are both empty, nothing to draw")
                return []
            recycled = recycle_waste(self.stock, self.waste)
            self.history.record(WasteToStock(
                sequence=self.history.next_sequence(), before=before, recycled=tuple(recycled)))
            logger.debug("recycled %d cards from waste to stock", len(recycled))
            return recycled
        drawn = draw_cards(self.stock, self.waste, self.draw_count)
        self.history.record(StockToWaste(
            sequence=self.history.next_sequence(), before=before, drawn=tuple(drawn)))
        logger.debug("drew %d cards from stock", len(drawn))
        return drawn

    def find_cards_to_flip(self) -> List[Card]:
        return H.find_cards_to_flip(self.tableau)

    def flip(self, card: Card, context: PlayContext = PLAYING) -> bool:
        """Turn a face-down tableau top face-up. Anything else is a no-op."""
        stack = self.find_stack(card)
        if not context.is_playing:
            return False
        if stack.kind != StackKind.TABLEAU or card is not stack.top_card() or card.face_up:
            return False
        before = self._snapshot(stack)
        card.flip(True)
        self.history.record(CardFlip(
            sequence=self.history.next_sequence(), before=before, card=card, stack=stack.ref))
        logger.debug("flipped %r on %s", card, stack.ref)
        return True

    def flip_all(self, context: PlayContext = PLAYING) -> int:
        return sum(1 for c in self.find_cards_to_flip() if self.flip(c, context))

    # ----- Hints -----
    def find_hints(self) -> List[H.Hint]:
        return H.find_hints(self.all_stacks())

    def request_hint(self, context: PlayContext = PLAYING) -> Optional[H.BestMove]:
        if not context.is_playing:
            return None
        return H.suggest_best_move(self.all_stacks())

    def is_blocked(self) -> bool:
        return H.is_game_blocked(self.all_stacks())

    def is_complete(self) -> bool:
        return H.is_game_complete(self.foundations)

    def analyze(self) -> H.GameAnalysis:
        return H.analyze_game(self.all_stacks())

    def apply_best_move(self, best: H.BestMove, context: PlayContext = PLAYING) -> bool:
        """Carry out a suggestion returned by request_hint()."""
        if best.type in (H.BestMoveType.DRAW_STOCK, H.BestMoveType.RECYCLE_WASTE):
            return bool(self.draw_from_stock(context))
        if best.type == H.BestMoveType.FLIP:
            return self.flip(best.card, context)
        return self.move(best.card, best.from_stack, best.to_stack, context)

    # ----- Auto-complete -----
    def auto_complete_sweep(self, context: PlayContext = PLAYING) -> bool:
        """One pass: every top card that fits a foundation right now goes there."""
        if not context.is_playing:
            return False
        moved = 0
        for hint in H.plan_auto_complete_sweep(self.all_stacks()):
            if self.move(hint.card, hint.from_stack, hint.to_stack, context):
                moved += 1
        return moved > 0

    def auto_complete(self, context: PlayContext = PLAYING) -> bool:
        """Sweep until nothing more fits. True if at least one card moved."""
        any_moved = False
        while self.auto_complete_sweep(context):
            any_moved = True
        if any_moved:
            logger.debug("auto-complete finished with %d foundation cards", self.foundation_card_count())
        return any_moved

    # ----- Undo -----
    def undo(self, context: PlayContext = PLAYING) -> Optional[MoveRecord]:
        if not context.is_started or context.is_completed:
            return None
        record = self.history.undo_last()
        if record is None:
            return None
        targets = [(self.stack_for(ref), snap) for ref, snap in record.before]
        for stack, _ in targets:
            stack.clear()
        for stack, snap in targets:
            stack.restore(snap)
        logger.debug("undid move #%d (%s)", record.sequence, record.describe())
        return record

    def can_undo(self) -> bool:
        return self.history.can_undo()

    # ----- Integrity / persistence -----
    def check_integrity(self) -> None:
        errors = []
        seen = {}
        for stack in self.all_stacks():
            for i, c in enumerate(stack.cards):
                if c.key in seen:
                    errors.append(f"{c} in both {seen[c.key]} and {stack.ref}")
                seen[c.key] = stack.ref
                if c.stack is not stack or c.index != i:
                    errors.append(f"{c} has a stale back reference in {stack.ref}")
        if len(seen) != 52:
            errors.append(f"{52 - len(seen)} card(s) missing")
        if errors:
            raise IntegrityError(errors)

    def to_layout(self) -> dict:
        return L.encode_layout(self)

    def load_layout(self, data: dict) -> None:
        """Replace every stack from a saved layout. History starts empty."""
        decoded = L.decode_layout(data)
        self._clear_all()
        self.stock.restore(decoded["stock"])
        self.waste.restore(decoded["waste"])
        for stack, snap in zip(self.foundations, decoded["foundations"]):
            stack.restore(snap)
        for stack, snap in zip(self.tableau, decoded["tableau"]):
            stack.restore(snap)
        self.history.clear()
        self._dealt_order = None
        logger.debug("loaded layout with %d foundation cards", self.foundation_card_count())
