"""Hint enumeration, best-move ranking, block and completion detection.

Everything here is read-only over the stacks; executing a suggestion is the
engine's job.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, List, Optional, Sequence

from solitaire.engine.cards import TOTAL_CARDS, Card
from solitaire.engine.stacks import Stack, StackKind

logger = logging.getLogger(__name__)


class HintType(str, Enum):
    FOUNDATION = "foundation"
    WASTE_TO_TABLEAU = "waste_to_tableau"
    TABLEAU_TO_TABLEAU = "tableau_to_tableau"
    FLIP = "flip"


class BestMoveType(str, Enum):
    DRAW_STOCK = "draw_stock"
    RECYCLE_WASTE = "recycle_waste"
    CARD_MOVE = "card_move"
    FLIP = "flip"


class MovePriority(IntEnum):
    """Lower sorts first."""
    FOUNDATION_LOW = 0   # Ace or Two to a foundation
    FOUNDATION = 1
    FLIP = 2
    EMPTY_COLUMN = 3
    UNBLOCKING = 4
    TABLEAU = 5
    DRAW = 6
    RECYCLE = 7


@dataclass(frozen=True)
class Hint:
    type: HintType
    card: Card
    from_stack: Stack
    to_stack: Stack

    @property
    def is_flip(self) -> bool:
        return self.type == HintType.FLIP


@dataclass(frozen=True)
class BestMove:
    type: BestMoveType
    priority: MovePriority
    card: Optional[Card] = None
    from_stack: Optional[Stack] = None
    to_stack: Optional[Stack] = None

    def describe(self) -> str:
        if self.type == BestMoveType.DRAW_STOCK:
            return "Draw from the stock"
        if self.type == BestMoveType.RECYCLE_WASTE:
            return "Turn the waste over"
        if self.type == BestMoveType.FLIP:
            return f"Flip the top card of {self.from_stack.ref}"
        return f"Move {self.card} from {self.from_stack.ref} to {self.to_stack.ref}"


@dataclass(frozen=True)
class GameAnalysis:
    total_cards: int
    face_up_cards: int
    foundation_cards: int
    blocked_cards: int
    available_cards: int
    possible_moves: int


def stacks_of_kind(all_stacks: Iterable[Stack], kind: StackKind) -> List[Stack]:
    return [s for s in all_stacks if s.kind == kind]


def first_of_kind(all_stacks: Iterable[Stack], kind: StackKind) -> Optional[Stack]:
    for s in all_stacks:
        if s.kind == kind:
            return s
    return None


def find_foundation_moves(all_stacks: Sequence[Stack]) -> List[Hint]:
    """Every (face-up top card, accepting foundation) pair outside the foundations."""
    foundations = stacks_of_kind(all_stacks, StackKind.FOUNDATION)
    out = []
    for stack in all_stacks:
        if stack.kind == StackKind.FOUNDATION:
            continue
        top = stack.top_card()
        if top is None or not top.face_up:
            continue
        for f in foundations:
            if f.can_accept(top):
                out.append(Hint(HintType.FOUNDATION, top, stack, f))
    return out


def find_cards_to_flip(tableau_stacks: Iterable[Stack]) -> List[Card]:
    out = []
    for stack in tableau_stacks:
        top = stack.top_card()
        if top is not None and not top.face_up:
            out.append(top)
    return out


def find_hints(all_stacks: Sequence[Stack]) -> List[Hint]:
    """
    Candidate moves in a fixed order:
    foundation moves, waste -> tableau, tableau top -> other tableau, flips.
    """
    hints = find_foundation_moves(all_stacks)
    tableau = stacks_of_kind(all_stacks, StackKind.TABLEAU)

    waste = first_of_kind(all_stacks, StackKind.WASTE)
    if waste is not None:
        top = waste.top_card()
        if top is not None and top.face_up:
            for t in tableau:
                if t.can_accept(top):
                    hints.append(Hint(HintType.WASTE_TO_TABLEAU, top, waste, t))

    for src in tableau:
        top = src.top_card()
        if top is None or not top.face_up:
            continue
        for dst in tableau:
            if dst is src:
                continue
            if dst.can_accept(top):
                hints.append(Hint(HintType.TABLEAU_TO_TABLEAU, top, src, dst))

    for card in find_cards_to_flip(tableau):
        hints.append(Hint(HintType.FLIP, card, card.stack, card.stack))
    return hints


def would_expose_face_down(from_stack: Stack, card: Card) -> bool:
    """True if lifting the run that starts at `card` leaves a face-down top behind."""
    if from_stack.kind != StackKind.TABLEAU or card not in from_stack:
        return False
    if card.index == 0:
        return False
    return not from_stack.cards[card.index - 1].face_up


def classify_hint(hint: Hint) -> MovePriority:
    if hint.type == HintType.FOUNDATION:
        if hint.card.rank <= 2:
            return MovePriority.FOUNDATION_LOW
        return MovePriority.FOUNDATION
    if hint.type == HintType.FLIP:
        return MovePriority.FLIP
    if hint.to_stack.is_empty():
        return MovePriority.EMPTY_COLUMN
    if would_expose_face_down(hint.from_stack, hint.card):
        return MovePriority.UNBLOCKING
    return MovePriority.TABLEAU


def rank_hints(hints: Sequence[Hint]) -> List[Hint]:
    """Hints ordered best first; ties keep enumeration order."""
    return sorted(hints, key=classify_hint)


def best_move_for_hint(hint: Hint) -> BestMove:
    move_type = BestMoveType.FLIP if hint.is_flip else BestMoveType.CARD_MOVE
    return BestMove(move_type, classify_hint(hint), hint.card, hint.from_stack, hint.to_stack)


def suggest_best_move(all_stacks: Sequence[Stack]) -> Optional[BestMove]:
    hints = find_hints(all_stacks)
    if hints:
        return best_move_for_hint(rank_hints(hints)[0])

    stock = first_of_kind(all_stacks, StackKind.STOCK)
    waste = first_of_kind(all_stacks, StackKind.WASTE)
    if stock is not None and not stock.is_empty():
        return BestMove(BestMoveType.DRAW_STOCK, MovePriority.DRAW, None, stock, waste)
    if waste is not None and not waste.is_empty():
        return BestMove(BestMoveType.RECYCLE_WASTE, MovePriority.RECYCLE, None, waste, stock)
    return None


def is_game_blocked(all_stacks: Sequence[Stack]) -> bool:
    if find_hints(all_stacks):
        return False
    stock = first_of_kind(all_stacks, StackKind.STOCK)
    waste = first_of_kind(all_stacks, StackKind.WASTE)
    if stock is not None and not stock.is_empty():
        return False
    if waste is not None and not waste.is_empty():
        return False
    logger.debug("no hints and nothing left to draw: game is blocked")
    return True


def is_game_complete(foundation_stacks: Iterable[Stack]) -> bool:
    return sum(len(f) for f in foundation_stacks) == TOTAL_CARDS


def plan_auto_complete_sweep(all_stacks: Sequence[Stack]) -> List[Hint]:
    """
    One foundation move per non-foundation stack whose top currently fits,
    to the first accepting foundation. Executing the whole plan in order is
    always legal because each move touches a different source and suit.
    """
    foundations = stacks_of_kind(all_stacks, StackKind.FOUNDATION)
    plan = []
    claimed = set()
    for stack in all_stacks:
        if stack.kind == StackKind.FOUNDATION:
            continue
        top = stack.top_card()
        if top is None or not top.face_up:
            continue
        for f in foundations:
            if id(f) in claimed:
                continue
            if f.can_accept(top):
                plan.append(Hint(HintType.FOUNDATION, top, stack, f))
                claimed.add(id(f))
                break
    return plan


def analyze_game(all_stacks: Sequence[Stack]) -> GameAnalysis:
    total = face_up = foundation = blocked = available = 0
    for stack in all_stacks:
        total += len(stack)
        if stack.kind == StackKind.FOUNDATION:
            foundation += len(stack)
        top = stack.top_card()
        for c in stack:
            if c.face_up:
                face_up += 1
                if c is top:
                    available += 1
            else:
                blocked += 1
    return GameAnalysis(
        total_cards=total,
        face_up_cards=face_up,
        foundation_cards=foundation,
        blocked_cards=blocked,
        available_cards=available,
        possible_moves=len(find_hints(all_stacks)),
    )
