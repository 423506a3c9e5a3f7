# validator.py - single and multi-card move legality
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from solitaire.engine import rules
from solitaire.engine.cards import Card
from solitaire.engine.stacks import Stack, StackKind


@dataclass(frozen=True)
class PlayContext:
    """Read-only view of the game-state flags the validator needs."""

    is_started: bool = True
    is_paused: bool = False
    is_completed: bool = False

    @property
    def is_playing(self) -> bool:
        return self.is_started and not self.is_paused and not self.is_completed


PLAYING = PlayContext()


def validate_move(card: Optional[Card], from_stack: Optional[Stack], to_stack: Optional[Stack],
                  context: PlayContext = PLAYING) -> bool:
    if card is None or to_stack is None:
        return False
    if not context.is_playing:
        return False
    if not card.face_up:
        return False
    if from_stack is not None and from_stack is to_stack:
        return False
    if to_stack.kind == StackKind.FOUNDATION:
        return rules.foundation_accepts(to_stack.top_card(), card)
    if to_stack.kind == StackKind.TABLEAU:
        return rules.tableau_accepts(to_stack.top_card(), card)
    # waste / stock: no direct moves
    return False


def validate_multi_card_move(cards: Sequence[Card], from_stack: Optional[Stack], to_stack: Optional[Stack],
                             context: PlayContext = PLAYING) -> bool:
    if not cards or from_stack is None:
        return False
    if from_stack.kind != StackKind.TABLEAU:
        return False
    if not rules.is_valid_run(cards):
        return False
    # foundations are built one card at a time
    if len(cards) > 1 and to_stack is not None and to_stack.kind == StackKind.FOUNDATION:
        return False
    return validate_move(cards[0], from_stack, to_stack, context)
