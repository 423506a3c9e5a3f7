# rules.py - card-level Klondike placement predicates
from typing import Optional, Sequence

from solitaire.engine.cards import ACE, KING, Card


def foundation_accepts(top: Optional[Card], card: Card) -> bool:
    """Empty foundation takes an Ace; otherwise same suit, one rank higher."""
    if top is None:
        return card.rank == ACE
    return card.suit == top.suit and card.rank == top.rank + 1


def tableau_accepts(top: Optional[Card], card: Card) -> bool:
    """Empty column takes a King; otherwise a face-up top of the other colour, one rank higher."""
    if top is None:
        return card.rank == KING
    if not top.face_up:
        return False
    return card.is_red != top.is_red and card.rank == top.rank - 1


def continues_run(lower: Card, upper: Card) -> bool:
    """`upper` sits legally on `lower` inside a face-up tableau run."""
    if not lower.face_up or not upper.face_up:
        return False
    if lower.is_red == upper.is_red:
        return False
    return lower.rank == upper.rank + 1


def is_valid_run(cards: Sequence[Card]) -> bool:
    if len(cards) == 1:
        return cards[0].face_up
    for lower, upper in zip(cards, cards[1:]):
        if not continues_run(lower, upper):
            return False
    return bool(cards)
