# cards.py - card identity, face state and deck construction
from __future__ import annotations

import random
from enum import Enum
from typing import TYPE_CHECKING, Iterable, List, Optional

if TYPE_CHECKING:
    from solitaire.engine.stacks import Stack


CARDS_PER_SUIT = 13
TOTAL_CARDS = 52
ACE = 1
KING = 13

RANK_TO_TEXT = {1: "A", 11: "J", 12: "Q", 13: "K"}
for _r in range(2, 11):
    RANK_TO_TEXT[_r] = str(_r)


class Suit(str, Enum):
    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    @property
    def is_red(self) -> bool:
        return self in (Suit.HEARTS, Suit.DIAMONDS)

    @property
    def symbol(self) -> str:
        return SUIT_SYMBOLS[self]


SUIT_SYMBOLS = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}

# Deck order used by make_deck(shuffle=False)
SUITS = (Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS, Suit.SPADES)


class Card:
    """
    A single playing card. Suit and rank never change; face state does.
    `stack` and `index` are lookup-only back references kept up to date by
    Stack.push/Stack.remove; the owning Stack is the only thing that places cards.
    """
    __slots__ = ("_suit", "_rank", "face_up", "stack", "index")

    def __init__(self, suit: Suit, rank: int, face_up: bool = False):
        suit = Suit(suit)
        if not ACE <= int(rank) <= KING:
            raise ValueError(f"rank must be in 1..13, got {rank!r}")
        self._suit = suit
        self._rank = int(rank)
        self.face_up = bool(face_up)
        self.stack: Optional["Stack"] = None
        self.index = -1

    @property
    def suit(self) -> Suit:
        return self._suit

    @property
    def rank(self) -> int:
        return self._rank

    @property
    def value(self) -> int:
        return self._rank

    @property
    def is_red(self) -> bool:
        return self._suit.is_red

    @property
    def is_black(self) -> bool:
        return not self._suit.is_red

    def color(self) -> str:
        return "red" if self.is_red else "black"

    @property
    def key(self):
        return (self._suit, self._rank)

    def flip(self, face_up: Optional[bool] = None) -> None:
        if face_up is None:
            self.face_up = not self.face_up
        else:
            self.face_up = bool(face_up)

    def label(self) -> str:
        return f"{RANK_TO_TEXT[self._rank]}{self._suit.symbol}"

    def __str__(self):
        return self.label()

    def __repr__(self):
        return f"{self.label()}{'↑' if self.face_up else '↓'}"


def make_deck(shuffle: bool = True, rng: Optional[random.Random] = None) -> List[Card]:
    d = [Card(suit, rank, False) for suit in SUITS for rank in range(ACE, KING + 1)]
    if shuffle:
        (rng or random).shuffle(d)
    return d


def is_full_deck(cards: Iterable[Card]) -> bool:
    """True when `cards` holds each of the 52 (suit, rank) pairs exactly once."""
    seen = set()
    count = 0
    for c in cards:
        count += 1
        if c.key in seen:
            return False
        seen.add(c.key)
    return count == TOTAL_CARDS and len(seen) == TOTAL_CARDS
