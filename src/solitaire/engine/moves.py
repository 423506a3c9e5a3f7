"""Move records: one closed variant per kind of successful mutation.

Every record carries the snapshots of the stacks it touched as they were
*before* the mutation, which is what undo restores.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

from solitaire.engine.cards import Card
from solitaire.engine.stacks import StackRef, StackSnapshot


class MoveKind(str, Enum):
    CARD_MOVE = "card_move"
    MULTI_CARD_MOVE = "multi_card_move"
    STOCK_TO_WASTE = "stock_to_waste"
    WASTE_TO_STOCK = "waste_to_stock"
    CARD_FLIP = "card_flip"


@dataclass(frozen=True)
class MoveRecord:
    sequence: int
    # ((stack ref, snapshot before the move), ...)
    before: Tuple[Tuple[StackRef, StackSnapshot], ...] = field(default=(), repr=False, compare=False)

    kind = None  # set on each variant

    @property
    def cards(self) -> Tuple[Card, ...]:
        return ()

    def describe(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class CardMove(MoveRecord):
    card: Card = None
    source: StackRef = None
    destination: StackRef = None

    kind = MoveKind.CARD_MOVE

    @property
    def cards(self):
        return (self.card,)

    def describe(self) -> str:
        return f"{self.card} {self.source} -> {self.destination}"


@dataclass(frozen=True)
class MultiCardMove(MoveRecord):
    moved: Tuple[Card, ...] = ()
    source: StackRef = None
    destination: StackRef = None

    kind = MoveKind.MULTI_CARD_MOVE

    @property
    def cards(self):
        return self.moved

    @property
    def count(self) -> int:
        return len(self.moved)

    def describe(self) -> str:
        return f"{len(self.moved)} cards from {self.moved[0]} {self.source} -> {self.destination}"


@dataclass(frozen=True)
class StockToWaste(MoveRecord):
    drawn: Tuple[Card, ...] = ()

    kind = MoveKind.STOCK_TO_WASTE

    @property
    def cards(self):
        return self.drawn

    @property
    def count(self) -> int:
        return len(self.drawn)

    def describe(self) -> str:
        return f"draw {len(self.drawn)}"


@dataclass(frozen=True)
class WasteToStock(MoveRecord):
    recycled: Tuple[Card, ...] = ()

    kind = MoveKind.WASTE_TO_STOCK

    @property
    def cards(self):
        return self.recycled

    @property
    def count(self) -> int:
        return len(self.recycled)

    def describe(self) -> str:
        return f"recycle {len(self.recycled)}"


@dataclass(frozen=True)
class CardFlip(MoveRecord):
    card: Card = None
    stack: StackRef = None

    kind = MoveKind.CARD_FLIP

    @property
    def cards(self):
        return (self.card,)

    def describe(self) -> str:
        return f"flip {self.card} on {self.stack}"
