# stacks.py - ordered card piles with kind-specific acceptance rules
from __future__ import annotations

from enum import Enum
from typing import Iterator, List, NamedTuple, Optional, Tuple

from solitaire.engine import rules
from solitaire.engine.cards import Card
from solitaire.engine.errors import CardNotFoundError


class StackKind(str, Enum):
    STOCK = "stock"
    WASTE = "waste"
    FOUNDATION = "foundation"
    TABLEAU = "tableau"


class StackRef(NamedTuple):
    """Stable descriptor of a stack, used in move records and saved games."""
    kind: StackKind
    index: int

    def __str__(self):
        if self.kind in (StackKind.STOCK, StackKind.WASTE):
            return self.kind.value
        return f"{self.kind.value}[{self.index}]"


# (card, face_up) pairs bottom -> top
StackSnapshot = Tuple[Tuple[Card, bool], ...]


class Stack:
    def __init__(self, kind: StackKind, index: int = 0):
        self.kind = StackKind(kind)
        self.index = index
        self.cards: List[Card] = []

    @property
    def ref(self) -> StackRef:
        return StackRef(self.kind, self.index)

    def __len__(self):
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __contains__(self, card):
        return card.stack is self and 0 <= card.index < len(self.cards) and self.cards[card.index] is card

    def __repr__(self):
        return f"<Stack {self.ref} {self.cards!r}>"

    def is_empty(self) -> bool:
        return not self.cards

    def top_card(self) -> Optional[Card]:
        return self.cards[-1] if self.cards else None

    def can_accept(self, card: Card) -> bool:
        """Destination rule checked against this stack's top card."""
        if self.kind == StackKind.FOUNDATION:
            return rules.foundation_accepts(self.top_card(), card)
        if self.kind == StackKind.TABLEAU:
            return rules.tableau_accepts(self.top_card(), card)
        # waste and stock never take a direct placement
        return False

    def push(self, card: Card) -> None:
        self.cards.append(card)
        card.stack = self
        card.index = len(self.cards) - 1

    def remove(self, card: Card) -> None:
        if card not in self:
            raise CardNotFoundError(card, self)
        pos = card.index
        del self.cards[pos]
        for i in range(pos, len(self.cards)):
            self.cards[i].index = i
        card.stack = None
        card.index = -1

    def pop(self) -> Card:
        card = self.cards[-1]
        self.remove(card)
        return card

    def clear(self) -> List[Card]:
        out = self.cards
        self.cards = []
        for c in out:
            c.stack = None
            c.index = -1
        return out

    def cards_from(self, index: int) -> List[Card]:
        if index < 0 or index >= len(self.cards):
            return []
        return self.cards[index:]

    def sequence_from(self, index: int) -> List[Card]:
        """
        Tableau: the longest run starting at `index` where each successive pair
        is face-up, alternates colour and descends by exactly one. The starting
        card is always included; the run stops at the first violation.
        Other kinds: the whole tail from `index`.
        """
        tail = self.cards_from(index)
        if self.kind != StackKind.TABLEAU or len(tail) <= 1:
            return tail
        run = [tail[0]]
        for prev, cur in zip(tail, tail[1:]):
            if not rules.continues_run(prev, cur):
                break
            run.append(cur)
        return run

    def face_down_count(self) -> int:
        return sum(1 for c in self.cards if not c.face_up)

    def snapshot(self) -> StackSnapshot:
        return tuple((c, c.face_up) for c in self.cards)

    def restore(self, snap: StackSnapshot) -> None:
        """Put the stack back to `snap`. Cards must already be detached from other stacks."""
        self.clear()
        for card, face_up in snap:
            card.face_up = face_up
            self.push(card)
