import random

import pytest

from solitaire.engine.cards import ACE, KING, SUITS, Card, Suit, make_deck
from solitaire.engine.engine import KlondikeEngine

H, D, C, S = Suit.HEARTS, Suit.DIAMONDS, Suit.CLUBS, Suit.SPADES


def up(suit, rank):
    return Card(suit, rank, True)


def down(suit, rank):
    return Card(suit, rank, False)


@pytest.fixture
def engine():
    return KlondikeEngine(draw_count=3)


@pytest.fixture
def dealt():
    e = KlondikeEngine(draw_count=3)
    e.deal(make_deck(shuffle=True, rng=random.Random(1234)))
    return e


@pytest.fixture
def arrange():
    """
    Place cards straight onto an engine's stacks.

    `tableau`/`foundations` map index -> cards (bottom -> top). With
    fill_stock=True every card not placed goes to the stock face-down so
    the engine holds the full deck.
    """
    def _arrange(engine, tableau=None, foundations=None, waste=(), stock=(), fill_stock=False):
        for s in engine.all_stacks():
            s.clear()
        placed = []
        for i, cards in (tableau or {}).items():
            for c in cards:
                engine.tableau[i].push(c)
                placed.append(c)
        for i, cards in (foundations or {}).items():
            for c in cards:
                engine.foundations[i].push(c)
                placed.append(c)
        for c in waste:
            engine.waste.push(c)
            placed.append(c)
        for c in stock:
            engine.stock.push(c)
            placed.append(c)
        if fill_stock:
            have = {c.key for c in placed}
            for c in make_deck(shuffle=False):
                if c.key not in have:
                    engine.stock.push(c)
        engine.history.clear()
        return engine
    return _arrange


def nearly_won_layout():
    """Foundations hold A..Q of every suit; each King waits on its own column."""
    def entry(suit, rank, face_up=True):
        return {"suit": suit.value, "rank": rank, "faceUp": face_up}

    return {
        "stock": [],
        "waste": [],
        "foundations": [[entry(s, r) for r in range(ACE, KING)] for s in SUITS],
        "tableau": [[entry(s, KING)] for s in SUITS] + [[], [], []],
    }


@pytest.fixture
def nearly_won():
    return nearly_won_layout()
