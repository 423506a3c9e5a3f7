# stock.py - stock -> waste draws and waste -> stock recycling
from typing import List

from solitaire.engine.cards import Card
from solitaire.engine.stacks import Stack

DRAW_COUNTS = (1, 3)


def draw_cards(stock: Stack, waste: Stack, draw_count: int) -> List[Card]:
    """Move up to `draw_count` cards from the stock top onto the waste, face-up.

    Cards land in the order removed, so the last one drawn is the new waste top.
    """
    n = min(max(0, int(draw_count)), len(stock))
    drawn = []
    for _ in range(n):
        c = stock.pop()
        c.flip(True)
        waste.push(c)
        drawn.append(c)
    return drawn


def recycle_waste(stock: Stack, waste: Stack) -> List[Card]:
    """Turn the whole waste back into the stock, face-down.

    The waste is reversed so the stock's draw order is the same as at the
    start of the cycle.
    """
    cards = list(reversed(waste.cards))
    for c in cards:
        waste.remove(c)
        c.flip(False)
        stock.push(c)
    return cards
