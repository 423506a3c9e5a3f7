# layout.py - card layout <-> plain JSON-able dicts
#
# {"stock": [...], "waste": [...], "foundations": [[...] x4], "tableau": [[...] x7]}
# each card: {"suit": "hearts", "rank": 1, "faceUp": true}, bottom -> top.
from __future__ import annotations

from typing import Dict, List

from solitaire.engine.cards import Card, Suit, is_full_deck
from solitaire.engine.errors import InvalidDeckError
from solitaire.engine.stacks import Stack, StackSnapshot


def encode_card(card: Card) -> Dict:
    return {"suit": card.suit.value, "rank": card.rank, "faceUp": card.face_up}


def decode_card(entry: Dict) -> Card:
    try:
        return Card(Suit(entry["suit"]), int(entry["rank"]), bool(entry.get("faceUp", False)))
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidDeckError(f"bad card entry {entry!r}") from e


def encode_stack(stack: Stack) -> List[Dict]:
    return [encode_card(c) for c in stack.cards]


def encode_layout(engine) -> Dict:
    return {
        "stock": encode_stack(engine.stock),
        "waste": encode_stack(engine.waste),
        "foundations": [encode_stack(f) for f in engine.foundations],
        "tableau": [encode_stack(t) for t in engine.tableau],
    }


def _decode_list(entries) -> StackSnapshot:
    if not isinstance(entries, list):
        raise InvalidDeckError("stack entry must be a list")
    out = []
    for e in entries:
        c = decode_card(e)
        out.append((c, c.face_up))
    return tuple(out)


def decode_layout(data: Dict, foundation_count: int = 4, tableau_count: int = 7) -> Dict:
    """Parse a saved layout into per-stack snapshots. The result must hold the full deck."""
    if not isinstance(data, dict):
        raise InvalidDeckError("layout must be a mapping")
    foundations = data.get("foundations")
    tableau = data.get("tableau")
    if not isinstance(foundations, list) or len(foundations) != foundation_count:
        raise InvalidDeckError(f"layout needs {foundation_count} foundations")
    if not isinstance(tableau, list) or len(tableau) != tableau_count:
        raise InvalidDeckError(f"layout needs {tableau_count} tableau columns")

    decoded = {
        "stock": _decode_list(data.get("stock", [])),
        "waste": _decode_list(data.get("waste", [])),
        "foundations": [_decode_list(f) for f in foundations],
        "tableau": [_decode_list(t) for t in tableau],
    }
    cards = [c for c, _ in decoded["stock"]] + [c for c, _ in decoded["waste"]]
    for snap in decoded["foundations"] + decoded["tableau"]:
        cards.extend(c for c, _ in snap)
    if not is_full_deck(cards):
        raise InvalidDeckError("layout does not hold each of the 52 cards exactly once")
    return decoded
