"""Analysis-only helpers: blocked-card listing, unblocking and greedy self-play.

None of this runs on the live game path. The module doubles as a small CLI:

    python -m solitaire.engine.analysis --seed 7 --draw-count 1
"""

from __future__ import annotations

import argparse
import json
import logging
import random
from dataclasses import asdict, dataclass
from typing import Iterable, List, Optional

from solitaire.engine import hints as H
from solitaire.engine.cards import Card, make_deck
from solitaire.engine.engine import KlondikeEngine
from solitaire.engine.stacks import Stack
from solitaire.engine.validator import PLAYING, PlayContext

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 2000


def find_blocked_cards(tableau: Iterable[Stack]) -> List[Card]:
    """Face-down cards buried under at least one other card."""
    out = []
    for stack in tableau:
        for c in stack.cards[:-1]:
            if not c.face_up:
                out.append(c)
    return out


def try_unblock(engine: KlondikeEngine, context: PlayContext = PLAYING) -> bool:
    """Flip a face-down top if there is one, otherwise draw (or recycle)."""
    for card in engine.find_cards_to_flip():
        if engine.flip(card, context):
            return True
    return bool(engine.draw_from_stock(context))


@dataclass(frozen=True)
class PlayoutResult:
    won: bool
    steps: int
    blocked: bool
    foundation_cards: int


def _productive_hint(engine: KlondikeEngine) -> Optional[H.Hint]:
    for hint in H.rank_hints(engine.find_hints()):
        if hint.type in (H.HintType.FOUNDATION, H.HintType.FLIP, H.HintType.WASTE_TO_TABLEAU):
            return hint
        # tableau shuffles only count when they uncover something
        if H.would_expose_face_down(hint.from_stack, hint.card):
            return hint
    return None


def _productive_run(engine: KlondikeEngine):
    """A run from a column's lowest face-up card that uncovers a face-down card."""
    for src in engine.tableau:
        base = src.face_down_count()
        if base == 0 or base >= len(src):
            continue
        run = src.sequence_from(base)
        if len(run) != len(src) - base:
            continue
        for dst in engine.tableau:
            if dst is not src and dst.can_accept(run[0]):
                return run, src, dst
    return None


def play_out(engine: KlondikeEngine, context: PlayContext = PLAYING,
             max_steps: int = DEFAULT_MAX_STEPS) -> PlayoutResult:
    """
    Greedy self-play: take the best productive move, else draw. A recycle is
    only allowed if something productive happened since the previous one.
    """
    steps = 0
    progressed = True
    while steps < max_steps and not engine.is_complete():
        hint = _productive_hint(engine)
        if hint is not None:
            if hint.is_flip:
                ok = engine.flip(hint.card, context)
            else:
                ok = engine.move(hint.card, hint.from_stack, hint.to_stack, context)
            if ok:
                steps += 1
                progressed = True
                continue

        run = _productive_run(engine)
        if run is not None and engine.move_run(*run, context=context):
            steps += 1
            progressed = True
            continue

        if engine.stock.is_empty():
            if engine.waste.is_empty() or not progressed:
                break
            progressed = False
        if not engine.draw_from_stock(context):
            break
        steps += 1

    won = engine.is_complete()
    result = PlayoutResult(
        won=won,
        steps=steps,
        blocked=not won and steps < max_steps,
        foundation_cards=engine.foundation_card_count(),
    )
    logger.debug("playout finished: %s", result)
    return result


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Greedy self-play of a seeded Klondike deal.")
    parser.add_argument("--seed", type=int, required=True, help="Deck shuffle seed.")
    parser.add_argument("--draw-count", type=int, choices=(1, 3), default=3, help="Cards per draw.")
    parser.add_argument("--max-steps", type=int, default=DEFAULT_MAX_STEPS, help="Step budget.")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print json output.")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = _parse_args(argv)
    engine = KlondikeEngine(draw_count=args.draw_count)
    engine.deal(make_deck(shuffle=True, rng=random.Random(args.seed)))
    opening = engine.analyze()
    result = play_out(engine, max_steps=args.max_steps)
    payload = {
        "seed": args.seed,
        "draw_count": args.draw_count,
        "opening": asdict(opening),
        "result": asdict(result),
    }
    if args.pretty:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        print(json.dumps(payload, ensure_ascii=False))


if __name__ == "__main__":
    main()
