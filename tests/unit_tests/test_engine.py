import random

import pytest

from conftest import C, D, H, S, down, up
from solitaire.engine.cards import SUITS, Card, make_deck
from solitaire.engine.engine import KlondikeEngine
from solitaire.engine.errors import CardNotFoundError, IntegrityError, InvalidDeckError
from solitaire.engine.moves import MoveKind
from solitaire.engine.validator import PlayContext


def test_deal_shapes_the_tableau(dealt) -> None:
    assert [len(t) for t in dealt.tableau] == [1, 2, 3, 4, 5, 6, 7]
    for t in dealt.tableau:
        assert t.top_card().face_up
        assert all(not c.face_up for c in t.cards[:-1])
    assert len(dealt.stock) == 24
    assert all(not c.face_up for c in dealt.stock)
    assert dealt.waste.is_empty()
    assert all(f.is_empty() for f in dealt.foundations)
    assert len(dealt.history) == 0
    dealt.check_integrity()


def test_deal_pops_from_the_end_of_the_deck(engine) -> None:
    deck = make_deck(shuffle=False)
    remaining = deck[:24]
    engine.deal(deck)
    assert engine.tableau[0].cards[0].label() == "K♠"
    assert [c.label() for c in engine.tableau[1]] == ["Q♠", "J♠"]
    assert engine.stock.cards == remaining
    assert engine.stock.top_card() is remaining[-1]


@pytest.mark.parametrize(
    "deck",
    [
        make_deck(shuffle=False)[:51],
        make_deck(shuffle=False)[:51] + [Card(H, 1)],
        make_deck(shuffle=False) + [Card(H, 2)],
    ],
    ids=["short", "duplicate", "long"],
)
def test_deal_rejects_anything_but_the_full_deck(engine, deck) -> None:
    with pytest.raises(InvalidDeckError):
        engine.deal(deck)


def test_ace_from_waste_to_foundation(engine, arrange) -> None:
    arrange(engine, waste=[up(D, 7), up(H, 1)])
    ace = engine.waste.top_card()
    assert engine.move(ace, engine.waste, engine.foundations[0])
    assert engine.foundations[0].top_card() is ace
    assert engine.waste.top_card().label() == "7♦"
    assert engine.foundation_card_count() == 1
    assert engine.history.peek().kind == MoveKind.CARD_MOVE


def test_red_nine_on_red_ten_is_refused(engine, arrange) -> None:
    arrange(engine, tableau={0: [up(H, 10)], 1: [up(D, 9)], 2: [up(C, 10)]})
    nine = engine.tableau[1].top_card()
    assert not engine.move(nine, engine.tableau[1], engine.tableau[0])
    assert len(engine.history) == 0
    assert engine.move(nine, engine.tableau[1], engine.tableau[2])


def test_move_refuses_non_top_and_face_down_cards(engine, arrange) -> None:
    arrange(engine, tableau={0: [down(S, 13), up(H, 1), up(S, 2)], 1: [down(C, 1)]})
    ace = engine.tableau[0].cards[1]
    assert not engine.move(ace, engine.tableau[0], engine.foundations[0])
    hidden = engine.tableau[1].top_card()
    assert not engine.move(hidden, engine.tableau[1], engine.foundations[0])


def test_move_with_wrong_source_raises(engine, arrange) -> None:
    arrange(engine, tableau={0: [up(H, 1)]})
    ace = engine.tableau[0].top_card()
    with pytest.raises(CardNotFoundError):
        engine.move(ace, engine.tableau[1], engine.foundations[0])
    with pytest.raises(CardNotFoundError):
        engine.find_stack(up(C, 3))


def test_move_refused_unless_playing(engine, arrange) -> None:
    arrange(engine, waste=[up(H, 1)])
    ace = engine.waste.top_card()
    for ctx in (PlayContext(is_started=False), PlayContext(is_paused=True), PlayContext(is_completed=True)):
        assert not engine.move(ace, engine.waste, engine.foundations[0], ctx)
    assert engine.waste.top_card() is ace


def test_foundation_card_can_come_back_to_the_tableau(engine, arrange) -> None:
    arrange(engine, foundations={0: [up(C, 1), up(C, 2), up(C, 3)]}, tableau={0: [up(H, 4)]})
    three = engine.foundations[0].top_card()
    assert engine.move(three, engine.foundations[0], engine.tableau[0])
    assert engine.tableau[0].top_card() is three


def test_move_run_does_not_flip_what_it_uncovers(engine, arrange) -> None:
    arrange(engine, tableau={0: [down(S, 13), up(H, 9), up(S, 8)], 1: [up(C, 10)]})
    t0, t1 = engine.tableau[0], engine.tableau[1]
    run = engine.cards_from(t0.cards[1])
    assert [c.label() for c in run] == ["9♥", "8♠"]
    assert engine.move_run(run, t0, t1)
    assert [c.label() for c in t1] == ["10♣", "9♥", "8♠"]
    assert len(t0) == 1 and not t0.top_card().face_up
    assert engine.history.peek().kind == MoveKind.MULTI_CARD_MOVE

    king = t0.top_card()
    assert engine.flip(king)
    assert king.face_up
    assert not engine.flip(king)

    engine.undo()
    assert not king.face_up
    engine.undo()
    assert [c.label() for c in t0] == ["K♠", "9♥", "8♠"]
    assert [c.label() for c in t1] == ["10♣"]
    assert t0.cards[1].face_up and t0.cards[2].face_up


def test_move_run_refuses_bad_runs(engine, arrange) -> None:
    arrange(engine, tableau={0: [up(S, 10), up(H, 9), up(S, 8)], 1: [up(D, 11)], 2: [up(H, 10)]})
    t0 = engine.tableau[0]
    # not the tail of the stack
    assert not engine.move_run(t0.cards[:2], t0, engine.tableau[1])
    # runs never go to a foundation
    assert not engine.move_run(t0.cards[1:], t0, engine.foundations[0])
    # 9♥ does not fit 10♥
    assert not engine.move_run(t0.cards[1:], t0, engine.tableau[2])
    assert not engine.move_run([], t0, engine.tableau[1])
    assert engine.move_run(t0.cards[:], t0, engine.tableau[1])


def test_flip_only_face_down_tableau_tops(engine, arrange) -> None:
    arrange(engine, tableau={0: [down(H, 4), down(S, 3)]}, stock=[down(C, 9)])
    assert not engine.flip(engine.tableau[0].cards[0])
    assert not engine.flip(engine.stock.top_card())
    assert engine.flip_all() == 1
    assert engine.find_cards_to_flip() == []


def test_send_to_foundation_picks_first_accepting(engine, arrange) -> None:
    arrange(engine, foundations={0: [up(H, 1)]}, tableau={0: [up(H, 2)], 1: [up(S, 1)]})
    assert engine.send_to_foundation(engine.tableau[0].top_card())
    assert len(engine.foundations[0]) == 2
    assert engine.send_to_foundation(engine.tableau[1].top_card())
    assert engine.foundations[1].top_card().label() == "A♠"
    arrange(engine, tableau={0: [up(H, 5)]})
    assert not engine.send_to_foundation(engine.tableau[0].top_card())


def test_auto_complete_runs_to_a_fixpoint(engine, arrange) -> None:
    arrange(engine, tableau={0: [up(H, 3), up(H, 2), up(H, 1)], 1: [up(S, 1)]})
    assert engine.auto_complete_sweep()
    # one card per stack per sweep
    assert engine.foundation_card_count() == 2
    assert engine.auto_complete()
    assert engine.foundation_card_count() == 4
    assert not engine.auto_complete()


def test_auto_complete_finishes_the_game(engine, arrange) -> None:
    arrange(
        engine,
        foundations={i: [up(s, r) for r in range(1, 13)] for i, s in enumerate(SUITS)},
        tableau={i: [up(s, 13)] for i, s in enumerate(SUITS)},
    )
    assert not engine.is_complete()
    assert engine.auto_complete()
    assert engine.is_complete()
    engine.check_integrity()


def test_undo_restores_every_touched_stack(dealt) -> None:
    start = dealt.to_layout()
    for _ in range(3):
        dealt.draw_from_stock()
    for hint in dealt.find_hints()[:1]:
        dealt.move(hint.card, hint.from_stack, hint.to_stack)
    while dealt.undo() is not None:
        pass
    assert dealt.to_layout() == start
    dealt.check_integrity()


def test_undo_refused_after_completion(engine, arrange) -> None:
    arrange(engine, waste=[up(H, 1)])
    engine.move(engine.waste.top_card(), engine.waste, engine.foundations[0])
    assert engine.undo(PlayContext(is_completed=True)) is None
    assert engine.can_undo()
    assert engine.undo() is not None
    assert not engine.can_undo()


def test_history_is_bounded(arrange) -> None:
    e = arrange(KlondikeEngine(draw_count=1, history_limit=2),
                stock=[down(H, 2), down(H, 3), down(H, 4)])
    for _ in range(3):
        e.draw_from_stock()
    assert len(e.history) == 2
    e.undo()
    e.undo()
    assert e.undo() is None
    # the oldest draw could not be undone
    assert len(e.waste) == 1


def test_restart_redeals_the_same_game(dealt) -> None:
    start = dealt.to_layout()
    dealt.draw_from_stock()
    dealt.flip_all()
    assert dealt.restart()
    assert dealt.to_layout() == start
    assert len(dealt.history) == 0
    assert not KlondikeEngine().restart()


def test_check_integrity_reports_duplicates_and_gaps(dealt) -> None:
    dealt.waste.push(Card(H, 1, True))
    with pytest.raises(IntegrityError) as err:
        dealt.check_integrity()
    assert any("in both" in e for e in err.value.errors)

    dealt.restart()
    dealt.stock.pop()
    with pytest.raises(IntegrityError):
        dealt.check_integrity()


def test_apply_best_move_follows_the_suggestion(engine, arrange) -> None:
    arrange(engine, tableau={0: [up(C, 5)], 1: [down(D, 2)]}, stock=[down(H, 1)])
    best = engine.request_hint()
    assert engine.apply_best_move(best)
    assert engine.tableau[1].top_card().face_up

    best = engine.request_hint()
    assert engine.apply_best_move(best)
    assert engine.waste.top_card().label() == "A♥"

    best = engine.request_hint()
    assert engine.apply_best_move(best)
    assert engine.foundations[0].top_card().label() == "A♥"


def _random_step(engine, rng) -> None:
    action = rng.choice(("hint", "run", "draw", "flip", "undo", "sweep", "foundation"))
    if action == "hint":
        hints = engine.find_hints()
        if hints:
            hint = rng.choice(hints)
            if hint.is_flip:
                engine.flip(hint.card)
            else:
                engine.move(hint.card, hint.from_stack, hint.to_stack)
    elif action == "run":
        source = rng.choice(engine.tableau)
        face_up = [c for c in source if c.face_up]
        if face_up:
            run = engine.cards_from(rng.choice(face_up))
            engine.move_run(run, source, rng.choice(engine.tableau))
    elif action == "draw":
        engine.draw_from_stock()
    elif action == "flip":
        engine.flip_all()
    elif action == "undo":
        engine.undo()
    elif action == "sweep":
        engine.auto_complete_sweep()
    else:
        tops = [s.top_card() for s in [engine.waste, *engine.tableau] if s.top_card() is not None]
        tops = [c for c in tops if c.face_up]
        if tops:
            engine.send_to_foundation(rng.choice(tops))


@pytest.mark.parametrize("seed", [1, 7, 42, 2024])
def test_random_play_keeps_every_card_in_one_stack(seed) -> None:
    rng = random.Random(seed)
    e = KlondikeEngine(draw_count=rng.choice((1, 3)))
    e.deal(make_deck(shuffle=True, rng=rng))
    for _ in range(300):
        _random_step(e, rng)
        e.check_integrity()
        assert sum(len(s) for s in e.all_stacks()) == 52
        assert e.find_hints() == e.find_hints()
        assert e.request_hint() == e.request_hint()
