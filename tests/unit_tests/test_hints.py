from conftest import C, D, H, S, down, up
from solitaire.engine import hints as Hn
from solitaire.engine.cards import SUITS
from solitaire.engine.hints import BestMoveType, HintType, MovePriority


def test_find_hints_fixed_order(engine, arrange) -> None:
    arrange(
        engine,
        tableau={0: [up(S, 1)], 1: [up(C, 13)], 2: [up(D, 12)], 3: [down(D, 5)]},
        waste=[up(H, 12)],
    )
    hints = engine.find_hints()
    types = [h.type for h in hints]
    assert types == (
        [HintType.FOUNDATION] * 4
        + [HintType.WASTE_TO_TABLEAU]
        + [HintType.TABLEAU_TO_TABLEAU] * 4
        + [HintType.FLIP]
    )
    # one foundation hint per empty foundation
    assert [h.to_stack for h in hints[:4]] == engine.foundations
    waste_hint = hints[4]
    assert waste_hint.card.label() == "Q♥" and waste_hint.to_stack is engine.tableau[1]
    # K♣ into the three empty columns, then Q♦ onto K♣
    assert [h.to_stack for h in hints[5:8]] == engine.tableau[4:7]
    assert hints[8].card.label() == "Q♦" and hints[8].to_stack is engine.tableau[1]
    assert hints[9].card is engine.tableau[3].top_card()


def test_find_hints_is_deterministic(dealt) -> None:
    first = [(h.type, h.card.key, h.from_stack.ref, h.to_stack.ref) for h in dealt.find_hints()]
    second = [(h.type, h.card.key, h.from_stack.ref, h.to_stack.ref) for h in dealt.find_hints()]
    assert first == second


def test_best_move_prefers_low_foundation_card(engine, arrange) -> None:
    arrange(engine, tableau={0: [up(C, 13)], 1: [up(D, 12)], 2: [up(S, 1)]})
    best = engine.request_hint()
    assert best.type == BestMoveType.CARD_MOVE
    assert best.priority == MovePriority.FOUNDATION_LOW
    assert best.card.label() == "A♠"


def test_flip_outranks_tableau_and_empty_column_moves(engine, arrange) -> None:
    arrange(engine, tableau={0: [up(C, 13)], 1: [up(D, 12)], 2: [down(S, 5)]})
    best = engine.request_hint()
    assert best.type == BestMoveType.FLIP
    assert best.priority == MovePriority.FLIP


def test_unblocking_move_outranks_plain_tableau_move(engine, arrange) -> None:
    arrange(engine, tableau={
        0: [down(H, 2), up(D, 9)],
        1: [up(S, 10)],
        2: [up(H, 8)],
        3: [up(C, 9)],
        4: [up(S, 6)], 5: [up(S, 5)], 6: [up(S, 4)],
    })
    hints = engine.find_hints()
    ranked = Hn.rank_hints(hints)
    assert ranked[0].card.label() == "9♦"
    assert Hn.classify_hint(ranked[0]) == MovePriority.UNBLOCKING
    assert Hn.classify_hint(ranked[1]) == MovePriority.TABLEAU


def test_draw_then_recycle_when_no_card_moves(engine, arrange) -> None:
    arrange(engine, tableau={0: [up(C, 5)]}, stock=[down(H, 5)])
    best = engine.request_hint()
    assert best.type == BestMoveType.DRAW_STOCK and best.priority == MovePriority.DRAW

    engine.draw_from_stock()
    best = engine.request_hint()
    assert best.type == BestMoveType.RECYCLE_WASTE and best.priority == MovePriority.RECYCLE


def test_blocked_only_when_nothing_can_happen(engine, arrange) -> None:
    arrange(engine, tableau={0: [up(H, 5)], 1: [up(C, 5)]})
    assert engine.is_blocked()
    assert engine.request_hint() is None

    arrange(engine, tableau={0: [up(H, 5)], 1: [up(C, 5)]}, waste=[up(D, 9)])
    assert not engine.is_blocked()

    arrange(engine, tableau={0: [up(H, 5)], 1: [down(C, 5)]})
    assert not engine.is_blocked()


def test_complete_needs_all_52_on_foundations(engine, arrange) -> None:
    arrange(engine, foundations={i: [up(s, r) for r in range(1, 14)] for i, s in enumerate(SUITS)})
    assert engine.is_complete()
    engine.foundations[3].pop()
    assert not engine.is_complete()


def test_sweep_plan_sends_two_aces_to_different_foundations(engine, arrange) -> None:
    arrange(engine, tableau={0: [up(H, 1)], 1: [up(S, 1)]})
    plan = Hn.plan_auto_complete_sweep(engine.all_stacks())
    assert [h.card.label() for h in plan] == ["A♥", "A♠"]
    assert plan[0].to_stack is engine.foundations[0]
    assert plan[1].to_stack is engine.foundations[1]


def test_analyze_counts(dealt) -> None:
    a = dealt.analyze()
    assert a.total_cards == 52
    assert a.face_up_cards == 7
    assert a.blocked_cards == 45
    assert a.foundation_cards == 0
    assert a.available_cards == 7
    assert a.possible_moves == len(dealt.find_hints())


def test_would_expose_face_down(engine, arrange) -> None:
    arrange(engine, tableau={0: [down(H, 2), up(S, 9), up(D, 8)], 1: [up(C, 13)]})
    t0 = engine.tableau[0]
    assert Hn.would_expose_face_down(t0, t0.cards[1])
    assert not Hn.would_expose_face_down(t0, t0.cards[2])
    assert not Hn.would_expose_face_down(engine.tableau[1], engine.tableau[1].cards[0])
