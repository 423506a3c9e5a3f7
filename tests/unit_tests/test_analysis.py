import json

from conftest import C, D, H, S, down, up
from solitaire.engine import analysis
from solitaire.engine.engine import KlondikeEngine
from solitaire.engine.validator import PlayContext


def test_find_blocked_cards(dealt) -> None:
    blocked = analysis.find_blocked_cards(dealt.tableau)
    assert len(blocked) == 21
    assert not any(c.face_up for c in blocked)
    assert all(c is not c.stack.top_card() for c in blocked)


def test_try_unblock_flips_before_drawing(engine, arrange) -> None:
    arrange(engine, tableau={0: [down(H, 4)]}, stock=[down(S, 9)])
    assert analysis.try_unblock(engine)
    assert engine.tableau[0].top_card().face_up
    assert len(engine.stock) == 1

    assert analysis.try_unblock(engine)
    assert engine.stock.is_empty() and len(engine.waste) == 1

    # recycles when only the waste is left
    assert analysis.try_unblock(engine)
    assert len(engine.stock) == 1

    assert not analysis.try_unblock(engine, PlayContext(is_paused=True))


def test_play_out_wins_an_open_position(nearly_won) -> None:
    engine = KlondikeEngine()
    engine.load_layout(nearly_won)
    result = analysis.play_out(engine)
    assert result.won and not result.blocked
    assert result.steps == 4
    assert result.foundation_cards == 52


def test_play_out_reports_a_block(engine, arrange) -> None:
    arrange(engine, tableau={0: [up(H, 5)], 1: [up(C, 5)]}, stock=[down(D, 9)])
    result = analysis.play_out(engine)
    assert not result.won
    assert result.blocked
    # draw, recycle, one more fruitless pass, then stop
    assert result.steps == 3


def test_play_out_respects_step_budget(dealt) -> None:
    result = analysis.play_out(dealt, max_steps=25)
    assert result.steps <= 25
    dealt.check_integrity()


def test_cli_prints_json(capsys) -> None:
    analysis.main(["--seed", "3", "--draw-count", "1", "--max-steps", "30"])
    payload = json.loads(capsys.readouterr().out)
    assert payload["seed"] == 3 and payload["draw_count"] == 1
    assert payload["opening"]["total_cards"] == 52
    assert payload["result"]["steps"] <= 30
