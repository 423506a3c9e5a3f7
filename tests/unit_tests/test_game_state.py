import pytest

from solitaire.engine.cards import make_deck
from solitaire.engine.game import KlondikeGame
from solitaire.engine.state import GameSettings, GameState, GameStats, calculate_score, format_time


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.mark.parametrize(
    "moves, time, foundation_cards, expected",
    [
        (0, 0, 0, 500),
        (3, 9, 1, 509),
        (10, 100, 52, 1005),
        (1000, 6000, 0, 0),
        (0, 5000, 4, 40),
    ],
)
def test_calculate_score(moves, time, foundation_cards, expected) -> None:
    assert calculate_score(moves, time, foundation_cards) == expected


@pytest.mark.parametrize("seconds, text", [(0, "00:00"), (65, "01:05"), (3600, "60:00"), (-4, "00:00")])
def test_format_time(seconds, text) -> None:
    assert format_time(seconds) == text


def test_timer_excludes_paused_time() -> None:
    clock = FakeClock()
    st = GameState(clock=clock)
    assert not st.is_playing()
    st.start_game()
    clock.now += 30
    assert st.update_time() == 30
    assert st.toggle_pause()
    assert not st.context().is_playing
    clock.now += 100
    assert st.update_time() == 30
    assert not st.toggle_pause()
    clock.now += 10
    assert st.update_time() == 40


def test_move_counter_floor_and_progress() -> None:
    st = GameState(clock=FakeClock())
    st.start_game()
    st.decrement_moves()
    assert st.moves == 0
    st.increment_moves()
    st.set_foundation_cards(13)
    assert st.progress() == 0.25
    info = st.game_info(history_len=1)
    assert info.moves == 1 and info.can_undo and info.foundation_cards == 13
    assert not st.can_undo(0)


def test_settings_fall_back_to_defaults() -> None:
    s = GameSettings(draw_count=2, history_limit=0)
    assert s.draw_count == 3 and s.history_limit == 100
    s = GameSettings.from_dict({"draw_count": 1, "unknown": True, "hint_enabled": False})
    assert s.draw_count == 1 and not s.hint_enabled
    assert GameSettings.from_dict(None) == GameSettings()


@pytest.mark.parametrize(
    "raw, expected",
    [("false", False), ("False", False), ("no", False), (0, False),
     ("true", True), ("1", True), (True, True), ("maybe", True), (None, True), (7, True)],
)
def test_settings_flags_from_hand_edited_json(raw, expected) -> None:
    s = GameSettings.from_dict({"hint_enabled": raw, "allow_undo": raw})
    assert s.hint_enabled is expected and s.allow_undo is expected


def test_stats_results() -> None:
    stats = GameStats()
    assert stats.win_rate() == "0" and stats.average_time() == 0
    stats.record_result(True, time=120, moves=90, score=700)
    stats.record_result(True, time=100, moves=80, score=650)
    stats.record_result(False, time=60, moves=10)
    assert stats.games_played == 3 and stats.games_won == 2
    assert stats.win_rate() == "66.7"
    # all play time over the two wins
    assert stats.average_time() == 140
    assert stats.best_time == 100 and stats.best_score == 700
    assert GameStats.from_dict(stats.to_dict()) == stats


def test_new_game_with_seed_is_reproducible() -> None:
    a, b = KlondikeGame(), KlondikeGame()
    a.new_game(seed=99)
    b.new_game(seed=99)
    assert a.engine.to_layout() == b.engine.to_layout()
    assert a.state.is_started and a.state.moves == 0


def test_commands_keep_counters_in_step() -> None:
    game = KlondikeGame(clock=FakeClock())
    game.new_game(deck=make_deck(shuffle=False))
    game.draw_from_stock()
    game.draw_from_stock()
    assert game.state.moves == 2
    assert game.game_info().can_undo
    assert game.undo() is not None
    assert game.state.moves == 1


def test_disabled_features_return_nothing() -> None:
    game = KlondikeGame(GameSettings(allow_undo=False, hint_enabled=False, auto_complete=False))
    game.new_game(seed=1)
    game.draw_from_stock()
    assert game.undo() is None
    assert game.request_hint() is None
    assert not game.auto_complete()
    assert not game.can_auto_finish()


def test_pause_blocks_commands() -> None:
    game = KlondikeGame(clock=FakeClock())
    game.new_game(seed=3)
    game.toggle_pause()
    assert game.draw_from_stock() == []
    assert game.request_hint() is None
    assert game.state.moves == 0
    game.toggle_pause()
    assert game.draw_from_stock()


def test_winning_records_stats(nearly_won) -> None:
    clock = FakeClock()
    game = KlondikeGame.from_snapshot({"layout": nearly_won, "moves": 40, "time": 300}, clock=clock)
    assert game.state.foundation_cards == 48
    assert game.can_auto_finish()
    assert game.auto_complete()
    assert game.state.is_completed
    assert game.state.moves == 44
    assert game.stats.games_won == 1
    assert game.game_info().progress == 1.0
    # nothing works once the game is over
    assert game.undo() is None
    assert game.draw_from_stock() == []


def test_snapshot_round_trip() -> None:
    game = KlondikeGame(GameSettings(draw_count=1), clock=FakeClock())
    game.new_game(seed=11)
    game.draw_from_stock()
    snap = game.snapshot()
    assert snap["moves"] == 1 and snap["settings"]["draw_count"] == 1
    again = KlondikeGame.from_snapshot(snap)
    assert again.engine.to_layout() == game.engine.to_layout()
    assert again.settings.draw_count == 1
    assert again.state.moves == 1
    assert again.engine.draw_count == 1
