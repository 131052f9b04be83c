"""Tests for the GameSession module."""

import json

import numpy as np
import pytest

from flood_it.config import SessionConfig
from flood_it.errors import InvalidStateTransition, OutOfBoundsError
from flood_it.flood import EngineState
from flood_it.grid import Color
from flood_it.session import GameSession


def _settled(num_colors=3, size=12, seed=42) -> GameSession:
    """Return a session whose initial flood has finished."""
    session = GameSession(num_colors=num_colors, size=size, seed=seed)
    session.run_until_idle()
    return session


def _other_color(session: GameSession) -> Color:
    return next(c for c in Color if c < session.num_colors and c != session.current_color)


class TestSessionInit:
    def test_defaults(self):
        session = GameSession(seed=0)
        assert session.size == 12
        assert session.num_colors == 3
        assert session.move_limit == 13
        assert session.moves_made == 0
        assert session.elapsed_ticks == 0
        assert not session.won_game
        assert not session.lost_game
        assert session.best_time is None

    def test_initial_flood_runs_without_a_move(self):
        session = GameSession(seed=0)
        assert session.flooding
        assert session.current_color == session.grid.origin.color
        session.run_until_idle()
        assert not session.flooding
        assert session.moves_made == 0
        assert session.tiles_touched >= 1
        assert session.tiles_touched == session.grid.flooded_count()

    def test_accepts_config_and_rng(self):
        cfg = SessionConfig(size=8, num_colors=5)
        session = GameSession(config=cfg, rng=np.random.default_rng(1))
        assert session.config is cfg
        assert session.grid.size == 8
        assert session.move_limit == cfg.move_limit


class TestDeterminism:
    def test_same_seed_same_grid(self):
        a = GameSession(num_colors=3, seed=42)
        b = GameSession(num_colors=3, seed=42)
        assert np.array_equal(a.grid.colors(), b.grid.colors())

    def test_same_seed_same_grid_after_reset(self):
        a = GameSession(num_colors=4, seed=9)
        b = GameSession(num_colors=4, seed=9)
        a.reset()
        b.reset()
        assert np.array_equal(a.grid.colors(), b.grid.colors())

    def test_different_seeds_differ(self):
        a = GameSession(seed=1)
        b = GameSession(seed=2)
        assert not np.array_equal(a.grid.colors(), b.grid.colors())


class TestSelectColor:
    def test_adjacent_different_color_scenario(self):
        seed = next(
            s for s in range(100)
            if GameSession(seed=s).grid.cell_at(1, 0).color
            != GameSession(seed=s).grid.origin.color
        )
        session = _settled(seed=seed)
        neighbor_color = session.grid.cell_at(1, 0).color

        assert session.select_cell(1, 0) is True
        assert session.moves_made == 1
        assert session.grid.origin.color == neighbor_color
        assert session.engine.state == EngineState.ACTIVE

        session.run_until_idle()
        assert session.engine.state == EngineState.IDLE
        assert session.tiles_touched >= 2
        assert session.grid.cell_at(1, 0).flooded

    def test_same_color_is_noop(self):
        session = _settled()
        assert session.select_color(session.current_color) is False
        assert session.moves_made == 0
        assert session.engine.state == EngineState.IDLE

    def test_select_while_flooding_raises(self):
        session = GameSession(seed=0)
        assert session.flooding
        with pytest.raises(InvalidStateTransition):
            session.select_color(_other_color(session))

    def test_select_after_game_over_raises(self):
        session = _settled()
        session.lost_game = True
        with pytest.raises(InvalidStateTransition):
            session.select_color(_other_color(session))

    def test_color_outside_palette_raises(self):
        session = _settled(num_colors=3)
        with pytest.raises(ValueError, match="palette"):
            session.select_color(Color.CYAN)

    def test_select_cell_out_of_bounds(self):
        session = _settled()
        with pytest.raises(OutOfBoundsError):
            session.select_cell(12, 0)

    def test_accepts_plain_int(self):
        session = _settled()
        color = int(_other_color(session))
        assert session.select_color(color)
        assert session.current_color == Color(color)


class TestTick:
    def test_timer_advances_and_stops(self):
        session = GameSession(seed=42)
        assert session.elapsed_ticks == 0
        session.tick()
        assert session.elapsed_ticks == 1
        session.tick()
        assert session.elapsed_ticks == 2
        session.won_game = True
        session.tick()
        assert session.elapsed_ticks == 2

    def test_no_loss_one_under_limit(self):
        session = _settled()
        session.moves_made = session.move_limit - 1
        session.tick()
        assert not session.lost_game

    def test_loss_at_limit(self):
        session = _settled()
        session.moves_made = session.move_limit
        session.tick()
        assert session.lost_game
        assert not session.won_game

    def test_win_at_limit_is_not_loss(self):
        session = _settled()
        session.moves_made = session.move_limit
        session.tiles_touched = session.grid.cell_count
        session.tick()
        assert session.won_game
        assert not session.lost_game

    def test_win_over_limit_is_loss(self):
        session = _settled()
        session.moves_made = session.move_limit + 1
        session.tiles_touched = session.grid.cell_count
        session.tick()
        assert session.lost_game
        assert not session.won_game

    def test_no_verdict_while_flooding(self):
        session = _settled()
        session.select_color(_other_color(session))
        session.moves_made = session.move_limit
        result = session.tick()
        assert result is not None
        assert not session.lost_game

    def test_single_color_board_wins_immediately(self):
        session = _settled(num_colors=1, size=6)
        assert session.tiles_touched == 36
        session.tick()
        assert session.won_game
        assert session.moves_made == 0
        assert session.best_time == 0

    def test_won_and_lost_are_exclusive_and_freeze_timer(self):
        session = _settled(num_colors=1, size=6)
        session.tick()
        frozen = session.elapsed_ticks
        for _ in range(5):
            session.tick()
        assert session.won_game and not session.lost_game
        assert session.elapsed_ticks == frozen

    def test_tick_returns_step_result_while_flooding(self):
        session = GameSession(seed=0)
        assert session.tick() is not None
        session.run_until_idle()
        assert session.tick() is None


class TestBestTime:
    def test_best_time_recorded_and_improved(self):
        session = _settled()
        session.elapsed_ticks = 2007
        session.tiles_touched = session.grid.cell_count
        session.tick()
        assert session.best_time == 2

        session.on_key("r")
        session.run_until_idle()
        session.elapsed_ticks = 1504
        session.tiles_touched = session.grid.cell_count
        session.tick()
        assert session.best_time == 1

    def test_slower_win_does_not_overwrite(self):
        session = _settled()
        session.elapsed_ticks = 1200
        session.tiles_touched = session.grid.cell_count
        session.tick()
        session.reset()
        session.run_until_idle()
        session.elapsed_ticks = 5000
        session.tiles_touched = session.grid.cell_count
        session.tick()
        assert session.best_time == 1

    def test_unset_until_first_win(self):
        session = _settled()
        session.moves_made = session.move_limit
        session.tick()
        assert session.lost_game
        assert session.best_time is None


class TestReset:
    def test_reset_clears_counters_and_keeps_best_time(self):
        session = _settled()
        session.best_time = 7
        session.select_color(_other_color(session))
        session.run_until_idle()
        session.lost_game = True
        session.reset()
        assert session.moves_made == 0
        assert session.elapsed_ticks == 0
        assert session.tiles_touched == 0
        assert not session.lost_game
        assert not session.won_game
        assert session.best_time == 7
        assert session.flooding

    def test_reset_abandons_active_episode(self):
        session = _settled()
        session.select_color(_other_color(session))
        session.tick()
        assert session.flooding
        session.reset()
        assert session.grid.flooded_count() == 1
        assert session.engine.frontier == (0,)

    def test_rejected_reset_keeps_episode(self):
        session = _settled()
        session.select_color(_other_color(session))
        session.tick()
        frontier = session.engine.frontier
        with pytest.raises(ValueError, match="num_colors"):
            session.reset(num_colors=9)
        assert session.flooding
        assert session.moves_made == 1
        assert session.engine.frontier == frontier
        assert session.num_colors == 3
        session.run_until_idle()
        assert session.tiles_touched >= 1

    def test_reset_with_new_color_count(self):
        session = _settled(num_colors=3)
        session.reset(num_colors=6)
        assert session.num_colors == 6
        assert session.move_limit == 24
        assert session.grid.num_colors == 6

    def test_key_handling(self):
        session = _settled()
        session.select_color(_other_color(session))
        assert session.on_key("o") is False
        assert session.moves_made == 1
        assert session.on_key("R") is True
        assert session.moves_made == 0


class TestSessionState:
    def test_state_is_json_serializable(self):
        session = _settled()
        session.select_color(_other_color(session))
        session.tick()
        serialized = json.dumps(session.get_state())
        assert isinstance(serialized, str)

    def test_state_structure(self):
        state = GameSession(seed=0).get_state()
        for key in (
            "grid", "moves_made", "move_limit", "elapsed_ticks", "won_game",
            "lost_game", "best_time", "flooding", "current_color",
        ):
            assert key in state
        assert len(state["grid"]["cells"]) == 12
