"""Tick-driven game session composing the grid and the flood engine."""

from __future__ import annotations

import dataclasses
import logging

import numpy as np

from flood_it.config import SessionConfig
from flood_it.errors import InvalidStateTransition
from flood_it.flood import FloodEngine, StepResult
from flood_it.grid import Color, Grid

logger = logging.getLogger(__name__)

RESET_KEY = "r"


class GameSession:
    """Single-player flood-it game.

    The session owns the grid and the flood engine. An outer scheduler
    calls :meth:`tick` at a fixed rate; each tick advances an in-progress
    flood by one cell, or otherwise evaluates the win and loss conditions
    and advances the clock.

    On construction and after every reset a move-free episode floods the
    origin's own color, so the region already touching the origin counts
    as flooded before the first move.
    """

    def __init__(
        self,
        num_colors: int = 3,
        size: int = 12,
        seed: int | None = None,
        *,
        config: SessionConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.config = config or SessionConfig(
            size=size, num_colors=num_colors, seed=seed,
        )
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self.best_time: int | None = None
        self._new_board()

    def _new_board(self) -> None:
        cfg = self.config
        self.grid = Grid(size=cfg.size, num_colors=cfg.num_colors, rng=self.rng)
        self.engine = FloodEngine(self.grid)
        self.move_limit = cfg.move_limit
        self.moves_made = 0
        self.elapsed_ticks = 0
        self.tiles_touched = 0
        self.won_game = False
        self.lost_game = False
        self.current_color = self.grid.origin.color
        self.engine.start_episode(self.grid.origin, self.current_color)

    @property
    def size(self) -> int:
        return self.config.size

    @property
    def num_colors(self) -> int:
        return self.config.num_colors

    @property
    def flooding(self) -> bool:
        return self.engine.is_active

    @property
    def game_over(self) -> bool:
        return self.won_game or self.lost_game

    @property
    def elapsed_seconds(self) -> int:
        return self.elapsed_ticks // self.config.ticks_per_second

    def select_color(self, color: Color | int) -> bool:
        """Flood the board with ``color``.

        Returns ``False`` without consuming a move when ``color`` is
        already the flood color.
        """
        if not 0 <= int(color) < self.num_colors:
            raise ValueError(
                f"Color {int(color)} is not in this game's palette "
                f"of {self.num_colors}."
            )
        if self.engine.is_active:
            raise InvalidStateTransition("Cannot select a color while flooding.")
        if self.game_over:
            raise InvalidStateTransition("Cannot select a color after the game ended.")

        color = Color(color)
        if color == self.current_color:
            return False
        self.current_color = color
        self.moves_made += 1
        self.engine.start_episode(self.grid.origin, color)
        return True

    def select_cell(self, x: int, y: int) -> bool:
        """Flood with the color of the cell at ``(x, y)``."""
        return self.select_color(self.grid.cell_at(x, y).color)

    def tick(self) -> StepResult | None:
        """Advance the game by one scheduler tick.

        Returns the flood step result while an episode is in progress,
        otherwise ``None``.
        """
        result = None
        if self.engine.is_active:
            result = self.engine.step()
            if result.finished:
                self.tiles_touched = result.touched_count
        elif (
            self.tiles_touched == self.grid.cell_count
            and self.moves_made <= self.move_limit
        ):
            if not self.won_game:
                logger.info(
                    "Game won in %d/%d moves after %d ticks.",
                    self.moves_made, self.move_limit, self.elapsed_ticks,
                )
            self.won_game = True
            seconds = self.elapsed_seconds
            if self.best_time is None or seconds < self.best_time:
                self.best_time = seconds
        elif self.moves_made >= self.move_limit:
            if not self.lost_game:
                logger.info(
                    "Game lost: move limit %d reached with %d/%d cells flooded.",
                    self.move_limit, self.tiles_touched, self.grid.cell_count,
                )
            self.lost_game = True

        if not self.game_over:
            self.elapsed_ticks += 1
        return result

    def run_until_idle(self, max_ticks: int | None = None) -> int:
        """Tick until the current flood finishes. Returns ticks consumed."""
        ticks = 0
        while self.engine.is_active:
            if max_ticks is not None and ticks >= max_ticks:
                break
            self.tick()
            ticks += 1
        return ticks

    def reset(self, num_colors: int | None = None) -> None:
        """Start a fresh board, keeping the best time.

        Any flood in progress is abandoned.
        """
        config = self.config
        if num_colors is not None and num_colors != config.num_colors:
            config = dataclasses.replace(config, num_colors=num_colors)
        self.engine.abandon()
        self.config = config
        self._new_board()
        logger.info(
            "Game reset (%d colors, move limit %d).", self.num_colors, self.move_limit,
        )

    def on_key(self, key: str) -> bool:
        """Handle a key press. Only the reset key has an effect."""
        if key.lower() == RESET_KEY:
            self.reset()
            return True
        return False

    def get_state(self) -> dict:
        """Return the full, serializable game state."""
        return {
            "size": self.size,
            "num_colors": self.num_colors,
            "grid": self.grid.to_dict(),
            "current_color": int(self.current_color),
            "flooding": self.flooding,
            "moves_made": self.moves_made,
            "move_limit": self.move_limit,
            "tiles_touched": self.tiles_touched,
            "elapsed_ticks": self.elapsed_ticks,
            "elapsed_seconds": self.elapsed_seconds,
            "won_game": self.won_game,
            "lost_game": self.lost_game,
            "best_time": self.best_time,
        }
