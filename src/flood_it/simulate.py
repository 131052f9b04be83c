"""Headless autoplay for measuring strategies and tick throughput."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from flood_it.config import SessionConfig
from flood_it.grid import Color
from flood_it.session import GameSession

logger = logging.getLogger(__name__)

Strategy = Callable[[GameSession, np.random.Generator], Color]


def random_strategy(session: GameSession, rng: np.random.Generator) -> Color:
    """Pick any palette color other than the current flood color."""
    choices = [c for c in range(session.num_colors) if c != session.current_color]
    return Color(choices[int(rng.integers(len(choices)))])


def greedy_strategy(session: GameSession, rng: np.random.Generator) -> Color:
    """Pick the color with the most dry cells bordering the flooded region.

    Ties are broken by the lowest palette index.
    """
    border: list[set[int]] = [set() for _ in range(session.num_colors)]
    for cell in session.grid:
        if not cell.flooded:
            continue
        for nb in cell.neighbors():
            if nb.exists and not nb.flooded:
                border[nb.color].add(nb.key)

    counts = np.array([len(keys) for keys in border])
    counts[session.current_color] = -1
    if counts.max() <= 0:
        return random_strategy(session, rng)
    return Color(int(np.argmax(counts)))


STRATEGIES: dict[str, Strategy] = {
    "random": random_strategy,
    "greedy": greedy_strategy,
}


@dataclass
class SimulationResult:
    """Aggregate outcome of a batch of autoplayed games."""

    strategy: str
    total_games: int
    wins: int
    losses: int
    mean_moves: float
    total_ticks: int
    best_time: int | None
    wall_time_seconds: float

    @property
    def win_rate(self) -> float:
        return self.wins / self.total_games if self.total_games else 0.0

    def summary(self) -> str:
        return (
            f"Simulation ({self.strategy}): {self.total_games} games, "
            f"{self.wins} won, {self.losses} lost "
            f"({self.win_rate:.1%} win rate) | "
            f"{self.mean_moves:.1f} moves/game, "
            f"{self.total_ticks} ticks in {self.wall_time_seconds:.2f}s"
        )


def play_game(
    session: GameSession,
    strategy: Strategy,
    rng: np.random.Generator,
) -> None:
    """Drive ``session`` with ``strategy`` until the game is won or lost."""
    while not session.game_over:
        if session.flooding:
            session.tick()
            continue
        # An idle tick evaluates the win and loss conditions.
        session.tick()
        if session.game_over:
            break
        session.select_color(strategy(session, rng))


def simulate_games(
    *,
    num_games: int = 100,
    size: int = 12,
    num_colors: int = 3,
    strategy: str = "greedy",
    seed: int | None = 42,
) -> SimulationResult:
    """Autoplay *num_games* games on fresh boards and report the outcome.

    A single session is reused and reset between games, so ``best_time``
    reflects the fastest win of the batch.
    """
    if strategy not in STRATEGIES:
        raise ValueError(
            f"Unknown strategy {strategy!r}; choose from {sorted(STRATEGIES)}."
        )
    if num_games < 1:
        raise ValueError("num_games must be at least 1.")
    choose = STRATEGIES[strategy]
    rng = np.random.default_rng(seed)
    session = GameSession(
        config=SessionConfig(size=size, num_colors=num_colors, seed=seed),
    )

    wins = losses = total_moves = total_ticks = 0
    start = time.perf_counter()
    for game in range(num_games):
        if game:
            session.reset()
        play_game(session, choose, rng)
        wins += session.won_game
        losses += session.lost_game
        total_moves += session.moves_made
        total_ticks += session.elapsed_ticks

    elapsed = time.perf_counter() - start
    result = SimulationResult(
        strategy=strategy,
        total_games=num_games,
        wins=wins,
        losses=losses,
        mean_moves=total_moves / num_games,
        total_ticks=total_ticks,
        best_time=session.best_time,
        wall_time_seconds=elapsed,
    )
    logger.info(result.summary())
    return result
