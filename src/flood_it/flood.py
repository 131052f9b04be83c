"""Resumable breadth-first flood propagation."""

from __future__ import annotations

import enum
import logging
from collections import deque
from dataclasses import dataclass

from flood_it.errors import InvalidStateTransition
from flood_it.grid import Cell, Color, Grid

logger = logging.getLogger(__name__)


class EngineState(enum.Enum):
    """Whether a flood episode is in progress."""

    IDLE = "idle"
    ACTIVE = "active"


@dataclass(frozen=True)
class StepResult:
    """Outcome of a single :meth:`FloodEngine.step` call.

    ``touched_count`` is only set on the finalizing step. ``expanded`` is
    the key of the cell whose neighbors were examined, or ``None`` for the
    finalizing step and for a skipped duplicate.
    """

    finished: bool
    touched_count: int | None = None
    expanded: int | None = None


class FloodEngine:
    """Spreads a color outward from the origin, one cell per step.

    Work is split across ticks so a renderer can show the flood moving.
    Three structures track progress:

    * ``frontier`` -- FIFO of cell keys waiting to be expanded.
    * ``pending`` -- keys currently queued in the frontier.
    * ``visited`` -- keys whose expansion has completed.

    A key is moved from ``pending`` to ``visited`` exactly once, so no cell
    is queued twice within an episode and an episode takes exactly
    ``touched + 1`` steps.
    """

    def __init__(self, grid: Grid) -> None:
        self.grid = grid
        self.state = EngineState.IDLE
        self.target_color: Color | None = None
        self.touched_count = 0
        self.steps_taken = 0
        self._frontier: deque[int] = deque()
        self._pending: set[int] = set()
        self._visited: set[int] = set()

    @property
    def is_active(self) -> bool:
        return self.state == EngineState.ACTIVE

    @property
    def frontier(self) -> tuple[int, ...]:
        return tuple(self._frontier)

    @property
    def pending(self) -> frozenset[int]:
        return frozenset(self._pending)

    @property
    def visited(self) -> frozenset[int]:
        return frozenset(self._visited)

    def start_episode(self, origin: Cell, target_color: Color) -> None:
        """Begin flooding ``target_color`` outward from ``origin``.

        The origin is recolored immediately so the chosen color shows up
        before the propagation runs.
        """
        if self.is_active:
            raise InvalidStateTransition(
                "Cannot start a flood episode while one is in progress."
            )
        self.target_color = target_color
        self._pending.clear()
        self._visited.clear()
        self._frontier.clear()
        self._frontier.append(origin.key)
        self._pending.add(origin.key)
        origin.color = target_color
        self.steps_taken = 0
        self.state = EngineState.ACTIVE
        logger.debug(
            "Flood episode started at (%d, %d) with %s.",
            origin.x, origin.y, target_color.name,
        )

    def step(self) -> StepResult:
        """Expand the cell at the front of the frontier.

        Once the frontier is empty the next call finalizes the episode,
        records the number of cells touched and returns the engine to idle.
        """
        if not self.is_active:
            raise InvalidStateTransition("No flood episode is in progress.")
        self.steps_taken += 1

        if not self._frontier:
            self.touched_count = len(self._visited)
            self._pending.clear()
            self._visited.clear()
            self.state = EngineState.IDLE
            logger.debug(
                "Flood episode finished after %d steps, %d cells touched.",
                self.steps_taken, self.touched_count,
            )
            return StepResult(finished=True, touched_count=self.touched_count)

        key = self._frontier[0]
        if key in self._visited:
            self._frontier.popleft()
            return StepResult(finished=False)

        cell = self.grid.cell_for_key(key)
        target = self.target_color
        neighbors = cell.neighbors()

        for nb in neighbors:
            if nb.same_color(target):
                nb.make_flooded()

        cell.color = target

        for nb in neighbors:
            if (
                nb.is_flooded()
                and nb.key not in self._pending
                and nb.key not in self._visited
            ):
                self._frontier.append(nb.key)
                self._pending.add(nb.key)

        self._pending.discard(key)
        self._visited.add(key)
        self._frontier.popleft()
        return StepResult(finished=False, expanded=key)

    def abandon(self) -> None:
        """Drop an in-progress episode without draining it."""
        if self.is_active:
            logger.debug(
                "Flood episode abandoned with %d cells queued.", len(self._frontier),
            )
        self._frontier.clear()
        self._pending.clear()
        self._visited.clear()
        self.touched_count = 0
        self.steps_taken = 0
        self.state = EngineState.IDLE

    def run_to_completion(self) -> int:
        """Step until the episode finishes and return the touched count."""
        while True:
            result = self.step()
            if result.finished:
                return result.touched_count
