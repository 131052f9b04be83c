"""Square lattice of colored cells for the flood-it board."""

from __future__ import annotations

import enum
from collections.abc import Iterator, Sequence

import numpy as np

from flood_it.errors import OutOfBoundsError

# Board size must satisfy MIN_SIZE < size < MAX_SIZE.
MIN_SIZE = 4
MAX_SIZE = 50


class Color(enum.IntEnum):
    """Palette entries, in the order they are handed out to a game."""

    RED = 0
    GREEN = 1
    YELLOW = 2
    BLUE = 3
    CYAN = 4
    MAGENTA = 5


class _NoCell:
    """Marker for a missing neighbor beyond the grid edge.

    Answers every query as "not flooded" and "not the same color", so
    neighbor loops never need a ``None`` check.
    """

    __slots__ = ()

    exists = False

    def is_flooded(self) -> bool:
        return False

    def same_color(self, color: Color) -> bool:
        return False

    def make_flooded(self) -> None:
        pass

    def __repr__(self) -> str:
        return "NO_CELL"


NO_CELL = _NoCell()


class Cell:
    """A single square of the board.

    ``left``/``top``/``right``/``bottom`` are back-references into the
    owning grid, or :data:`NO_CELL` at the boundary.
    """

    __slots__ = ("x", "y", "key", "color", "flooded", "left", "top", "right", "bottom")

    exists = True

    def __init__(self, x: int, y: int, key: int, color: Color, flooded: bool = False) -> None:
        self.x = x
        self.y = y
        self.key = key
        self.color = color
        self.flooded = flooded
        self.left: Cell | _NoCell = NO_CELL
        self.top: Cell | _NoCell = NO_CELL
        self.right: Cell | _NoCell = NO_CELL
        self.bottom: Cell | _NoCell = NO_CELL

    def is_flooded(self) -> bool:
        return self.flooded

    def same_color(self, color: Color) -> bool:
        return self.color == color

    def make_flooded(self) -> None:
        """Mark this cell flooded; repeated calls are harmless."""
        self.flooded = True

    def neighbors(self) -> tuple[Cell | _NoCell, ...]:
        """Return the four neighbors in left, top, right, bottom order."""
        return (self.left, self.top, self.right, self.bottom)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "color": int(self.color)}

    def __repr__(self) -> str:
        state = "flooded" if self.flooded else "dry"
        return f"Cell({self.x}, {self.y}, {self.color.name}, {state})"


class Grid:
    """Fixed-size square board of :class:`Cell` objects.

    Cells are stored row-major, so ``cells[x + y * size]`` is the cell at
    ``(x, y)`` and its index doubles as its set key. The origin ``(0, 0)``
    is the only cell flooded at construction.
    """

    def __init__(
        self,
        size: int = 12,
        num_colors: int = 3,
        rng: np.random.Generator | None = None,
    ) -> None:
        if not MIN_SIZE < size < MAX_SIZE:
            raise ValueError(
                f"Grid size must be between {MIN_SIZE + 1} and {MAX_SIZE - 1}."
            )
        if not 1 <= num_colors <= len(Color):
            raise ValueError(f"num_colors must be between 1 and {len(Color)}.")
        self.size = size
        self.num_colors = num_colors
        rng = rng if rng is not None else np.random.default_rng()

        draws = rng.integers(num_colors, size=(size, size))
        self._cells: list[Cell] = [
            Cell(x, y, x + y * size, Color(int(draws[y, x])), flooded=(x == 0 and y == 0))
            for y in range(size)
            for x in range(size)
        ]
        self._link()

    def _link(self) -> None:
        """Wire up neighbor references by coordinate arithmetic."""
        n = self.size
        cells = self._cells
        for cell in cells:
            x, y, key = cell.x, cell.y, cell.key
            cell.left = cells[key - 1] if x > 0 else NO_CELL
            cell.right = cells[key + 1] if x < n - 1 else NO_CELL
            cell.top = cells[key - n] if y > 0 else NO_CELL
            cell.bottom = cells[key + n] if y < n - 1 else NO_CELL

    @property
    def cells(self) -> Sequence[Cell]:
        """All cells in row-major order."""
        return tuple(self._cells)

    @property
    def origin(self) -> Cell:
        return self._cells[0]

    @property
    def cell_count(self) -> int:
        return self.size * self.size

    def __iter__(self) -> Iterator[Cell]:
        return iter(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def in_bounds(self, x: int, y: int) -> bool:
        """Check whether a coordinate lies within the grid."""
        return 0 <= x < self.size and 0 <= y < self.size

    def cell_at(self, x: int, y: int) -> Cell:
        """Return the cell at ``(x, y)``.

        Raises :class:`OutOfBoundsError` for coordinates off the board.
        """
        if not self.in_bounds(x, y):
            raise OutOfBoundsError(x, y, self.size)
        return self._cells[x + y * self.size]

    def cell_for_key(self, key: int) -> Cell:
        return self._cells[key]

    def flooded_count(self) -> int:
        return sum(1 for c in self._cells if c.flooded)

    def colors(self) -> np.ndarray:
        """Return cell colors as an ``int8`` array indexed ``[y, x]``."""
        return np.array(
            [int(c.color) for c in self._cells], dtype=np.int8,
        ).reshape(self.size, self.size)

    def to_dict(self) -> dict:
        """Serialize the board to a dictionary of per-cell rows."""
        return {
            "size": self.size,
            "num_colors": self.num_colors,
            "cells": [
                [self._cells[x + y * self.size].to_dict() for x in range(self.size)]
                for y in range(self.size)
            ],
        }
